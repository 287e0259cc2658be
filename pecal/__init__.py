"""Pecal backend: task reminder dispatch pipeline."""

__version__ = "0.1.0"
