# tests/test_timezone.py

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from pecal.core.config import settings
from pecal.utils.timezone import (
    parse_datetime_to_unix,
    resolve_offset_minutes,
    sanitize_reminder_minutes,
    to_local_naive,
)

from .conftest import START_TIME, START_UNIX


def test_naive_string_uses_fixed_offset() -> None:
    assert parse_datetime_to_unix(START_TIME) == START_UNIX
    assert parse_datetime_to_unix("2025-01-10T09:00") == START_UNIX
    assert parse_datetime_to_unix("2025-01-10 09:00:00.000Z") == START_UNIX


def test_naive_and_aware_datetimes() -> None:
    assert parse_datetime_to_unix(datetime(2025, 1, 10, 9, 0, 0)) == START_UNIX
    aware = datetime(2025, 1, 10, 0, 0, 0, tzinfo=timezone.utc)
    assert parse_datetime_to_unix(aware) == START_UNIX


@pytest.mark.parametrize("value", [None, "", "tomorrow", "2025-13-40 09:00:00", "10/01/2025 09:00", 12345])
def test_unparseable_start_times(value) -> None:
    assert parse_datetime_to_unix(value) is None


def test_offset_out_of_range_falls_back() -> None:
    assert resolve_offset_minutes(-300) == -300
    assert resolve_offset_minutes(5000) == 540


def test_offset_read_from_core_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "REMINDER_DEFAULT_TZ_OFFSET_MINUTES", 0)
    assert resolve_offset_minutes() == 0
    assert parse_datetime_to_unix(START_TIME) == START_UNIX + 9 * 3600


def test_to_local_naive() -> None:
    naive = datetime(2025, 1, 10, 9, 0)
    assert to_local_naive(naive) is naive
    aware = datetime(2025, 1, 10, 0, 0, tzinfo=timezone.utc)
    assert to_local_naive(aware) == naive
    assert to_local_naive(aware, offset_minutes=-60) == datetime(2025, 1, 9, 23, 0)


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, 0),
        (10, 10),
        ("15", 15),
        (" 30 ", 30),
        (12.9, 12),
        (10080, 10080),
        (10081, None),
        (-1, None),
        ("", None),
        (None, None),
        ("abc", None),
        (float("nan"), None),
        (True, None),
    ],
)
def test_sanitize_reminder_minutes(value, expected) -> None:
    assert sanitize_reminder_minutes(value) == expected
