from setuptools import setup, find_packages

setup(
    name="pecal-reminders",
    version="0.1.0",
    packages=find_packages(include=["pecal", "pecal.*"]),
    python_requires=">=3.9",
    install_requires=[
        "fastapi",
        "uvicorn",
        "sqlalchemy>=2.0",
        "psycopg2-binary",
        "redis>=4.2",
        "pydantic>=2",
        "pydantic-settings",
        "python-dotenv",
        "celery",
        "firebase-admin>=6.2",
        "prometheus-client",
        "prometheus-fastapi-instrumentator",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
            "fakeredis>=2.10",
        ],
    },
)
