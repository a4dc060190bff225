"""
tests/test_db_config.py

Pytest tests for database URL resolution.
"""

from __future__ import annotations

import pytest

from db import config as db_config

URL_VARS = ("DATABASE_URL", "CLOUD_DATABASE_URL", "LOCAL_DATABASE_URL", "ENVIRONMENT")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch) -> None:
    monkeypatch.setattr(db_config, "load_env_files", lambda: None)
    for name in URL_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("postgres://u:p@h/db", "postgresql+psycopg://u:p@h/db"),
        ("postgresql://u:p@h/db", "postgresql+psycopg://u:p@h/db"),
        ("postgresql+psycopg://u:p@h/db", "postgresql+psycopg://u:p@h/db"),
    ],
)
def test_normalize_postgres_url(url: str, expected: str) -> None:
    assert db_config.normalize_postgres_url(url) == expected


def test_direct_url_wins(monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "  postgres://u:p@direct/db  ")
    monkeypatch.setenv("LOCAL_DATABASE_URL", "postgres://u:p@local/db")
    assert db_config.resolve_database_url() == "postgresql+psycopg://u:p@direct/db"


def test_blank_direct_url_falls_through_to_local(monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "   ")
    monkeypatch.setenv("LOCAL_DATABASE_URL", "postgres://u:p@local/db")
    assert db_config.resolve_database_url() == "postgresql+psycopg://u:p@local/db"


def test_cloud_url_only_in_cloud_environments(monkeypatch) -> None:
    monkeypatch.setenv("CLOUD_DATABASE_URL", "postgres://u:p@cloud/db")
    monkeypatch.setenv("LOCAL_DATABASE_URL", "postgres://u:p@local/db")
    assert db_config.resolve_database_url().endswith("@local/db")

    monkeypatch.setenv("ENVIRONMENT", "production")
    assert db_config.resolve_database_url().endswith("@cloud/db")


def test_missing_url_raises() -> None:
    with pytest.raises(RuntimeError, match="No database URL configured"):
        db_config.resolve_database_url()
