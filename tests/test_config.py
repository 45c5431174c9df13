import logging

from flashdeck.core.config import AppSettings, DatabaseSettings, StudySettings
from flashdeck.core.logging import ContextFilter


def test_database_url_wins(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///./study.db")
    assert DatabaseSettings().connection_string == "sqlite+aiosqlite:///./study.db"


def test_postgres_url_from_parts(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("POSTGRES_HOST", "db")
    monkeypatch.setenv("POSTGRES_DB_PORT", "6543")
    monkeypatch.setenv("POSTGRES_DB_NAME", "cards")
    monkeypatch.setenv("POSTGRES_DB_USER", "alice")
    monkeypatch.setenv("POSTGRES_DB_PASSWORD", "pw")
    assert (
        DatabaseSettings().connection_string
        == "postgresql+asyncpg://alice:pw@db:6543/cards"
    )


def test_study_settings(monkeypatch):
    monkeypatch.setenv("STUDY_QUEUE_CONCURRENCY", "4")
    study = StudySettings()
    assert study.queue_concurrency == 4
    assert study.session_idle_seconds == 1800


def test_is_production(monkeypatch):
    monkeypatch.setenv("MODE", "dev")
    assert AppSettings().is_production is False
    monkeypatch.setenv("MODE", "prod")
    assert AppSettings().is_production is True


def test_context_filter_fills_missing_fields():
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
    assert ContextFilter().filter(record) is True
    assert (record.session_id, record.user_id) == ("-", "-")

    record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
    record.session_id = "abc"
    ContextFilter().filter(record)
    assert record.session_id == "abc"
