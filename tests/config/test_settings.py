"""Tests for environment-driven settings."""

from coachsync.config.settings import Settings


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.store_backend == "memory"
    assert settings.recent_matches_limit == 10
    assert settings.coach_matches_limit == 50
    assert settings.debounce_delay_ms == 300
    assert settings.database_url.startswith("sqlite:///")


def test_environment_prefix(monkeypatch):
    monkeypatch.setenv("COACHSYNC_STORE_BACKEND", "sql")
    monkeypatch.setenv("COACHSYNC_RECENT_MATCHES_LIMIT", "6")
    monkeypatch.setenv("COACHSYNC_DATABASE_URL", "sqlite:///:memory:")

    settings = Settings(_env_file=None)

    assert settings.store_backend == "sql"
    assert settings.recent_matches_limit == 6
    assert settings.database_url == "sqlite:///:memory:"


def test_log_level_is_normalized():
    assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"


def test_invalid_log_level_falls_back_to_info():
    assert Settings(_env_file=None, log_level="chatty").log_level == "INFO"
