"""Environment parsing for service settings."""

from __future__ import annotations

import pytest

from app.config import get_database_settings, get_settings


@pytest.fixture(autouse=True)
def _fresh_settings():
  get_settings.cache_clear()
  get_database_settings.cache_clear()
  yield
  get_settings.cache_clear()
  get_database_settings.cache_clear()


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
  for name in ("GEMINI_API_KEY", "GEMINI_MODEL", "LINGUA_ALLOWED_ORIGINS", "LINGUA_MODEL_TIMEOUT_SECONDS", "LINGUA_AUTO_CREATE_SCHEMA"):
    monkeypatch.delenv(name, raising=False)

  settings = get_settings()

  assert settings.gemini_api_key is None
  assert settings.gemini_model == "gemini-2.5-flash"
  assert settings.allowed_origins == ("http://localhost:3000", "http://localhost:5173")
  assert settings.model_timeout_seconds == 60.0
  assert settings.auto_create_schema is False


def test_blank_api_key_counts_as_missing(monkeypatch: pytest.MonkeyPatch) -> None:
  monkeypatch.setenv("GEMINI_API_KEY", "   ")
  assert get_settings().gemini_api_key is None


def test_wildcard_origin_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
  monkeypatch.setenv("LINGUA_ALLOWED_ORIGINS", "https://app.example.com,*")
  with pytest.raises(ValueError):
    get_settings()


def test_non_positive_timeout_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
  monkeypatch.setenv("LINGUA_MODEL_TIMEOUT_SECONDS", "0")
  with pytest.raises(ValueError):
    get_settings()


def test_database_url_fallback(monkeypatch: pytest.MonkeyPatch) -> None:
  monkeypatch.delenv("LINGUA_PG_DSN", raising=False)
  monkeypatch.setenv("DATABASE_URL", "postgresql://lingua@localhost/lingua")
  assert get_database_settings().pg_dsn == "postgresql://lingua@localhost/lingua"
