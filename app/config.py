"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from app.utils.env import default_env_path, load_env_file

load_env_file(default_env_path(), override=False)

_DEFAULT_ORIGINS = "http://localhost:3000,http://localhost:5173"


@dataclass(frozen=True)
class Settings:
  """Typed settings for the Lingua service."""

  environment: str
  debug: bool
  allowed_origins: tuple[str, ...]
  log_dir: str
  log_max_bytes: int
  log_backup_count: int
  log_http_4xx: bool
  pg_dsn: str | None
  pg_connect_timeout: int
  auto_create_schema: bool
  gemini_api_key: str | None
  gemini_model: str
  model_timeout_seconds: float
  firebase_project_id: str | None
  firebase_service_account_json_path: str | None


@dataclass(frozen=True)
class DatabaseSettings:
  """Typed settings for database connectivity."""

  debug: bool
  pg_dsn: str | None
  pg_connect_timeout: int


def _parse_origins(raw: str | None) -> tuple[str, ...]:
  origins = [origin.strip() for origin in (raw or _DEFAULT_ORIGINS).split(",") if origin.strip()]

  if not origins:
    raise ValueError("LINGUA_ALLOWED_ORIGINS must include at least one origin.")

  if "*" in origins:
    raise ValueError("LINGUA_ALLOWED_ORIGINS must not include wildcard origins.")

  return tuple(origins)


def _parse_bool(raw: str | None) -> bool:
  """Parse a boolean-ish string from environment variables."""

  if raw is None:
    return False

  normalized = raw.strip().lower()
  return normalized in {"1", "true", "yes", "on"}


def _optional_str(raw: str | None) -> str | None:
  if raw is None:
    return None
  value = raw.strip()
  if value == "":
    return None
  return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  """Load settings once per process."""

  environment = os.getenv("LINGUA_ENV", "development").lower()
  debug = _parse_bool(os.getenv("LINGUA_DEBUG"))

  log_max_bytes = int(os.getenv("LINGUA_LOG_MAX_BYTES", "5242880"))  # 5MB default
  if log_max_bytes <= 0:
    raise ValueError("LINGUA_LOG_MAX_BYTES must be a positive integer.")

  log_backup_count = int(os.getenv("LINGUA_LOG_BACKUP_COUNT", "10"))
  if log_backup_count < 0:
    raise ValueError("LINGUA_LOG_BACKUP_COUNT must be zero or a positive integer.")

  model_timeout_seconds = float(os.getenv("LINGUA_MODEL_TIMEOUT_SECONDS", "60"))
  if model_timeout_seconds <= 0:
    raise ValueError("LINGUA_MODEL_TIMEOUT_SECONDS must be a positive number.")

  database = get_database_settings()

  return Settings(
    environment=environment,
    debug=debug,
    allowed_origins=_parse_origins(os.getenv("LINGUA_ALLOWED_ORIGINS")),
    log_dir=(os.getenv("LINGUA_LOG_DIR") or "./logs").strip(),
    log_max_bytes=log_max_bytes,
    log_backup_count=log_backup_count,
    # Allow opt-in logging of 4xx HTTPExceptions for diagnostics.
    log_http_4xx=_parse_bool(os.getenv("LINGUA_LOG_HTTP_4XX")),
    pg_dsn=database.pg_dsn,
    pg_connect_timeout=database.pg_connect_timeout,
    auto_create_schema=_parse_bool(os.getenv("LINGUA_AUTO_CREATE_SCHEMA")),
    # A missing key is reported per request by the model invoker, never at startup.
    gemini_api_key=_optional_str(os.getenv("GEMINI_API_KEY")),
    gemini_model=(os.getenv("GEMINI_MODEL") or "gemini-2.5-flash").strip(),
    model_timeout_seconds=model_timeout_seconds,
    firebase_project_id=_optional_str(os.getenv("LINGUA_FIREBASE_PROJECT_ID")),
    firebase_service_account_json_path=_optional_str(os.getenv("LINGUA_FIREBASE_SERVICE_ACCOUNT_JSON_PATH")),
  )


@lru_cache(maxsize=1)
def get_database_settings() -> DatabaseSettings:
  """Load database settings without requiring web-runtime configuration like CORS."""
  debug = _parse_bool(os.getenv("LINGUA_DEBUG"))
  pg_connect_timeout = int(os.getenv("LINGUA_PG_CONNECT_TIMEOUT", "10"))
  if pg_connect_timeout <= 0:
    raise ValueError("LINGUA_PG_CONNECT_TIMEOUT must be a positive integer.")

  pg_dsn = _optional_str(os.getenv("LINGUA_PG_DSN")) or _optional_str(os.getenv("DATABASE_URL"))

  return DatabaseSettings(debug=debug, pg_dsn=pg_dsn, pg_connect_timeout=pg_connect_timeout)
