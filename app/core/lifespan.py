import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from urllib.parse import urlparse

from fastapi import FastAPI

from app.core.database import create_schema
from app.core.firebase import initialize_firebase
from app.core.logging import _initialize_logging


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
  """Set up logging, identity verification and (optionally) the schema after uvicorn starts."""
  from app.config import get_settings

  settings = get_settings()
  logger = logging.getLogger("app.core.lifespan")

  try:
    _initialize_logging(settings)
    logger.info("Startup complete - logging verified.")
    initialize_firebase()
  except Exception:  # noqa: BLE001
    # Log initialization failures but allow the app to continue starting.
    logger.warning("Initial startup setup failed; continuing without it.", exc_info=True)

  if not settings.gemini_api_key:
    logger.warning("GEMINI_API_KEY is not set; generation requests will fail until it is configured.")

  if settings.auto_create_schema:
    # Schema errors are fatal; requests would fail against missing tables anyway.
    logger.info("Auto-creating schema; LINGUA_PG_DSN=%s", _redact_dsn(settings.pg_dsn))
    await create_schema()

  yield


def _redact_dsn(raw: str | None) -> str:
  """Redact credentials from a DSN while keeping host/db visible."""
  if not raw:
    return "<unset>"

  parsed = urlparse(raw)
  if not parsed.scheme:
    return "<invalid>"

  user = parsed.username or ""
  host = parsed.hostname or ""
  port = f":{parsed.port}" if parsed.port else ""
  netloc = f"{user}@{host}{port}" if user else f"{host}{port}"
  database = parsed.path.lstrip("/")
  path = f"/{database}" if database else ""
  return f"{parsed.scheme}://{netloc}{path}"
