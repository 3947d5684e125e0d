from app.config import Settings
from app.storage.content_repo import ContentRepository
from app.storage.postgres_content_repo import PostgresContentRepository


def _get_repo(settings: Settings) -> ContentRepository:
  """Return the active content repository."""

  if not settings.pg_dsn:
    raise ValueError("LINGUA_PG_DSN must be set to enable Postgres persistence.")

  return PostgresContentRepository()
