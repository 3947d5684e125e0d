"""Shared FastAPI dependencies for the generation pipeline."""

from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import Depends, HTTPException, status

from app.ai.invoker import ModelInvoker, build_model_invoker
from app.ai.orchestrator import ContentOrchestrator
from app.config import get_settings
from app.storage.content_repo import ContentRepository
from app.storage.factory import _get_repo

logger = logging.getLogger(__name__)


def get_repository() -> ContentRepository:
  """Resolve the persistence collaborator for this request."""
  try:
    return _get_repo(get_settings())
  except (ValueError, RuntimeError) as exc:
    logger.error("Content repository unavailable: %s", exc)
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Content storage unavailable") from exc


@lru_cache(maxsize=1)
def get_model_invoker() -> ModelInvoker:
  """Build the model invoker once per process."""
  invoker = build_model_invoker(get_settings())
  logger.info("Model invoker ready model=%s", invoker.model_name or "unavailable")
  return invoker


def get_orchestrator(repo: ContentRepository = Depends(get_repository), invoker: ModelInvoker = Depends(get_model_invoker)) -> ContentOrchestrator:  # noqa: B008
  return ContentOrchestrator(invoker=invoker, repo=repo)
