"""Model invocation with a fixed failure contract."""

from __future__ import annotations

import asyncio
import logging

from app.ai.errors import ConfigurationError, UpstreamError, classify_upstream_failure
from app.ai.pipeline.contracts import GenerationConfig
from app.ai.providers.base import AIModel
from app.ai.providers.gemini import GeminiProvider
from app.config import Settings

logger = logging.getLogger(__name__)

MISSING_KEY_MESSAGE = "GEMINI_API_KEY is not configured."


class ModelInvoker:
  """Send a prompt to the model and return its raw text.

  Failures are reduced to two types. ``ConfigurationError`` means no usable model is
  configured and is raised before any network attempt. ``UpstreamError`` covers
  timeouts, network failures and error responses, and is the only error a caller
  may choose to retry. The invoker itself never retries.
  """

  def __init__(self, model: AIModel | None, *, timeout_seconds: float = 60.0, unavailable_reason: str = MISSING_KEY_MESSAGE) -> None:
    self._model = model
    self._timeout_seconds = timeout_seconds
    self._unavailable_reason = unavailable_reason

  @property
  def model_name(self) -> str | None:
    return self._model.name if self._model is not None else None

  async def invoke(self, prompt: str, config: GenerationConfig) -> str:
    """Return the raw text produced for ``prompt``."""
    if self._model is None:
      raise ConfigurationError(self._unavailable_reason)

    try:
      response = await asyncio.wait_for(self._model.generate(prompt, config), timeout=self._timeout_seconds)
    except TimeoutError as exc:
      logger.warning("Model call timed out model=%s after %.1fs", self.model_name, self._timeout_seconds)
      raise UpstreamError(f"Model call timed out after {self._timeout_seconds:.1f}s", reason="timeout") from exc
    except ConfigurationError:
      raise
    except Exception as exc:  # noqa: BLE001
      reason = classify_upstream_failure(exc)
      logger.warning("Model call failed model=%s reason=%s error_type=%s", self.model_name, reason, type(exc).__name__)
      raise UpstreamError(f"Model call failed: {exc}", reason=reason) from exc

    if response.usage:
      logger.debug("Model usage model=%s usage=%s", self.model_name, response.usage)
    return response.content or ""


def build_model_invoker(settings: Settings) -> ModelInvoker:
  """Build the invoker for the configured Gemini model.

  A missing key or an unusable model id does not fail here; ``invoke`` raises
  ``ConfigurationError`` instead so routes that never call the model keep working.
  """
  if not settings.gemini_api_key:
    return ModelInvoker(None, timeout_seconds=settings.model_timeout_seconds)

  try:
    model = GeminiProvider(api_key=settings.gemini_api_key).get_model(settings.gemini_model)
  except ValueError as exc:
    logger.error("Gemini model unavailable: %s", exc)
    return ModelInvoker(None, timeout_seconds=settings.model_timeout_seconds, unavailable_reason=str(exc))

  return ModelInvoker(model, timeout_seconds=settings.model_timeout_seconds)
