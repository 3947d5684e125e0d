"""Gemini provider implementation using the google-genai SDK."""

from __future__ import annotations

import logging
from typing import Any, Final

from google import genai

from app.ai.pipeline.contracts import GenerationConfig
from app.ai.providers.base import AIModel, ModelResponse, Provider

logger = logging.getLogger(__name__)


class GeminiModel(AIModel):
  """Gemini model client."""

  def __init__(self, name: str, api_key: str) -> None:
    self.name: str = name
    self._client = genai.Client(api_key=api_key)

  async def generate(self, prompt: str, config: GenerationConfig) -> ModelResponse:
    """Generate a text response, asking for JSON output when strict mode is on."""
    generation_config: dict[str, Any] = {"max_output_tokens": config.max_output_tokens, "temperature": config.temperature}
    if config.strict_json:
      generation_config["response_mime_type"] = "application/json"

    # Use the async client to avoid blocking the asyncio event loop.
    response = await self._client.aio.models.generate_content(model=self.name, contents=prompt, config=generation_config)
    text = response.text or ""
    logger.debug("Gemini response model=%s chars=%d", self.name, len(text))

    usage = None
    if response.usage_metadata:
      usage = {"prompt_tokens": response.usage_metadata.prompt_token_count, "completion_tokens": response.usage_metadata.candidates_token_count, "total_tokens": response.usage_metadata.total_token_count}
    return ModelResponse(content=text, usage=usage)


class GeminiProvider(Provider):
  """Gemini provider."""

  _DEFAULT_MODEL: Final[str] = "gemini-2.5-flash"

  def __init__(self, api_key: str) -> None:
    self.name: str = "gemini"
    self._api_key = api_key

  def get_model(self, model: str | None = None) -> AIModel:
    """Return a Gemini model client.

    Any model id is accepted; an id the API does not serve fails at call time as an upstream error.
    """
    model_name = (model or self._DEFAULT_MODEL).strip()
    if not model_name or any(char.isspace() for char in model_name):
      raise ValueError(f"Invalid Gemini model id {model_name!r}.")

    return GeminiModel(model_name, api_key=self._api_key)
