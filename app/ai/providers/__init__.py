"""Provider implementations."""

from app.ai.providers.base import AIModel, ModelResponse, Provider
from app.ai.providers.gemini import GeminiModel, GeminiProvider

__all__ = ["AIModel", "ModelResponse", "Provider", "GeminiModel", "GeminiProvider"]
