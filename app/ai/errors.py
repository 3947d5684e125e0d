"""Error taxonomy for the content generation pipeline."""

from __future__ import annotations

from collections.abc import Iterable

_TIMEOUT_HINTS: tuple[str, ...] = ("timeout", "timed out", "deadline exceeded")
_QUOTA_HINTS: tuple[str, ...] = ("429", "too many requests", "rate limit", "quota", "resource exhausted", "resource_exhausted")
_NETWORK_HINTS: tuple[str, ...] = ("connection", "network", "unreachable", "name resolution", "ssl")


class PipelineError(Exception):
  """Base class for failures raised by the generation pipeline."""


class ConfigurationError(PipelineError):
  """No usable model is configured (missing key or model id); raised before any network attempt."""


class UpstreamError(PipelineError):
  """The model API failed (network, timeout, quota or an error response)."""

  def __init__(self, message: str, *, reason: str = "upstream") -> None:
    super().__init__(message)
    self.reason = reason


class ExtractionError(PipelineError):
  """No parsing strategy produced a JSON document from the model output."""


class ContentNotFoundError(PipelineError):
  """A referenced language or lesson does not exist."""

  def __init__(self, entity: str, entity_id: str) -> None:
    super().__init__(f"{entity} not found: {entity_id}")
    self.entity = entity
    self.entity_id = entity_id


def _match_hint(message: str, hints: Iterable[str]) -> bool:
  """Return True when any hint appears in the message."""
  for hint in hints:
    if hint in message:
      return True
  return False


def classify_upstream_failure(exc: BaseException) -> str:
  """Label an SDK failure as timeout, quota, network or a generic upstream error."""
  message = f"{type(exc).__name__} {exc}".lower()
  if _match_hint(message, _TIMEOUT_HINTS):
    return "timeout"
  if _match_hint(message, _QUOTA_HINTS):
    return "quota"
  if _match_hint(message, _NETWORK_HINTS):
    return "network"
  return "upstream"
