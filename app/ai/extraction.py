"""Extract JSON documents from free-form model output."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable
from typing import Any

from app.ai.errors import ExtractionError

logger = logging.getLogger(__name__)

_OPENING_FENCE_RE = re.compile(r"^```[ \t]*[A-Za-z0-9_+-]*[ \t]*\n?")
_CLOSING_FENCE_RE = re.compile(r"\n?[ \t]*```[ \t]*$")

_MISSING = object()

Strategy = Callable[[str], Any]


def _reject_constant(token: str) -> Any:
  # Python's json accepts NaN and Infinity; model output containing them is not JSON.
  raise ValueError(f"Non-JSON constant {token}")


def _loads(text: str) -> Any:
  """Parse a JSON object or array, returning ``_MISSING`` on any failure."""
  try:
    value = json.loads(text, parse_constant=_reject_constant)
  except ValueError:
    return _MISSING
  if not isinstance(value, dict | list):
    return _MISSING
  return value


def strip_code_fences(text: str) -> str:
  """Remove a leading and trailing Markdown code fence, with or without a language tag."""
  stripped = _OPENING_FENCE_RE.sub("", text.strip(), count=1)
  stripped = _CLOSING_FENCE_RE.sub("", stripped, count=1)
  return stripped.strip()


def _span(text: str, opening: str, closing: str) -> str | None:
  start = text.find(opening)
  end = text.rfind(closing)
  if start == -1 or end <= start:
    return None
  return text[start : end + 1]


def parse_direct(text: str) -> Any:
  return _loads(text.strip())


def parse_fenced(text: str) -> Any:
  return _loads(strip_code_fences(text))


def parse_object_span(text: str) -> Any:
  candidate = _span(strip_code_fences(text), "{", "}")
  if candidate is None:
    return _MISSING
  value = _loads(candidate)
  return value if isinstance(value, dict) else _MISSING


def parse_array_span(text: str) -> Any:
  candidate = _span(strip_code_fences(text), "[", "]")
  if candidate is None:
    return _MISSING
  value = _loads(candidate)
  return value if isinstance(value, list) else _MISSING


# Ordered by decreasing confidence; the first strategy that yields a document wins.
DEFAULT_STRATEGIES: tuple[tuple[str, Strategy], ...] = (
  ("direct", parse_direct),
  ("fenced", parse_fenced),
  ("object_span", parse_object_span),
  ("array_span", parse_array_span),
)


class ResponseExtractor:
  """Turn raw model text into a JSON object or array."""

  def __init__(self, strategies: tuple[tuple[str, Strategy], ...] = DEFAULT_STRATEGIES) -> None:
    self._strategies = strategies

  def extract(self, raw: str | None) -> dict[str, Any] | list[Any]:
    """Return the first document a strategy recovers, or raise ``ExtractionError``."""
    text = (raw or "").strip()
    if text:
      for name, strategy in self._strategies:
        value = strategy(text)
        if value is not _MISSING:
          logger.debug("Extracted %s document via %s strategy", type(value).__name__, name)
          return value

    raise ExtractionError(f"No JSON object or array found in model output ({len(text)} chars).")
