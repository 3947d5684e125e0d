"""Tests for layered JSON extraction from raw model output."""

from __future__ import annotations

import pytest

from app.ai.errors import ExtractionError
from app.ai.extraction import _MISSING, DEFAULT_STRATEGIES, ResponseExtractor, parse_array_span, parse_direct, parse_fenced, parse_object_span, strip_code_fences


def test_direct_json_object_is_returned() -> None:
  assert ResponseExtractor().extract('  {"grammar": "ok", "vocabulary": []}  ') == {"grammar": "ok", "vocabulary": []}


def test_fenced_json_with_language_tag() -> None:
  assert ResponseExtractor().extract('```json\n{"grammar":"ok"}\n```') == {"grammar": "ok"}


def test_fenced_json_without_language_tag() -> None:
  assert ResponseExtractor().extract('```\n[{"question": "Hola?"}]\n```') == [{"question": "Hola?"}]


def test_object_embedded_in_prose() -> None:
  raw = 'Sure! Here is your lesson:\n{"grammar": "ser vs estar", "examples": ["Soy Ana"]}\nHope it helps.'
  assert ResponseExtractor().extract(raw) == {"grammar": "ser vs estar", "examples": ["Soy Ana"]}


def test_array_embedded_in_prose() -> None:
  raw = 'Questions follow: [{"question": "a"}, {"question": "b"}] -- enjoy'
  assert ResponseExtractor().extract(raw) == [{"question": "a"}, {"question": "b"}]


def test_object_span_runs_before_array_span() -> None:
  # Both spans exist; the object strategy has higher priority.
  raw = 'Result: {"items": [1, 2]} trailing'
  assert ResponseExtractor().extract(raw) == {"items": [1, 2]}


def test_array_span_used_when_object_span_is_not_json() -> None:
  raw = 'Notes {not json} and the data: [1, 2, 3]'
  assert ResponseExtractor().extract(raw) == [1, 2, 3]


@pytest.mark.parametrize("raw", ["", "   ", "no json here at all", "{broken: json", "42", '"just a string"', "true", "null"])
def test_text_without_object_or_array_fails(raw: str) -> None:
  with pytest.raises(ExtractionError):
    ResponseExtractor().extract(raw)


def test_none_input_fails() -> None:
  with pytest.raises(ExtractionError):
    ResponseExtractor().extract(None)


def test_non_standard_constants_are_rejected() -> None:
  with pytest.raises(ExtractionError):
    ResponseExtractor().extract('{"accuracy": NaN}')


def test_strategies_return_sentinel_instead_of_raising() -> None:
  # Each strategy swallows its own parse failure so the next one can run.
  for _name, strategy in DEFAULT_STRATEGIES:
    assert strategy("definitely {not} [json") is _MISSING
  assert parse_direct("```json\n{}\n```") is _MISSING
  assert parse_fenced("```json\n{}\n```") == {}
  assert parse_object_span("x {\"a\": 1} y") == {"a": 1}
  assert parse_array_span("x [1] y") == [1]


def test_strategy_order_is_direct_fenced_object_array() -> None:
  assert [name for name, _ in DEFAULT_STRATEGIES] == ["direct", "fenced", "object_span", "array_span"]


def test_strip_code_fences_keeps_unfenced_text() -> None:
  assert strip_code_fences('{"a": 1}') == '{"a": 1}'
  assert strip_code_fences('```JSON\n{"a": 1}\n```') == '{"a": 1}'


def test_custom_strategy_order_is_respected() -> None:
  extractor = ResponseExtractor(strategies=(("array_span", parse_array_span),))
  with pytest.raises(ExtractionError):
    extractor.extract('{"only": "object"}')
