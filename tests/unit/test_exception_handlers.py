"""Unit tests for API exception sanitization behavior."""

from __future__ import annotations

from app.core.exceptions import _error_payload, _sanitize_validation_errors, _validation_message


def test_sanitize_validation_errors_removes_input_and_serializes_exception_ctx() -> None:
  """Ensure validation errors stay JSON-serializable and redact raw request payloads."""
  errors = [{"type": "value_error", "loc": ("body", "level"), "msg": "Value error, Unknown level.", "input": {"level": "EXPERT"}, "ctx": {"error": ValueError("Unknown level."), "input": "EXPERT"}}]
  sanitized = _sanitize_validation_errors(errors)
  assert "input" not in sanitized[0]
  assert sanitized[0]["ctx"]["error"] == "ValueError: Unknown level."
  assert "input" not in sanitized[0]["ctx"]
  assert sanitized[0]["loc"] == ["body", "level"]


def test_validation_message_names_the_first_field() -> None:
  assert _validation_message([{"loc": ["body", "languageId"], "msg": "Field required"}]) == "languageId: Field required"
  assert _validation_message([{"loc": ["body"], "msg": "Field required"}]) == "Field required"
  assert _validation_message([]) == "Invalid request"


def test_error_payload_envelope() -> None:
  assert _error_payload("Lesson not found", request_id="req-1") == {"success": False, "message": "Lesson not found", "requestId": "req-1"}
  assert _error_payload("Internal Server Error") == {"success": False, "message": "Internal Server Error"}
