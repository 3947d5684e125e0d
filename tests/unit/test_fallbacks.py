"""Fallback content must always pass its kind's validator unchanged."""

from __future__ import annotations

import pytest

from app.ai.fallbacks import CONVERSATION_TURN_FALLBACK, LESSON_FALLBACK_GRAMMAR, FallbackContentProvider
from app.ai.pipeline.contracts import ContentKind, PromptContext
from app.ai.validation import ContentValidator

CONTEXT = PromptContext(language_name="Spanish", language_code="es", target_text="Hola amigo")


@pytest.mark.parametrize("kind", list(ContentKind))
def test_fallback_is_schema_valid(kind: ContentKind) -> None:
  content = FallbackContentProvider().fallback(kind, CONTEXT)
  assert ContentValidator().validate(kind, content) == content


def test_lesson_fallback_explains_failure() -> None:
  lesson = FallbackContentProvider().fallback(ContentKind.LESSON, CONTEXT)
  assert lesson["grammar"] == LESSON_FALLBACK_GRAMMAR
  assert lesson["vocabulary"] == [] and lesson["examples"] == [] and lesson["exercises"] == []


def test_quiz_fallback_is_empty() -> None:
  assert FallbackContentProvider().fallback(ContentKind.QUIZ, CONTEXT) == []


def test_pronunciation_fallback_uses_first_word() -> None:
  feedback = FallbackContentProvider().fallback(ContentKind.PRONUNCIATION, CONTEXT)
  assert feedback["accuracy"] == 0.7
  assert len(feedback["suggestions"]) == 3
  assert feedback["phonemes"][0]["sound"] == "Hola"
  assert "Hola amigo" in feedback["feedback"]


def test_conversation_fallback_keys_script_by_language_code() -> None:
  conversation = FallbackContentProvider().fallback(ContentKind.CONVERSATION, CONTEXT)
  assert conversation["script"][0] == {"es": "Hola", "english": "Hello"}

  unknown = FallbackContentProvider().fallback(ContentKind.CONVERSATION, PromptContext(language_name="Spanish"))
  assert "target" in unknown["script"][0]


def test_conversation_turn_fallback_is_text() -> None:
  assert FallbackContentProvider().fallback(ContentKind.CONVERSATION_TURN, CONTEXT) == CONVERSATION_TURN_FALLBACK


def test_fallbacks_are_fresh_objects() -> None:
  provider = FallbackContentProvider()
  first = provider.fallback(ContentKind.LESSON, CONTEXT)
  first["vocabulary"].append("mutated")
  assert provider.fallback(ContentKind.LESSON, CONTEXT)["vocabulary"] == []
