"""Deterministic placeholder content used when model output cannot be parsed."""

from __future__ import annotations

from typing import Any

from app.ai.pipeline.contracts import ContentKind, PromptContext
from app.ai.validation import DEFAULT_ACCURACY

LESSON_FALLBACK_GRAMMAR = "Lesson generated but JSON formatting failed. Please retry."
CONVERSATION_FALLBACK_CONTEXT = "Practice conversation"
CONVERSATION_TURN_FALLBACK = "Sorry, I could not come up with a reply just now. Please try sending your message again."
PRONUNCIATION_FALLBACK_SUGGESTIONS = (
  "Speak slowly and clearly, then speed up gradually",
  "Repeat the phrase 3 times focusing on vowel sounds",
  "Record again in a quiet room with mic close to you",
)


def _lesson(_context: PromptContext) -> dict[str, Any]:
  return {"vocabulary": [], "grammar": LESSON_FALLBACK_GRAMMAR, "examples": [], "exercises": [], "culturalNotes": ""}


def _quiz(_context: PromptContext) -> list[dict[str, Any]]:
  return []


def _conversation(context: PromptContext) -> dict[str, Any]:
  code = context.language_code or "target"
  return {
    "context": CONVERSATION_FALLBACK_CONTEXT,
    "vocabulary": [],
    "script": [{code: "Hola", "english": "Hello"}, {code: "¿Cómo estás?", "english": "How are you?"}],
    "culturalNotes": "",
  }


def _conversation_turn(_context: PromptContext) -> str:
  return CONVERSATION_TURN_FALLBACK


def _pronunciation(context: PromptContext) -> dict[str, Any]:
  target = context.target_text
  words = target.split()
  return {
    "accuracy": DEFAULT_ACCURACY,
    "feedback": f'We received your pronunciation attempt for "{target}". Here are general tips to improve.',
    "suggestions": list(PRONUNCIATION_FALLBACK_SUGGESTIONS),
    "phonemes": [{"sound": words[0] if words else target, "accuracy": DEFAULT_ACCURACY, "feedback": "Focus on clear articulation."}],
  }


class FallbackContentProvider:
  """Build schema-valid placeholder content from local information only."""

  _BUILDERS = {
    ContentKind.LESSON: _lesson,
    ContentKind.QUIZ: _quiz,
    ContentKind.CONVERSATION: _conversation,
    ContentKind.CONVERSATION_TURN: _conversation_turn,
    ContentKind.PRONUNCIATION: _pronunciation,
  }

  def fallback(self, kind: ContentKind, context: PromptContext) -> Any:
    return self._BUILDERS[kind](context)
