"""Repair extracted documents into the per-kind content shapes.

The validator never rejects a document. Missing or malformed fields are replaced
with safe defaults, and malformed quiz questions are dropped. Unknown keys are kept
so richer model output survives. Validating an already valid document returns an
equal document.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from app.ai.pipeline.contracts import ContentKind

logger = logging.getLogger(__name__)

DEFAULT_ACCURACY = 0.7
DEFAULT_FEEDBACK = "Good attempt - keep practicing!"
QUIZ_OPTION_COUNT = 4


def _as_dict(doc: Any) -> dict[str, Any]:
  return dict(doc) if isinstance(doc, dict) else {}


def _as_list(value: Any) -> list[Any]:
  return list(value) if isinstance(value, list) else []


def _as_text(value: Any, default: str = "") -> str:
  return value if isinstance(value, str) else default


def normalize_accuracy(value: Any) -> float:
  """Return ``value`` as a float in [0.0, 1.0], or the default score when it is not one."""
  if isinstance(value, bool) or not isinstance(value, int | float):
    return DEFAULT_ACCURACY
  score = float(value)
  if math.isnan(score) or score < 0.0 or score > 1.0:
    return DEFAULT_ACCURACY
  return score


def validate_lesson(doc: Any) -> dict[str, Any]:
  lesson = _as_dict(doc)
  # Collections default to empty lists, prose fields to empty strings.
  for key in ("vocabulary", "examples", "exercises"):
    lesson[key] = _as_list(lesson.get(key))
  for key in ("grammar", "culturalNotes"):
    lesson[key] = _as_text(lesson.get(key))
  return lesson


def _correct_index(value: Any) -> int | None:
  if isinstance(value, bool) or not isinstance(value, int | float):
    return None
  if isinstance(value, float) and not value.is_integer():
    return None
  index = int(value)
  if index < 0 or index >= QUIZ_OPTION_COUNT:
    return None
  return index


def _validate_question(item: Any) -> dict[str, Any] | None:
  if not isinstance(item, dict):
    return None
  question = item.get("question")
  options = item.get("options")
  correct = _correct_index(item.get("correctAnswer"))
  # A question needs text, four options and an in-range answer index.
  if not isinstance(question, str) or not question.strip():
    return None
  if not isinstance(options, list) or len(options) != QUIZ_OPTION_COUNT or correct is None:
    return None
  if not all(isinstance(option, str | int | float) and not isinstance(option, bool) for option in options):
    return None

  # Options are stored as strings and the answer index as an int.
  repaired = dict(item)
  repaired["options"] = [str(option) for option in options]
  repaired["correctAnswer"] = correct
  repaired["explanation"] = _as_text(item.get("explanation"))
  return repaired


def validate_quiz(doc: Any) -> list[dict[str, Any]]:
  """Keep only well-formed questions; an unusable batch becomes an empty quiz."""
  # Models sometimes wrap the array as {"questions": [...]}.
  if isinstance(doc, dict) and "questions" in doc:
    doc = doc.get("questions")
  # A one-item array inside prose is recovered as its lone question object.
  elif isinstance(doc, dict) and "question" in doc:
    doc = [doc]
  items = _as_list(doc)

  # Drop what cannot be answered instead of guessing at it.
  questions = [question for question in (_validate_question(item) for item in items) if question is not None]
  dropped = len(items) - len(questions)
  if dropped:
    logger.warning("Dropped %d malformed quiz question(s) of %d", dropped, len(items))
  return questions


def _validate_phoneme(item: Any) -> dict[str, Any] | None:
  if not isinstance(item, dict):
    return None
  phoneme = dict(item)
  phoneme["sound"] = _as_text(item.get("sound"))
  phoneme["accuracy"] = normalize_accuracy(item.get("accuracy"))
  phoneme["feedback"] = _as_text(item.get("feedback"))
  return phoneme


def validate_pronunciation(doc: Any) -> dict[str, Any]:
  feedback = _as_dict(doc)
  feedback["accuracy"] = normalize_accuracy(feedback.get("accuracy"))
  feedback["feedback"] = _as_text(feedback.get("feedback"), DEFAULT_FEEDBACK)
  # Nested lists keep only entries of the expected shape.
  feedback["suggestions"] = [item for item in _as_list(feedback.get("suggestions")) if isinstance(item, str)]
  phonemes = (_validate_phoneme(item) for item in _as_list(feedback.get("phonemes")))
  feedback["phonemes"] = [item for item in phonemes if item is not None]
  return feedback


def validate_conversation(doc: Any) -> dict[str, Any]:
  conversation = _as_dict(doc)
  conversation["context"] = _as_text(conversation.get("context"))
  conversation["vocabulary"] = _as_list(conversation.get("vocabulary"))
  # Script lines are keyed by language code, so only the container is enforced.
  conversation["script"] = _as_list(conversation.get("script"))
  conversation["culturalNotes"] = _as_text(conversation.get("culturalNotes"))
  return conversation


def validate_conversation_turn(doc: Any) -> str:
  return doc.strip() if isinstance(doc, str) else ""


class ContentValidator:
  """Dispatch repair rules by content kind."""

  _RULES = {
    ContentKind.LESSON: validate_lesson,
    ContentKind.QUIZ: validate_quiz,
    ContentKind.CONVERSATION: validate_conversation,
    ContentKind.CONVERSATION_TURN: validate_conversation_turn,
    ContentKind.PRONUNCIATION: validate_pronunciation,
  }

  def validate(self, kind: ContentKind, doc: Any) -> Any:
    return self._RULES[kind](doc)
