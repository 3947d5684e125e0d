"""Storage interfaces and records for generated learning content."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol


@dataclass(frozen=True)
class LanguageRecord:
  """Language a learner studies."""

  language_id: str
  name: str
  code: str


@dataclass(frozen=True)
class LessonRecord:
  """Record stored in the lessons table."""

  lesson_id: str
  title: str
  description: str | None
  language_id: str
  level: str
  content: dict[str, Any] | None
  created_at: datetime | None = None
  language: LanguageRecord | None = None


@dataclass(frozen=True)
class QuizRecord:
  """Record stored in the quizzes table; at most one per lesson."""

  quiz_id: str
  lesson_id: str
  questions: list[dict[str, Any]]


@dataclass(frozen=True)
class ProgressRecord:
  """Learner progress on a lesson."""

  progress_id: str
  user_id: str
  lesson_id: str
  score: int
  completed: bool


@dataclass(frozen=True)
class ConversationRecord:
  """Generated conversation scenario."""

  conversation_id: str
  user_id: str
  transcript: dict[str, Any]


@dataclass(frozen=True)
class ConversationExchangeRecord:
  """One learner message and the assistant reply."""

  exchange_id: str
  user_id: str
  language_id: str
  user_message: str
  ai_response: str


@dataclass(frozen=True)
class PronunciationFeedbackRecord:
  """Pronunciation feedback with its serialized document."""

  feedback_id: str
  user_id: str
  sentence: str
  accuracy: float
  feedback: str


class ContentRepository(Protocol):
  """Repository contract consumed by the content orchestrator."""

  async def find_language_by_id(self, language_id: str) -> LanguageRecord | None:
    """Fetch a language by identifier."""

  async def create_lesson(self, *, title: str, description: str | None, language_id: str, level: str, content: dict[str, Any]) -> LessonRecord:
    """Persist a lesson."""

  async def find_lesson_by_id(self, lesson_id: str) -> LessonRecord | None:
    """Fetch a lesson, including its language when available."""

  async def create_quiz_if_absent(self, lesson_id: str, questions: list[dict[str, Any]]) -> QuizRecord:
    """Persist a quiz unless the lesson already has one; return the stored quiz either way."""

  async def find_quiz_by_lesson_id(self, lesson_id: str) -> QuizRecord | None:
    """Fetch the quiz for a lesson."""

  async def create_learning_progress(self, *, user_id: str, lesson_id: str) -> ProgressRecord:
    """Start progress tracking for a learner on a lesson."""

  async def create_conversation(self, *, user_id: str, transcript: dict[str, Any]) -> ConversationRecord:
    """Persist a generated conversation scenario."""

  async def create_conversation_exchange(self, *, user_id: str, language_id: str, user_message: str, ai_response: str) -> ConversationExchangeRecord:
    """Persist a learner message and its reply."""

  async def create_pronunciation_feedback(self, *, user_id: str, sentence: str, accuracy: float, feedback: str) -> PronunciationFeedbackRecord:
    """Persist pronunciation feedback."""
