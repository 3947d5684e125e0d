"""Postgres-backed repository for generated content using SQLAlchemy."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.database import get_session_factory
from app.schema.sql import ConversationExchange, ConversationPractice, Language, LearningProgress, Lesson, PronunciationFeedback, Quiz
from app.storage.content_repo import (
  ContentRepository,
  ConversationExchangeRecord,
  ConversationRecord,
  LanguageRecord,
  LessonRecord,
  ProgressRecord,
  PronunciationFeedbackRecord,
  QuizRecord,
)
from app.utils.ids import generate_record_id

logger = logging.getLogger(__name__)


def _language_record(row: Language) -> LanguageRecord:
  return LanguageRecord(language_id=row.id, name=row.name, code=row.code)


def _lesson_record(row: Lesson) -> LessonRecord:
  language = _language_record(row.language) if row.language is not None else None
  return LessonRecord(lesson_id=row.id, title=row.title, description=row.description, language_id=row.language_id, level=row.level, content=row.content, created_at=row.created_at, language=language)


def _quiz_record(row: Quiz) -> QuizRecord:
  questions = row.questions if isinstance(row.questions, list) else []
  return QuizRecord(quiz_id=row.id, lesson_id=row.lesson_id, questions=questions)


class PostgresContentRepository(ContentRepository):
  """Persist generated content to Postgres."""

  def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
    self._session_factory = session_factory or get_session_factory()
    if self._session_factory is None:
      raise RuntimeError("Database not initialized")

  async def find_language_by_id(self, language_id: str) -> LanguageRecord | None:
    async with self._session_factory() as session:
      row = await session.get(Language, language_id)
      return _language_record(row) if row is not None else None

  async def create_lesson(self, *, title: str, description: str | None, language_id: str, level: str, content: dict[str, Any]) -> LessonRecord:
    async with self._session_factory() as session:
      lesson = Lesson(id=generate_record_id(), title=title, description=description, language_id=language_id, level=level, content=content)
      session.add(lesson)
      await session.commit()
      # Reload with the joined language so callers get a complete record.
      row = await session.get(Lesson, lesson.id, populate_existing=True)
      return _lesson_record(row if row is not None else lesson)

  async def find_lesson_by_id(self, lesson_id: str) -> LessonRecord | None:
    async with self._session_factory() as session:
      row = await session.get(Lesson, lesson_id)
      return _lesson_record(row) if row is not None else None

  async def create_quiz_if_absent(self, lesson_id: str, questions: list[dict[str, Any]]) -> QuizRecord:
    async with self._session_factory() as session:
      statement = insert(Quiz).values(id=generate_record_id(), lesson_id=lesson_id, questions=questions).on_conflict_do_nothing(index_elements=[Quiz.lesson_id])
      result = await session.execute(statement)
      await session.commit()
      if result.rowcount == 0:
        logger.info("Quiz for lesson %s already stored; keeping the existing one", lesson_id)

      row = (await session.execute(select(Quiz).where(Quiz.lesson_id == lesson_id))).scalar_one()
      return _quiz_record(row)

  async def find_quiz_by_lesson_id(self, lesson_id: str) -> QuizRecord | None:
    async with self._session_factory() as session:
      row = (await session.execute(select(Quiz).where(Quiz.lesson_id == lesson_id))).scalar_one_or_none()
      return _quiz_record(row) if row is not None else None

  async def create_learning_progress(self, *, user_id: str, lesson_id: str) -> ProgressRecord:
    async with self._session_factory() as session:
      progress = LearningProgress(id=generate_record_id(), user_id=user_id, lesson_id=lesson_id, score=0, completed=False)
      session.add(progress)
      await session.commit()
      return ProgressRecord(progress_id=progress.id, user_id=user_id, lesson_id=lesson_id, score=0, completed=False)

  async def create_conversation(self, *, user_id: str, transcript: dict[str, Any]) -> ConversationRecord:
    async with self._session_factory() as session:
      conversation = ConversationPractice(id=generate_record_id(), user_id=user_id, transcript=transcript)
      session.add(conversation)
      await session.commit()
      return ConversationRecord(conversation_id=conversation.id, user_id=user_id, transcript=transcript)

  async def create_conversation_exchange(self, *, user_id: str, language_id: str, user_message: str, ai_response: str) -> ConversationExchangeRecord:
    async with self._session_factory() as session:
      exchange = ConversationExchange(id=generate_record_id(), user_id=user_id, language_id=language_id, user_message=user_message, ai_response=ai_response)
      session.add(exchange)
      await session.commit()
      return ConversationExchangeRecord(exchange_id=exchange.id, user_id=user_id, language_id=language_id, user_message=user_message, ai_response=ai_response)

  async def create_pronunciation_feedback(self, *, user_id: str, sentence: str, accuracy: float, feedback: str) -> PronunciationFeedbackRecord:
    async with self._session_factory() as session:
      row = PronunciationFeedback(id=generate_record_id(), user_id=user_id, sentence=sentence, accuracy=accuracy, feedback=feedback)
      session.add(row)
      await session.commit()
      return PronunciationFeedbackRecord(feedback_id=row.id, user_id=user_id, sentence=sentence, accuracy=accuracy, feedback=feedback)
