from __future__ import annotations

import datetime

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.utils.ids import generate_record_id


class Language(Base):
  __tablename__ = "languages"

  id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_record_id)
  name: Mapped[str] = mapped_column(String, unique=True, nullable=False)
  code: Mapped[str] = mapped_column(String, unique=True, nullable=False)
  created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class Lesson(Base):
  __tablename__ = "lessons"

  id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_record_id)
  title: Mapped[str] = mapped_column(String, nullable=False)
  description: Mapped[str | None] = mapped_column(Text, nullable=True)
  language_id: Mapped[str] = mapped_column(ForeignKey("languages.id"), nullable=False, index=True)
  level: Mapped[str] = mapped_column(String, nullable=False)
  content: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
  created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
  updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

  language: Mapped[Language] = relationship("Language", lazy="joined")


class Quiz(Base):
  __tablename__ = "quizzes"

  id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_record_id)
  # The unique lesson_id is the idempotency key for quiz generation.
  lesson_id: Mapped[str] = mapped_column(ForeignKey("lessons.id"), unique=True, nullable=False)
  questions: Mapped[list] = mapped_column(JSONB, nullable=False)


class LearningProgress(Base):
  __tablename__ = "learning_progress"
  __table_args__ = (UniqueConstraint("user_id", "lesson_id", name="ux_learning_progress_user_lesson"),)

  id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_record_id)
  user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
  lesson_id: Mapped[str] = mapped_column(ForeignKey("lessons.id"), nullable=False)
  score: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
  completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
  created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
  updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class ConversationPractice(Base):
  __tablename__ = "conversation_practices"

  id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_record_id)
  user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
  transcript: Mapped[dict] = mapped_column(JSONB, nullable=False)
  created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class ConversationExchange(Base):
  __tablename__ = "conversation_exchanges"

  id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_record_id)
  user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
  language_id: Mapped[str] = mapped_column(ForeignKey("languages.id"), nullable=False)
  user_message: Mapped[str] = mapped_column(Text, nullable=False)
  ai_response: Mapped[str] = mapped_column(Text, nullable=False)
  created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class PronunciationFeedback(Base):
  __tablename__ = "pronunciation_feedback"

  id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_record_id)
  user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
  sentence: Mapped[str] = mapped_column(Text, nullable=False)
  accuracy: Mapped[float] = mapped_column(Float, nullable=False)
  feedback: Mapped[str] = mapped_column(Text, nullable=False)
  created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
