"""Request bodies for the AI lesson routes; JSON keys are camelCase."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator
from pydantic.alias_generators import to_camel

from app.ai.pipeline.contracts import (
  DEFAULT_QUIZ_QUESTIONS,
  MAX_QUIZ_QUESTIONS,
  ConversationRequest,
  ConversationTurnRequest,
  LessonRequest,
  ProficiencyLevel,
  PronunciationRequest,
  QuizRequest,
)


class _ApiRequest(BaseModel):
  model_config = ConfigDict(extra="forbid", alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)


class _LevelledRequest(_ApiRequest):
  @field_validator("level", mode="before", check_fields=False)
  @classmethod
  def normalize_level(cls, value: Any) -> Any:
    # Levels are matched case-insensitively; the enum holds the upper-case form.
    if isinstance(value, str):
      return value.strip().upper()
    return value


class GenerateLessonRequest(_LevelledRequest):
  """Body for ``POST /generate-lesson``."""

  language_id: StrictStr = Field(min_length=1, description="Language to teach.")
  level: ProficiencyLevel = Field(description="BEGINNER, INTERMEDIATE or ADVANCED (any case).")
  topic: StrictStr | None = Field(default=None, max_length=200, description="Optional lesson topic; also used as the title.")

  def to_content_request(self) -> LessonRequest:
    return LessonRequest(language_id=self.language_id, level=self.level, topic=self.topic or None)


class GenerateQuizRequest(_ApiRequest):
  """Body for ``POST /generate-quiz``."""

  lesson_id: StrictStr = Field(min_length=1)
  number_of_questions: int = Field(default=DEFAULT_QUIZ_QUESTIONS, ge=1, le=MAX_QUIZ_QUESTIONS)

  def to_content_request(self) -> QuizRequest:
    return QuizRequest(lesson_id=self.lesson_id, count=self.number_of_questions)


class ConversationPromptRequest(_LevelledRequest):
  """Body for ``POST /conversation-prompt``."""

  language_id: StrictStr = Field(min_length=1)
  level: ProficiencyLevel
  scenario: StrictStr | None = Field(default=None, max_length=200)

  def to_content_request(self) -> ConversationRequest:
    return ConversationRequest(language_id=self.language_id, level=self.level, scenario=self.scenario or None)


class ConversationResponseRequest(_ApiRequest):
  """Body for ``POST /conversation-response``."""

  language_id: StrictStr = Field(min_length=1)
  message: StrictStr = Field(min_length=1, max_length=2000)

  def to_content_request(self) -> ConversationTurnRequest:
    return ConversationTurnRequest(language_id=self.language_id, message=self.message)


class PronunciationFeedbackRequest(_LevelledRequest):
  """Body for ``POST /pronunciation-feedback``.

  ``audioData`` is required but not transcribed; feedback is coached from ``targetText``.
  """

  language_id: StrictStr = Field(min_length=1)
  audio_data: StrictStr = Field(min_length=1)
  target_text: StrictStr = Field(min_length=1, max_length=500)
  level: ProficiencyLevel

  def to_content_request(self) -> PronunciationRequest:
    return PronunciationRequest(language_id=self.language_id, target_text=self.target_text, level=self.level)
