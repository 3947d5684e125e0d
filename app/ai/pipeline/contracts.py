"""Shared data contracts for the content generation pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictStr

DEFAULT_QUIZ_QUESTIONS = 5
MAX_QUIZ_QUESTIONS = 20


class ContentKind(str, Enum):
  """Content kinds; each owns a prompt template, a schema and repair rules."""

  LESSON = "lesson"
  QUIZ = "quiz"
  CONVERSATION = "conversation"
  CONVERSATION_TURN = "conversation_turn"
  PRONUNCIATION = "pronunciation"


class ProficiencyLevel(str, Enum):
  """Learner proficiency levels."""

  BEGINNER = "BEGINNER"
  INTERMEDIATE = "INTERMEDIATE"
  ADVANCED = "ADVANCED"


class GenerationStage(str, Enum):
  """Per-request pipeline states, logged as the orchestrator advances."""

  START = "start"
  PROMPTED = "prompted"
  INVOKED = "invoked"
  EXTRACTED = "extracted"
  EXTRACTION_FAILED = "extraction_failed"
  VALIDATED = "validated"
  PERSISTED = "persisted"
  CASCADE_QUIZ = "cascade_quiz"
  DONE = "done"


class _ContentRequest(BaseModel):
  model_config = ConfigDict(frozen=True, extra="forbid")


class LessonRequest(_ContentRequest):
  """Generate a lesson for a language and level."""

  kind: Literal[ContentKind.LESSON] = ContentKind.LESSON
  language_id: StrictStr = Field(min_length=1)
  level: ProficiencyLevel
  topic: StrictStr | None = None


class QuizRequest(_ContentRequest):
  """Generate multiple-choice questions for a stored lesson."""

  kind: Literal[ContentKind.QUIZ] = ContentKind.QUIZ
  lesson_id: StrictStr = Field(min_length=1)
  count: int = Field(default=DEFAULT_QUIZ_QUESTIONS, ge=1, le=MAX_QUIZ_QUESTIONS)


class ConversationRequest(_ContentRequest):
  """Generate a practice conversation scenario."""

  kind: Literal[ContentKind.CONVERSATION] = ContentKind.CONVERSATION
  language_id: StrictStr = Field(min_length=1)
  level: ProficiencyLevel
  scenario: StrictStr | None = None


class ConversationTurnRequest(_ContentRequest):
  """Reply to a single learner message."""

  kind: Literal[ContentKind.CONVERSATION_TURN] = ContentKind.CONVERSATION_TURN
  language_id: StrictStr = Field(min_length=1)
  message: StrictStr = Field(min_length=1)


class PronunciationRequest(_ContentRequest):
  """Coach pronunciation of a target phrase."""

  kind: Literal[ContentKind.PRONUNCIATION] = ContentKind.PRONUNCIATION
  language_id: StrictStr = Field(min_length=1)
  target_text: StrictStr = Field(min_length=1)
  level: ProficiencyLevel


ContentRequest = Annotated[LessonRequest | QuizRequest | ConversationRequest | ConversationTurnRequest | PronunciationRequest, Field(discriminator="kind")]


@dataclass(frozen=True)
class GenerationConfig:
  """Invocation settings passed to the model."""

  max_output_tokens: int
  temperature: float
  strict_json: bool


GENERATION_PROFILES: dict[ContentKind, GenerationConfig] = {
  ContentKind.LESSON: GenerationConfig(max_output_tokens=2400, temperature=0.4, strict_json=True),
  ContentKind.QUIZ: GenerationConfig(max_output_tokens=2400, temperature=0.4, strict_json=True),
  ContentKind.CONVERSATION: GenerationConfig(max_output_tokens=2400, temperature=0.4, strict_json=True),
  ContentKind.PRONUNCIATION: GenerationConfig(max_output_tokens=1800, temperature=0.4, strict_json=True),
  ContentKind.CONVERSATION_TURN: GenerationConfig(max_output_tokens=700, temperature=0.7, strict_json=False),
}


@dataclass(frozen=True)
class PromptContext:
  """Locally resolved facts a prompt or fallback needs beyond the request itself."""

  language_name: str
  language_code: str = ""
  level: ProficiencyLevel | None = None
  lesson_content: Any = None
  target_text: str = ""


ContentSource = Literal["model", "fallback"]


class GenerationOutcome(BaseModel):
  """Validated content plus whether it came from the model or from a fallback."""

  content: Any
  source: ContentSource

  @property
  def is_fallback(self) -> bool:
    return self.source == "fallback"
