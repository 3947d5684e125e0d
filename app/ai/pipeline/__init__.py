"""Pipeline contracts shared by the generation components."""

from app.ai.pipeline.contracts import (
  GENERATION_PROFILES,
  ContentKind,
  ContentRequest,
  ConversationRequest,
  ConversationTurnRequest,
  GenerationConfig,
  GenerationOutcome,
  GenerationStage,
  LessonRequest,
  ProficiencyLevel,
  PromptContext,
  PronunciationRequest,
  QuizRequest,
)

__all__ = [
  "GENERATION_PROFILES",
  "ContentKind",
  "ContentRequest",
  "ConversationRequest",
  "ConversationTurnRequest",
  "GenerationConfig",
  "GenerationOutcome",
  "GenerationStage",
  "LessonRequest",
  "ProficiencyLevel",
  "PromptContext",
  "PronunciationRequest",
  "QuizRequest",
]
