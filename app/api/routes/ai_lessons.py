from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends

from app.ai.orchestrator import ContentOrchestrator
from app.api.deps import get_orchestrator
from app.api.models import ConversationPromptRequest, ConversationResponseRequest, GenerateLessonRequest, GenerateQuizRequest, PronunciationFeedbackRequest
from app.core.security import CallerIdentity, get_current_identity
from app.storage.content_repo import LanguageRecord, LessonRecord, QuizRecord

router = APIRouter()
logger = logging.getLogger(__name__)


def _language_payload(language: LanguageRecord | None) -> dict[str, Any] | None:
  if language is None:
    return None
  return {"id": language.language_id, "name": language.name, "code": language.code}


def _lesson_payload(lesson: LessonRecord) -> dict[str, Any]:
  return {
    "id": lesson.lesson_id,
    "title": lesson.title,
    "description": lesson.description,
    "level": lesson.level,
    "languageId": lesson.language_id,
    "language": _language_payload(lesson.language),
    "content": lesson.content,
    "createdAt": lesson.created_at,
  }


def _quiz_payload(quiz: QuizRecord | None, *, lesson_id: str) -> dict[str, Any]:
  # Lessons without a quiz still get the quiz shape so clients need no branching.
  if quiz is None:
    return {"id": "", "lessonId": lesson_id, "questions": []}
  return {"id": quiz.quiz_id, "lessonId": quiz.lesson_id, "questions": quiz.questions}


@router.post("/generate-lesson")
async def generate_lesson(payload: GenerateLessonRequest, identity: CallerIdentity = Depends(get_current_identity), orchestrator: ContentOrchestrator = Depends(get_orchestrator)) -> dict[str, Any]:  # noqa: B008
  """Generate a lesson, store it with a progress record, and attach a quiz when possible."""
  result = await orchestrator.generate_lesson(payload.to_content_request(), user_id=identity.user_id)
  progress = result.progress
  return {
    "success": True,
    "source": result.outcome.source,
    "lesson": _lesson_payload(result.lesson),
    "progress": {"id": progress.progress_id, "completed": progress.completed, "score": progress.score},
  }


@router.post("/generate-quiz")
async def generate_quiz(payload: GenerateQuizRequest, identity: CallerIdentity = Depends(get_current_identity), orchestrator: ContentOrchestrator = Depends(get_orchestrator)) -> dict[str, Any]:  # noqa: B008
  """Return the lesson's quiz, generating it only when none is stored."""
  result = await orchestrator.generate_quiz(payload.to_content_request())
  response: dict[str, Any] = {"success": True, "quiz": _quiz_payload(result.quiz, lesson_id=payload.lesson_id)}
  if result.source is not None:
    response["source"] = result.source
  return response


@router.get("/lesson/{lesson_id}")
async def get_lesson(lesson_id: str, identity: CallerIdentity = Depends(get_current_identity), orchestrator: ContentOrchestrator = Depends(get_orchestrator)) -> dict[str, Any]:  # noqa: B008
  view = await orchestrator.get_lesson(lesson_id)
  return {"success": True, "lesson": _lesson_payload(view.lesson), "quiz": _quiz_payload(view.quiz, lesson_id=view.lesson.lesson_id)}


@router.post("/conversation-prompt")
async def conversation_prompt(payload: ConversationPromptRequest, identity: CallerIdentity = Depends(get_current_identity), orchestrator: ContentOrchestrator = Depends(get_orchestrator)) -> dict[str, Any]:  # noqa: B008
  """Generate a practice conversation scenario and store its transcript."""
  result = await orchestrator.generate_conversation(payload.to_content_request(), user_id=identity.user_id)
  transcript = result.conversation.transcript
  return {
    "success": True,
    "source": result.outcome.source,
    "conversation": {
      "id": result.conversation.conversation_id,
      "languageId": transcript["languageId"],
      "level": transcript["level"],
      "scenario": transcript["scenario"],
      "content": transcript["content"],
    },
  }


@router.post("/conversation-response")
async def conversation_response(payload: ConversationResponseRequest, identity: CallerIdentity = Depends(get_current_identity), orchestrator: ContentOrchestrator = Depends(get_orchestrator)) -> dict[str, Any]:  # noqa: B008
  reply = await orchestrator.respond_to_message(payload.to_content_request(), user_id=identity.user_id)
  return {"success": True, "source": reply.source, "data": {"response": reply.text}}


@router.post("/pronunciation-feedback")
async def pronunciation_feedback(payload: PronunciationFeedbackRequest, identity: CallerIdentity = Depends(get_current_identity), orchestrator: ContentOrchestrator = Depends(get_orchestrator)) -> dict[str, Any]:  # noqa: B008
  """Coach pronunciation of ``targetText``; the audio itself is not analysed."""
  logger.debug("Pronunciation request user_id=%s audio_chars=%d", identity.user_id, len(payload.audio_data))
  result = await orchestrator.pronunciation_feedback(payload.to_content_request(), user_id=identity.user_id)
  return {"success": True, "source": result.outcome.source, "feedback": result.outcome.content}
