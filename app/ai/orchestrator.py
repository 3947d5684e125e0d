"""Sequence prompt, model call, extraction, repair and persistence per content request.

Each request runs through ``Start -> Prompted -> Invoked -> Extracted | ExtractionFailed
-> Validated -> Persisted -> Done``. A failed model call (``ConfigurationError`` or
``UpstreamError``) ends the request before anything is persisted. A failed extraction
is replaced by fallback content and the request continues. Lesson requests add a
``CascadeQuiz`` step after the lesson is stored. That step is best-effort: its errors
are logged and never reach the lesson caller.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from dataclasses import dataclass

from app.ai.errors import ContentNotFoundError, ExtractionError
from app.ai.extraction import ResponseExtractor
from app.ai.fallbacks import FallbackContentProvider
from app.ai.invoker import ModelInvoker
from app.ai.pipeline.contracts import (
  DEFAULT_QUIZ_QUESTIONS,
  GENERATION_PROFILES,
  ContentKind,
  ContentRequest,
  ContentSource,
  ConversationRequest,
  ConversationTurnRequest,
  GenerationOutcome,
  GenerationStage,
  LessonRequest,
  ProficiencyLevel,
  PromptContext,
  PronunciationRequest,
  QuizRequest,
)
from app.ai.prompts import PromptBuilder
from app.ai.validation import ContentValidator
from app.storage.content_repo import ContentRepository, ConversationRecord, LanguageRecord, LessonRecord, ProgressRecord, PronunciationFeedbackRecord, QuizRecord

logger = logging.getLogger(__name__)

DEFAULT_SCENARIO = "General conversation"
LESSON_DESCRIPTION = "AI-generated lesson"


@dataclass(frozen=True)
class LessonGeneration:
  lesson: LessonRecord
  outcome: GenerationOutcome
  progress: ProgressRecord


@dataclass(frozen=True)
class QuizGeneration:
  quiz: QuizRecord
  # None when a previously stored quiz was returned without a model call.
  source: ContentSource | None


@dataclass(frozen=True)
class ConversationGeneration:
  conversation: ConversationRecord
  outcome: GenerationOutcome


@dataclass(frozen=True)
class ConversationReply:
  text: str
  source: ContentSource


@dataclass(frozen=True)
class PronunciationGeneration:
  record: PronunciationFeedbackRecord
  outcome: GenerationOutcome


@dataclass(frozen=True)
class LessonView:
  lesson: LessonRecord
  quiz: QuizRecord | None


def _parse_level(raw: str) -> ProficiencyLevel | None:
  try:
    return ProficiencyLevel(raw)
  except ValueError:
    return None


class ContentOrchestrator:
  """Run the generation pipeline for each content kind.

  Holds no per-request state; one instance can serve concurrent requests.
  """

  def __init__(
    self,
    *,
    invoker: ModelInvoker,
    repo: ContentRepository,
    prompts: PromptBuilder | None = None,
    extractor: ResponseExtractor | None = None,
    validator: ContentValidator | None = None,
    fallbacks: FallbackContentProvider | None = None,
  ) -> None:
    self._invoker = invoker
    self._repo = repo
    self._prompts = prompts or PromptBuilder()
    self._extractor = extractor or ResponseExtractor()
    self._validator = validator or ContentValidator()
    self._fallbacks = fallbacks or FallbackContentProvider()

  async def generate_lesson(self, request: LessonRequest, *, user_id: str) -> LessonGeneration:
    """Generate and store a lesson, then try to attach a quiz to it."""
    language = await self._require_language(request.language_id)
    context = PromptContext(language_name=language.name, language_code=language.code, level=request.level)
    outcome = await self._run(request, context)

    # The lesson is stored before the quiz so the cascade can reference it.
    title = request.topic or f"{request.level.value} {language.name} Lesson"
    lesson = await self._repo.create_lesson(title=title, description=LESSON_DESCRIPTION, language_id=language.language_id, level=request.level.value, content=outcome.content)
    self._advance(ContentKind.LESSON, GenerationStage.PERSISTED)

    # Quiz failures are logged inside and never fail the lesson.
    await self._cascade_quiz(lesson, language)

    progress = await self._repo.create_learning_progress(user_id=user_id, lesson_id=lesson.lesson_id)
    self._advance(ContentKind.LESSON, GenerationStage.DONE)
    return LessonGeneration(lesson=lesson, outcome=outcome, progress=progress)

  async def generate_quiz(self, request: QuizRequest) -> QuizGeneration:
    """Return the lesson's stored quiz, generating one only when none exists."""
    lesson = await self._repo.find_lesson_by_id(request.lesson_id)
    if lesson is None:
      raise ContentNotFoundError("Lesson", request.lesson_id)

    # Lessons loaded with their language skip the second lookup.
    language = lesson.language or await self._require_language(lesson.language_id)
    return await self._quiz_for_lesson(lesson, language, request.count)

  async def generate_conversation(self, request: ConversationRequest, *, user_id: str) -> ConversationGeneration:
    language = await self._require_language(request.language_id)
    context = PromptContext(language_name=language.name, language_code=language.code, level=request.level)
    outcome = await self._run(request, context)

    # Request metadata is stored next to the generated content.
    transcript = {"languageId": language.language_id, "level": request.level.value, "scenario": request.scenario or DEFAULT_SCENARIO, "content": outcome.content}
    conversation = await self._repo.create_conversation(user_id=user_id, transcript=transcript)
    self._advance(ContentKind.CONVERSATION, GenerationStage.PERSISTED)
    return ConversationGeneration(conversation=conversation, outcome=outcome)

  async def respond_to_message(self, request: ConversationTurnRequest, *, user_id: str) -> ConversationReply:
    """Reply to a learner message; storing the exchange is best-effort."""
    language = await self._require_language(request.language_id)
    context = PromptContext(language_name=language.name, language_code=language.code)
    outcome = await self._run(request, context)

    try:
      await self._repo.create_conversation_exchange(user_id=user_id, language_id=language.language_id, user_message=request.message, ai_response=outcome.content)
      self._advance(ContentKind.CONVERSATION_TURN, GenerationStage.PERSISTED)
    except Exception:  # noqa: BLE001
      logger.exception("Failed to store conversation exchange user_id=%s language_id=%s", user_id, language.language_id)

    return ConversationReply(text=outcome.content, source=outcome.source)

  async def pronunciation_feedback(self, request: PronunciationRequest, *, user_id: str) -> PronunciationGeneration:
    language = await self._require_language(request.language_id)
    context = PromptContext(language_name=language.name, language_code=language.code, level=request.level, target_text=request.target_text)
    outcome = await self._run(request, context)

    record = await self._repo.create_pronunciation_feedback(user_id=user_id, sentence=request.target_text, accuracy=outcome.content["accuracy"], feedback=json.dumps(outcome.content, ensure_ascii=False))
    self._advance(ContentKind.PRONUNCIATION, GenerationStage.PERSISTED)
    return PronunciationGeneration(record=record, outcome=outcome)

  async def get_lesson(self, lesson_id: str) -> LessonView:
    """Load a lesson and its quiz; lessons stored without content get the empty shape."""
    lesson = await self._repo.find_lesson_by_id(lesson_id)
    if lesson is None:
      raise ContentNotFoundError("Lesson", lesson_id)

    if lesson.content is None:
      lesson = dataclasses.replace(lesson, content=self._validator.validate(ContentKind.LESSON, {}))

    quiz = await self._repo.find_quiz_by_lesson_id(lesson_id)
    return LessonView(lesson=lesson, quiz=quiz)

  async def _cascade_quiz(self, lesson: LessonRecord, language: LanguageRecord) -> None:
    self._advance(ContentKind.LESSON, GenerationStage.CASCADE_QUIZ)
    try:
      result = await self._quiz_for_lesson(lesson, language, DEFAULT_QUIZ_QUESTIONS)
    except Exception:  # noqa: BLE001
      logger.exception("Cascade quiz generation failed lesson_id=%s", lesson.lesson_id)
      return

    logger.info("Cascade quiz ready lesson_id=%s questions=%d source=%s", lesson.lesson_id, len(result.quiz.questions), result.source or "existing")

  async def _quiz_for_lesson(self, lesson: LessonRecord, language: LanguageRecord, count: int) -> QuizGeneration:
    # One quiz per lesson; a stored quiz is returned as is.
    existing = await self._repo.find_quiz_by_lesson_id(lesson.lesson_id)
    if existing is not None:
      logger.info("Quiz already exists for lesson_id=%s; skipping generation", lesson.lesson_id)
      return QuizGeneration(quiz=existing, source=None)

    request = QuizRequest(lesson_id=lesson.lesson_id, count=count)
    context = PromptContext(language_name=language.name, language_code=language.code, level=_parse_level(lesson.level), lesson_content=lesson.content)
    outcome = await self._run(request, context)

    # A concurrent writer may have stored a quiz meanwhile; theirs wins.
    quiz = await self._repo.create_quiz_if_absent(lesson.lesson_id, outcome.content)
    self._advance(ContentKind.QUIZ, GenerationStage.PERSISTED)
    return QuizGeneration(quiz=quiz, source=outcome.source)

  async def _require_language(self, language_id: str) -> LanguageRecord:
    language = await self._repo.find_language_by_id(language_id)
    if language is None:
      raise ContentNotFoundError("Language", language_id)
    return language

  async def _run(self, request: ContentRequest, context: PromptContext) -> GenerationOutcome:
    """Prompt, invoke, extract and validate; extraction failures fall back, invocation failures raise."""
    kind = request.kind
    config = GENERATION_PROFILES[kind]
    self._advance(kind, GenerationStage.START)

    # Build the prompt and call the model; call failures propagate.
    prompt = self._prompts.build(request, context, strict_json=config.strict_json)
    self._advance(kind, GenerationStage.PROMPTED)

    raw = await self._invoker.invoke(prompt, config)
    self._advance(kind, GenerationStage.INVOKED)

    # Structured kinds go through extraction; plain-text replies are used as is.
    source: ContentSource = "model"
    if config.strict_json:
      try:
        document = self._extractor.extract(raw)
        self._advance(kind, GenerationStage.EXTRACTED)
      except ExtractionError as exc:
        logger.warning("Extraction failed kind=%s; using fallback content: %s", kind.value, exc)
        self._advance(kind, GenerationStage.EXTRACTION_FAILED)
        document = self._fallbacks.fallback(kind, context)
        source = "fallback"
    else:
      document = raw

    # Repair the document into its content shape.
    content = self._validator.validate(kind, document)
    if source == "model" and not config.strict_json and not content:
      logger.warning("Empty text reply kind=%s; using fallback content", kind.value)
      content = self._validator.validate(kind, self._fallbacks.fallback(kind, context))
      source = "fallback"
    self._advance(kind, GenerationStage.VALIDATED)
    return GenerationOutcome(content=content, source=source)

  @staticmethod
  def _advance(kind: ContentKind, stage: GenerationStage) -> None:
    logger.debug("Pipeline kind=%s stage=%s", kind.value, stage.value)
