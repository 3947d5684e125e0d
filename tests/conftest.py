"""Test configuration: in-memory collaborators and an ASGI client with overrides."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
  sys.path.insert(0, str(ROOT))

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from app.ai.invoker import ModelInvoker  # noqa: E402
from app.ai.pipeline.contracts import GenerationConfig  # noqa: E402
from app.ai.providers.base import AIModel, ModelResponse  # noqa: E402
from app.api.deps import get_model_invoker, get_repository  # noqa: E402
from app.core.security import CallerIdentity, get_current_identity  # noqa: E402
from app.main import app  # noqa: E402
from app.storage.content_repo import (  # noqa: E402
  ConversationExchangeRecord,
  ConversationRecord,
  LanguageRecord,
  LessonRecord,
  ProgressRecord,
  PronunciationFeedbackRecord,
  QuizRecord,
)

SPANISH = LanguageRecord(language_id="lang-es", name="Spanish", code="es")
TEST_USER_ID = "user-123"


class ScriptedModel(AIModel):
  """Model double that returns (or raises) queued replies and records every call."""

  def __init__(self, replies: list[Any] | None = None) -> None:
    self.name = "scripted-model"
    self.replies: list[Any] = list(replies or [])
    self.prompts: list[str] = []
    self.configs: list[GenerationConfig] = []

  async def generate(self, prompt: str, config: GenerationConfig) -> ModelResponse:
    self.prompts.append(prompt)
    self.configs.append(config)
    if not self.replies:
      raise AssertionError("Unexpected model call")
    reply = self.replies.pop(0)
    if isinstance(reply, BaseException):
      raise reply
    return ModelResponse(content=reply)

  @property
  def call_count(self) -> int:
    return len(self.prompts)


class InMemoryContentRepository:
  """Dict-backed stand-in for the Postgres repository."""

  def __init__(self) -> None:
    self.languages: dict[str, LanguageRecord] = {SPANISH.language_id: SPANISH}
    self.lessons: dict[str, LessonRecord] = {}
    self.quizzes: dict[str, QuizRecord] = {}
    self.progress: list[ProgressRecord] = []
    self.conversations: list[ConversationRecord] = []
    self.exchanges: list[ConversationExchangeRecord] = []
    self.pronunciation: list[PronunciationFeedbackRecord] = []
    self.fail_exchanges = False
    self._counter = 0

  def _next_id(self, prefix: str) -> str:
    self._counter += 1
    return f"{prefix}-{self._counter}"

  async def find_language_by_id(self, language_id: str) -> LanguageRecord | None:
    return self.languages.get(language_id)

  async def create_lesson(self, *, title: str, description: str | None, language_id: str, level: str, content: dict[str, Any]) -> LessonRecord:
    lesson = LessonRecord(lesson_id=self._next_id("lesson"), title=title, description=description, language_id=language_id, level=level, content=content, language=self.languages.get(language_id))
    self.lessons[lesson.lesson_id] = lesson
    return lesson

  async def find_lesson_by_id(self, lesson_id: str) -> LessonRecord | None:
    return self.lessons.get(lesson_id)

  async def create_quiz_if_absent(self, lesson_id: str, questions: list[dict[str, Any]]) -> QuizRecord:
    if lesson_id not in self.quizzes:
      self.quizzes[lesson_id] = QuizRecord(quiz_id=self._next_id("quiz"), lesson_id=lesson_id, questions=questions)
    return self.quizzes[lesson_id]

  async def find_quiz_by_lesson_id(self, lesson_id: str) -> QuizRecord | None:
    return self.quizzes.get(lesson_id)

  async def create_learning_progress(self, *, user_id: str, lesson_id: str) -> ProgressRecord:
    record = ProgressRecord(progress_id=self._next_id("progress"), user_id=user_id, lesson_id=lesson_id, score=0, completed=False)
    self.progress.append(record)
    return record

  async def create_conversation(self, *, user_id: str, transcript: dict[str, Any]) -> ConversationRecord:
    record = ConversationRecord(conversation_id=self._next_id("conversation"), user_id=user_id, transcript=transcript)
    self.conversations.append(record)
    return record

  async def create_conversation_exchange(self, *, user_id: str, language_id: str, user_message: str, ai_response: str) -> ConversationExchangeRecord:
    if self.fail_exchanges:
      raise RuntimeError("database unavailable")
    record = ConversationExchangeRecord(exchange_id=self._next_id("exchange"), user_id=user_id, language_id=language_id, user_message=user_message, ai_response=ai_response)
    self.exchanges.append(record)
    return record

  async def create_pronunciation_feedback(self, *, user_id: str, sentence: str, accuracy: float, feedback: str) -> PronunciationFeedbackRecord:
    record = PronunciationFeedbackRecord(feedback_id=self._next_id("feedback"), user_id=user_id, sentence=sentence, accuracy=accuracy, feedback=feedback)
    self.pronunciation.append(record)
    return record


@pytest.fixture
def anyio_backend():
  return "asyncio"


@pytest.fixture
def repo() -> InMemoryContentRepository:
  return InMemoryContentRepository()


@pytest.fixture
def model() -> ScriptedModel:
  return ScriptedModel()


@pytest.fixture
def invoker(model: ScriptedModel) -> ModelInvoker:
  return ModelInvoker(model, timeout_seconds=5)


@pytest.fixture
async def async_client(repo: InMemoryContentRepository, invoker: ModelInvoker):
  app.dependency_overrides[get_repository] = lambda: repo
  app.dependency_overrides[get_model_invoker] = lambda: invoker
  app.dependency_overrides[get_current_identity] = lambda: CallerIdentity(user_id=TEST_USER_ID, claims={"uid": TEST_USER_ID})
  # Unhandled errors should come back as 500 responses rather than propagate into the test.
  async with AsyncClient(transport=ASGITransport(app=app, raise_app_exceptions=False), base_url="http://test") as client:
    yield client
  app.dependency_overrides.clear()
