"""Prompt rendering rules per content kind."""

from __future__ import annotations

from app.ai.pipeline.contracts import ConversationRequest, ConversationTurnRequest, LessonRequest, ProficiencyLevel, PromptContext, PronunciationRequest, QuizRequest
from app.ai.prompts import STRICT_JSON_PREAMBLE, PromptBuilder

CONTEXT = PromptContext(language_name="Spanish", language_code="es", level=ProficiencyLevel.INTERMEDIATE)


def test_lesson_prompt_embeds_language_level_and_topic() -> None:
  prompt = PromptBuilder().build(LessonRequest(language_id="lang-es", level=ProficiencyLevel.BEGINNER, topic="food"), CONTEXT)
  assert prompt.startswith(STRICT_JSON_PREAMBLE)
  assert "beginner level lesson for learning Spanish about food" in prompt
  assert "vocabulary: 5 to 10 items" in prompt
  assert "{{" not in prompt


def test_lesson_prompt_without_topic_has_no_dangling_clause() -> None:
  prompt = PromptBuilder().build(LessonRequest(language_id="lang-es", level=ProficiencyLevel.ADVANCED), CONTEXT)
  assert "learning Spanish." in prompt
  assert " about " not in prompt


def test_quiz_prompt_uses_count_and_lesson_content() -> None:
  context = PromptContext(language_name="Spanish", level=ProficiencyLevel.BEGINNER, lesson_content={"grammar": "ser"})
  prompt = PromptBuilder().build(QuizRequest(lesson_id="lesson-1", count=7), context)
  assert "Generate 7 multiple-choice questions for a beginner level Spanish lesson" in prompt
  assert "exactly 7 questions" in prompt
  assert 'CONTENT: {"grammar": "ser"}' in prompt
  assert "options must have exactly 4 items" in prompt


def test_quiz_prompt_without_content_says_so() -> None:
  prompt = PromptBuilder().build(QuizRequest(lesson_id="lesson-1"), PromptContext(language_name="Spanish"))
  assert "CONTENT: N/A" in prompt
  assert "general level" in prompt


def test_conversation_prompt_uses_language_code_for_script_keys() -> None:
  prompt = PromptBuilder().build(ConversationRequest(language_id="lang-es", level=ProficiencyLevel.INTERMEDIATE, scenario="ordering coffee"), CONTEXT)
  assert "in Spanish for intermediate level about ordering coffee" in prompt
  assert '{"es":"","english":""}' in prompt
  assert "script: 6 to 12 lines total" in prompt


def test_conversation_turn_prompt_is_plain_text_mode() -> None:
  prompt = PromptBuilder().build(ConversationTurnRequest(language_id="lang-es", message="Yo es estudiante"), CONTEXT)
  assert STRICT_JSON_PREAMBLE not in prompt
  assert 'Respond to this learner message: "Yo es estudiante"' in prompt


def test_pronunciation_prompt_embeds_target_text() -> None:
  prompt = PromptBuilder().build(PronunciationRequest(language_id="lang-es", target_text="Hola amigo", level=ProficiencyLevel.BEGINNER), CONTEXT)
  assert 'TARGET TEXT: "Hola amigo"' in prompt
  assert "suggestions: 2 to 4 items" in prompt
  assert "phonemes: 2 to 5" in prompt


def test_strict_json_can_be_overridden() -> None:
  request = LessonRequest(language_id="lang-es", level=ProficiencyLevel.BEGINNER)
  assert not PromptBuilder().build(request, CONTEXT, strict_json=False).startswith(STRICT_JSON_PREAMBLE)
  assert PromptBuilder().build(ConversationTurnRequest(language_id="lang-es", message="hola"), CONTEXT, strict_json=True).startswith(STRICT_JSON_PREAMBLE)


def test_build_is_deterministic() -> None:
  request = QuizRequest(lesson_id="lesson-1", count=3)
  context = PromptContext(language_name="Spanish", lesson_content={"b": 1, "a": 2})
  assert PromptBuilder().build(request, context) == PromptBuilder().build(request, context)
