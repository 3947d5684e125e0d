"""Prompt templates and rendering for each content kind."""

from __future__ import annotations

import json
from typing import Any

from app.ai.pipeline.contracts import (
  GENERATION_PROFILES,
  ContentKind,
  ContentRequest,
  ConversationRequest,
  ConversationTurnRequest,
  LessonRequest,
  ProficiencyLevel,
  PromptContext,
  PronunciationRequest,
  QuizRequest,
)

STRICT_JSON_PREAMBLE = """
You MUST respond with ONLY valid JSON.
No markdown. No code fences. No explanation. No extra text.
""".strip()

LESSON_TEMPLATE = """
Generate a structured {{LEVEL}} level lesson for learning {{LANGUAGE}}{{TOPIC_CLAUSE}}.

Return JSON with exactly:
{
  "vocabulary": [{"word":"","translation":"","example":""}],
  "grammar": "",
  "examples": [],
  "exercises": [],
  "culturalNotes": ""
}

Rules:
- vocabulary: 5 to 10 items
- examples: 3 to 6 short sentences
- exercises: 3 to 6 prompts/questions
- Keep beginner friendly if BEGINNER
""".strip()

QUIZ_TEMPLATE = """
Generate {{COUNT}} multiple-choice questions for a {{LEVEL}} level {{LANGUAGE}} lesson.

If content is provided, base questions on it:
CONTENT: {{CONTENT}}

Return ONLY a JSON array like:
[
  {
    "question": "",
    "options": ["", "", "", ""],
    "correctAnswer": 0,
    "explanation": ""
  }
]

Rules:
- exactly {{COUNT}} questions
- correctAnswer is the index (0-3)
- options must have exactly 4 items
- keep language learner friendly
""".strip()

CONVERSATION_TEMPLATE = """
Generate a realistic conversation scenario in {{LANGUAGE}} for {{LEVEL}} level{{SCENARIO_CLAUSE}}.

Return ONLY JSON:
{
  "context": "",
  "vocabulary": [{"word":"","translation":""}],
  "script": [{"{{LANGUAGE_CODE}}":"","english":""}],
  "culturalNotes": ""
}

Rules:
- vocabulary: 5 to 10 items
- script: 6 to 12 lines total
- keep it natural & useful
""".strip()

CONVERSATION_TURN_TEMPLATE = """
You are a language learning assistant for {{LANGUAGE}}.
Respond to this learner message: "{{MESSAGE}}"

Your response must:
1) Be helpful and encouraging
2) Use simple language
3) Provide corrections if there are grammar mistakes
4) Include the correct {{LANGUAGE}} phrases when appropriate

Keep it under 150 words.
""".strip()

PRONUNCIATION_TEMPLATE = """
You are an expert pronunciation coach.

We cannot transcribe audio here, so give practical pronunciation feedback based on the TARGET TEXT only.
Target language: {{LANGUAGE}}
Student level: {{LEVEL}}
TARGET TEXT: "{{TARGET_TEXT}}"

Return ONLY JSON in this exact structure:
{
  "accuracy": 0.7,
  "feedback": "",
  "suggestions": ["", ""],
  "phonemes": [{"sound":"","accuracy":0.7,"feedback":""}]
}

Rules:
- accuracy must be between 0.0 and 1.0
- suggestions: 2 to 4 items
- phonemes: 2 to 5 key sounds or tricky parts from the phrase
- Be encouraging and actionable.
""".strip()


def _replace_placeholders(template: str, values: dict[str, str]) -> str:
  """Substitute {{PLACEHOLDER}} markers with request values."""
  rendered = template
  for key, value in values.items():
    rendered = rendered.replace(f"{{{{{key}}}}}", value)

  return rendered


def _clause(prefix: str, value: str | None) -> str:
  if value is None or value.strip() == "":
    return ""
  return f" {prefix} {value.strip()}"


def _level_text(level: ProficiencyLevel | None) -> str:
  return level.value.lower() if level is not None else "general"


def _stringify_content(content: Any) -> str:
  """Serialize lesson content so quiz prompts stay deterministic."""
  if not content:
    return "N/A"
  return json.dumps(content, ensure_ascii=False, sort_keys=True)


def _render_lesson(request: LessonRequest, context: PromptContext) -> str:
  return _replace_placeholders(LESSON_TEMPLATE, {"LEVEL": _level_text(request.level), "LANGUAGE": context.language_name, "TOPIC_CLAUSE": _clause("about", request.topic)})


def _render_quiz(request: QuizRequest, context: PromptContext) -> str:
  values = {"COUNT": str(request.count), "LEVEL": _level_text(context.level), "LANGUAGE": context.language_name, "CONTENT": _stringify_content(context.lesson_content)}
  return _replace_placeholders(QUIZ_TEMPLATE, values)


def _render_conversation(request: ConversationRequest, context: PromptContext) -> str:
  values = {"LANGUAGE": context.language_name, "LEVEL": _level_text(request.level), "SCENARIO_CLAUSE": _clause("about", request.scenario), "LANGUAGE_CODE": context.language_code or "target"}
  return _replace_placeholders(CONVERSATION_TEMPLATE, values)


def _render_conversation_turn(request: ConversationTurnRequest, context: PromptContext) -> str:
  return _replace_placeholders(CONVERSATION_TURN_TEMPLATE, {"LANGUAGE": context.language_name, "MESSAGE": request.message})


def _render_pronunciation(request: PronunciationRequest, context: PromptContext) -> str:
  return _replace_placeholders(PRONUNCIATION_TEMPLATE, {"LANGUAGE": context.language_name, "LEVEL": request.level.value, "TARGET_TEXT": request.target_text})


_RENDERERS = {
  ContentKind.LESSON: _render_lesson,
  ContentKind.QUIZ: _render_quiz,
  ContentKind.CONVERSATION: _render_conversation,
  ContentKind.CONVERSATION_TURN: _render_conversation_turn,
  ContentKind.PRONUNCIATION: _render_pronunciation,
}


class PromptBuilder:
  """Render the prompt for a content request. Pure and deterministic."""

  def build(self, request: ContentRequest, context: PromptContext, *, strict_json: bool | None = None) -> str:
    if strict_json is None:
      strict_json = GENERATION_PROFILES[request.kind].strict_json

    body = _RENDERERS[request.kind](request, context)
    if strict_json:
      return f"{STRICT_JSON_PREAMBLE}\n\n{body}"
    return body
