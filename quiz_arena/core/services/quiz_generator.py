"""Client for the AI quiz generator (Gemini ``generateContent`` REST API).

The generator only builds the prompt, sends it, and checks the structural
shape of the reply. Content quality is the model's responsibility. Anything
that does not parse into a complete quiz raises ``GenerationError`` so that
no partial quiz reaches the store.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
import re
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError
import requests

from quiz_arena.constants.quiz_constants import (
    DEFAULT_DURATION_MINUTES,
    DEFAULT_QUESTION_COUNT,
    MAX_QUESTION_COUNT,
    MIN_QUESTION_COUNT,
    OPTIONS_PER_QUESTION,
)
from quiz_arena.core.errors import GenerationError, ValidationError
from quiz_arena.core.models import Difficulty, Question, Quiz, utc_now

logger = logging.getLogger(__name__)

GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
DEFAULT_GEMINI_MODEL = "gemini-3-flash-preview"
REQUEST_TIMEOUT_SECONDS = 90

_SYSTEM_INSTRUCTION = "You are a helpful teacher's assistant designed to create educational quizzes."
_JSON_FENCE = re.compile(r"```(?:json)?\s*(\{.*\})\s*```", re.DOTALL)


class GeneratedQuestion(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(min_length=1)
    options: list[str] = Field(min_length=OPTIONS_PER_QUESTION, max_length=OPTIONS_PER_QUESTION)
    correct_index: int = Field(alias="correctIndex", ge=0, le=OPTIONS_PER_QUESTION - 1)
    explanation: str | None = None


class GeneratedQuiz(BaseModel):
    title: str = Field(min_length=1)
    subject: str | None = None
    questions: list[GeneratedQuestion] = Field(min_length=1)


@dataclass(slots=True)
class GenerationRequest:
    """What the teacher asked for: a topic, a document, or both."""

    topic: str = ""
    question_count: int = DEFAULT_QUESTION_COUNT
    difficulty: Difficulty = Difficulty.MEDIUM
    document_base64: str | None = None
    document_mime_type: str | None = None

    def validate(self) -> None:
        if not self.topic.strip() and not self.document_base64:
            raise ValidationError("Please provide a topic or upload a file.")
        if not MIN_QUESTION_COUNT <= self.question_count <= MAX_QUESTION_COUNT:
            raise ValidationError(
                f"Question count must be between {MIN_QUESTION_COUNT} and {MAX_QUESTION_COUNT}."
            )
        if self.document_base64 and not self.document_mime_type:
            raise ValidationError("Uploaded documents need a MIME type.")


class QuizGenerator:
    """Turns a ``GenerationRequest`` into an unpublished ``Quiz`` draft."""

    def __init__(
        self,
        api_key: str | None,
        model: str = DEFAULT_GEMINI_MODEL,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    def generate(self, request: GenerationRequest) -> Quiz:
        request.validate()
        if not self._api_key:
            raise GenerationError("GEMINI_API_KEY is not set.")

        logger.info(
            "Requesting %s %s questions (document attached: %s)",
            request.question_count,
            request.difficulty.value,
            bool(request.document_base64),
        )
        payload = self._call_model(self._build_body(request))
        parsed = _parse_quiz_payload(payload)
        if len(parsed.questions) != request.question_count:
            logger.warning(
                "Generator returned %s questions, %s requested",
                len(parsed.questions),
                request.question_count,
            )

        return Quiz(
            id=uuid4().hex,
            title=parsed.title.strip(),
            subject=(parsed.subject or "").strip() or None,
            difficulty=request.difficulty,
            duration_minutes=DEFAULT_DURATION_MINUTES,
            created_at=utc_now(),
            questions=tuple(
                Question(
                    text=q.text,
                    options=tuple(q.options),
                    correct_index=q.correct_index,
                    explanation=q.explanation,
                )
                for q in parsed.questions
            ),
        )

    def _build_body(self, request: GenerationRequest) -> dict[str, Any]:
        parts: list[dict[str, Any]] = [{"text": build_prompt(request)}]
        if request.document_base64:
            parts.append(
                {
                    "inline_data": {
                        "mime_type": request.document_mime_type,
                        "data": request.document_base64,
                    }
                }
            )
        return {
            "systemInstruction": {"parts": [{"text": _SYSTEM_INSTRUCTION}]},
            "contents": [{"parts": parts}],
            "generationConfig": {"responseMimeType": "application/json"},
        }

    def _call_model(self, body: dict[str, Any]) -> str:
        try:
            response = requests.post(
                GEMINI_ENDPOINT.format(model=self._model),
                headers={"x-goog-api-key": self._api_key, "Content-Type": "application/json"},
                json=body,
                timeout=self._timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as exc:
            logger.error("Quiz generation request failed: %s", exc)
            raise GenerationError(f"Quiz generation failed: {exc}") from exc
        except ValueError as exc:
            raise GenerationError("Quiz generator returned a non-JSON response.") from exc

        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as exc:
            raise GenerationError("Quiz generator returned no content.") from exc
        text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
        if not text.strip():
            raise GenerationError("Quiz generator returned an empty response.")
        return text


def build_prompt(request: GenerationRequest) -> str:
    source = (
        f'on "{request.topic.strip()}"'
        if request.topic.strip()
        else "based on the attached document"
    )
    if request.topic.strip() and request.document_base64:
        source += " using the attached document as the source material"
    return (
        f"Create exactly {request.question_count} {request.difficulty.value.lower()} "
        f"multiple-choice questions {source}.\n\n"
        "Return ONLY valid JSON in this format:\n\n"
        "{\n"
        '  "title": "Quiz title",\n'
        '  "subject": "Subject",\n'
        '  "questions": [\n'
        "    {\n"
        '      "text": "Question?",\n'
        '      "options": ["A", "B", "C", "D"],\n'
        '      "correctIndex": 0,\n'
        '      "explanation": "Why the correct option is right"\n'
        "    }\n"
        "  ]\n"
        "}"
    )


def _parse_quiz_payload(text: str) -> GeneratedQuiz:
    content = text.strip()
    match = _JSON_FENCE.search(content)
    if match:
        content = match.group(1)
    try:
        return GeneratedQuiz.model_validate(json.loads(content))
    except json.JSONDecodeError as exc:
        raise GenerationError("Quiz generator returned malformed JSON.") from exc
    except PydanticValidationError as exc:
        logger.error("Generated quiz failed validation: %s", exc)
        raise GenerationError(f"Generated quiz is incomplete: {exc.error_count()} problem(s).") from exc
