from __future__ import annotations

import json

import pytest
import requests

from quiz_arena.core.errors import GenerationError, ValidationError
from quiz_arena.core.models import Difficulty
from quiz_arena.core.services import quiz_generator
from quiz_arena.core.services.quiz_generator import GenerationRequest, QuizGenerator, build_prompt

QUIZ_JSON = {
    "title": "Present Perfect",
    "subject": "Grammar",
    "questions": [
        {
            "text": "She ___ lived here since 2010.",
            "options": ["has", "have", "is", "was"],
            "correctIndex": 0,
            "explanation": "Third person singular takes *has*.",
        },
        {
            "text": "They ___ finished yet.",
            "options": ["hasn't", "haven't", "isn't", "wasn't"],
            "correctIndex": 1,
        },
    ],
}


class FakeResponse:
    def __init__(self, payload=None, status_error: Exception | None = None, text_error: bool = False) -> None:
        self._payload = payload
        self._status_error = status_error
        self._text_error = text_error

    def raise_for_status(self) -> None:
        if self._status_error is not None:
            raise self._status_error

    def json(self):
        if self._text_error:
            raise ValueError("not json")
        return self._payload


def _reply(text: str) -> FakeResponse:
    return FakeResponse({"candidates": [{"content": {"parts": [{"text": text}]}}]})


@pytest.fixture
def captured(monkeypatch):
    calls: list[dict] = []
    replies: list[FakeResponse] = []

    def fake_post(url, headers=None, json=None, timeout=None):
        calls.append({"url": url, "headers": headers, "json": json, "timeout": timeout})
        return replies.pop(0)

    monkeypatch.setattr(quiz_generator.requests, "post", fake_post)
    return calls, replies


def _request(**overrides) -> GenerationRequest:
    values = {"topic": "present perfect", "question_count": 2, "difficulty": Difficulty.HARD}
    values.update(overrides)
    return GenerationRequest(**values)


def test_generate_builds_quiz_from_json_reply(captured):
    calls, replies = captured
    replies.append(_reply(json.dumps(QUIZ_JSON)))

    quiz = QuizGenerator("secret-key").generate(_request())

    assert quiz.title == "Present Perfect"
    assert quiz.difficulty is Difficulty.HARD
    assert quiz.duration_minutes == 10
    assert [question.correct_index for question in quiz.questions] == [0, 1]
    assert quiz.questions[0].options == ("has", "have", "is", "was")
    assert quiz.questions[1].explanation is None

    [call] = calls
    assert call["url"].endswith("/models/gemini-3-flash-preview:generateContent")
    assert call["headers"]["x-goog-api-key"] == "secret-key"
    assert "Create exactly 2 hard multiple-choice questions" in call["json"]["contents"][0]["parts"][0]["text"]


def test_fenced_json_is_accepted(captured):
    _, replies = captured
    replies.append(_reply("Here you go:\n```json\n" + json.dumps(QUIZ_JSON) + "\n```"))

    quiz = QuizGenerator("key").generate(_request())

    assert quiz.question_count == 2


def test_document_is_sent_inline(captured):
    calls, replies = captured
    replies.append(_reply(json.dumps(QUIZ_JSON)))

    QuizGenerator("key").generate(
        _request(topic="", document_base64="JVBERi0=", document_mime_type="application/pdf")
    )

    parts = calls[0]["json"]["contents"][0]["parts"]
    assert parts[1] == {"inline_data": {"mime_type": "application/pdf", "data": "JVBERi0="}}
    assert "based on the attached document" in parts[0]["text"]


@pytest.mark.parametrize(
    "reply",
    [
        _reply("this is not json"),
        _reply(json.dumps({"title": "Broken", "questions": []})),
        _reply(json.dumps({**QUIZ_JSON, "questions": [{**QUIZ_JSON["questions"][0], "options": ["a", "b"]}]})),
        _reply(json.dumps({**QUIZ_JSON, "questions": [{**QUIZ_JSON["questions"][0], "correctIndex": 4}]})),
        _reply("   "),
        FakeResponse({"candidates": []}),
        FakeResponse(text_error=True),
        FakeResponse(status_error=requests.HTTPError("500 Server Error")),
    ],
)
def test_bad_replies_raise_generation_error(captured, reply):
    _, replies = captured
    replies.append(reply)
    with pytest.raises(GenerationError):
        QuizGenerator("key").generate(_request())


def test_network_failure_raises_generation_error(monkeypatch):
    def failing_post(*args, **kwargs):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(quiz_generator.requests, "post", failing_post)
    with pytest.raises(GenerationError):
        QuizGenerator("key").generate(_request())


def test_missing_api_key_fails_before_any_request(captured):
    calls, _ = captured
    generator = QuizGenerator(None)
    assert not generator.is_configured
    with pytest.raises(GenerationError):
        generator.generate(_request())
    assert calls == []


@pytest.mark.parametrize(
    "request_",
    [
        GenerationRequest(topic="   "),
        GenerationRequest(topic="tenses", question_count=0),
        GenerationRequest(topic="tenses", question_count=21),
        GenerationRequest(document_base64="JVBERi0="),
    ],
)
def test_invalid_requests_are_rejected(captured, request_):
    calls, _ = captured
    with pytest.raises(ValidationError):
        QuizGenerator("key").generate(request_)
    assert calls == []


def test_prompt_mentions_topic_and_document():
    prompt = build_prompt(_request(document_base64="JVBERi0=", document_mime_type="application/pdf"))
    assert 'on "present perfect"' in prompt
    assert "attached document" in prompt
    assert '"correctIndex"' in prompt
