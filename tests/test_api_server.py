from __future__ import annotations

import time

import pytest
from fastapi.testclient import TestClient

from quiz_arena.constants.quiz_constants import RESULT_PAGE_LEADERBOARD_SIZE, SESSION_IDLE_TIMEOUT_SECONDS
from quiz_arena.server.api_server import create_api_app


@pytest.fixture
def client(manager):
    with TestClient(create_api_app(manager)) as test_client:
        yield test_client


def _start(client, quiz_id: str, name: str = "Ada") -> dict:
    response = client.post("/sessions", json={"quiz_id": quiz_id, "student_name": name})
    assert response.status_code == 201
    return response.json()


def _answer(client, session_id: str, answers) -> dict:
    body = {}
    for question_index, option_index in enumerate(answers):
        response = client.post(
            f"/sessions/{session_id}/answers",
            json={"question_index": question_index, "option_index": option_index},
        )
        assert response.status_code == 200
        body = response.json()
    return body


def test_student_page_is_served(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "Student Dashboard" in response.text


def test_quiz_listing_hides_answers(client, published_quiz):
    [summary] = client.get("/quizzes").json()
    assert summary["id"] == published_quiz.id
    assert summary["question_count"] == 3

    detail = client.get(f"/quizzes/{published_quiz.id}").json()
    assert len(detail["questions"]) == 3
    assert "correct_index" not in detail["questions"][0]
    assert client.get("/quizzes/missing").status_code == 404


def test_full_attempt_flow(client, published_quiz):
    session = _start(client, published_quiz.id)
    assert session["state"] == "active"
    assert session["remaining_seconds"] == 600
    assert session["answers"] == [-1, -1, -1]

    session = _answer(client, session["session_id"], (1, 0, 0))
    assert session["is_complete"]

    response = client.post(f"/sessions/{session['session_id']}/submit")
    assert response.status_code == 200
    body = response.json()
    assert body["state"] == "finished"
    assert body["result"]["score"] == 2
    assert body["result"]["percentage"] == 67
    assert body["result_stored"]
    assert [row["is_correct"] for row in body["review"]] == [True, True, False]

    [row] = client.get(f"/quizzes/{published_quiz.id}/leaderboard").json()
    assert (row["rank"], row["student_name"], row["score"]) == (1, "Ada", 2)


def test_blank_name_is_unprocessable(client, published_quiz):
    response = client.post("/sessions", json={"quiz_id": published_quiz.id, "student_name": " "})
    assert response.status_code == 422
    assert response.json()["detail"] == "Please enter your name first!"


def test_incomplete_submit_conflicts(client, published_quiz):
    session = _start(client, published_quiz.id)
    response = client.post(f"/sessions/{session['session_id']}/submit")
    assert response.status_code == 409


def test_out_of_range_answer_is_unprocessable(client, published_quiz):
    session = _start(client, published_quiz.id)
    response = client.post(
        f"/sessions/{session['session_id']}/answers",
        json={"question_index": 0, "option_index": 7},
    )
    assert response.status_code == 422


def test_expired_session_reports_stored_result(client, published_quiz, timers):
    session = _start(client, published_quiz.id)
    timers.last.fire(600)

    body = client.get(f"/sessions/{session['session_id']}").json()

    assert body["state"] == "finished"
    assert body["remaining_seconds"] == 0
    assert body["result"]["score"] == 0
    assert body["result_stored"]
    assert client.post(
        f"/sessions/{session['session_id']}/answers",
        json={"question_index": 0, "option_index": 1},
    ).status_code == 409


def test_cancel_removes_session(client, published_quiz, timers):
    session = _start(client, published_quiz.id)
    assert client.delete(f"/sessions/{session['session_id']}").status_code == 204
    assert not timers.last.running
    assert client.get(f"/sessions/{session['session_id']}").status_code == 404


def test_scorecard_only_after_finish(client, published_quiz):
    session = _start(client, published_quiz.id)
    url = f"/sessions/{session['session_id']}/scorecard.pdf"
    assert client.get(url).status_code == 409

    _answer(client, session["session_id"], (1, 0, 2))
    client.post(f"/sessions/{session['session_id']}/submit")
    response = client.get(url)

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")


def test_progress_reports_badges(client, published_quiz):
    session = _start(client, published_quiz.id)
    _answer(client, session["session_id"], (1, 0, 2))
    client.post(f"/sessions/{session['session_id']}/submit")

    body = client.get("/students/ada/progress").json()

    assert body["attempt_count"] == 1
    assert body["badges"] == ["Grammar Master", "Top 3 Finisher"]


def test_leaderboard_limit_and_unknown_quiz(client, published_quiz):
    for name in ("Ann", "Bob", "Cid"):
        session = _start(client, published_quiz.id, name)
        _answer(client, session["session_id"], (1, 0, 2))
        client.post(f"/sessions/{session['session_id']}/submit")

    assert len(client.get(f"/quizzes/{published_quiz.id}/leaderboard", params={"limit": 2}).json()) == 2
    assert client.get("/quizzes/missing/leaderboard").status_code == 404


def test_notes_can_be_listed_and_downloaded(client, manager):
    note = manager.upload_note("Chapter 1", "chapter1.pdf", b"%PDF-1.4 notes", "application/pdf")

    [listed] = client.get("/notes").json()
    assert listed["title"] == "Chapter 1"
    assert "file_data" not in listed

    response = client.get(f"/notes/{note.id}/download")
    assert response.content == b"%PDF-1.4 notes"
    assert 'filename="chapter1.pdf"' in response.headers["content-disposition"]
    assert client.get("/notes/missing/download").status_code == 404


def test_shutdown_closes_running_sessions(manager, published_quiz, timers):
    with TestClient(create_api_app(manager)) as client:
        _start(client, published_quiz.id)
        assert timers.last.running
    assert not timers.last.running


def test_leaving_a_finished_session_forgets_it(client, manager, published_quiz):
    session = _start(client, published_quiz.id)
    _answer(client, session["session_id"], (1, 0, 2))
    client.post(f"/sessions/{session['session_id']}/submit")

    assert client.delete(f"/sessions/{session['session_id']}").status_code == 204
    assert manager.session_count() == 0
    assert len(client.get(f"/quizzes/{published_quiz.id}/leaderboard").json()) == 1


def test_abandoned_session_is_closed_before_it_expires(manager, published_quiz, timers, store, clock):
    with TestClient(create_api_app(manager, sweep_interval_seconds=0.01)) as client:
        _start(client, published_quiz.id, "Leaver")
        clock.advance(seconds=SESSION_IDLE_TIMEOUT_SECONDS + 1)
        deadline = time.monotonic() + 5
        while manager.session_count() and time.monotonic() < deadline:
            time.sleep(0.01)

        assert manager.session_count() == 0
        timers.last.fire(600)
        assert store.list_results() == []


def test_student_page_asks_for_result_page_leaderboard_size(client):
    assert f"leaderboard?limit={RESULT_PAGE_LEADERBOARD_SIZE}" in client.get("/").text


def test_student_page_writes_names_and_options_as_text(client):
    page = client.get("/").text
    assert "badge.textContent = label" in page
    assert "fix.textContent = `Correct: ${item.correct_option}`" in page
    assert "${item.correct_option}</div>" not in page
