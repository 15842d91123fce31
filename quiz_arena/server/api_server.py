"""FastAPI server that exposes the student endpoints."""

from __future__ import annotations

import asyncio
import base64
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager, suppress
import logging
from threading import Thread

from fastapi import Depends, FastAPI, HTTPException, Response
from fastapi.responses import HTMLResponse
from pydantic import BaseModel
import uvicorn

from quiz_arena.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from quiz_arena.constants.quiz_constants import SESSION_SWEEP_INTERVAL_SECONDS
from quiz_arena.core.errors import PersistenceError, SessionStateError, ValidationError
from quiz_arena.core.markdown_renderer import renderer
from quiz_arena.core.models import LeaderboardEntry, Quiz
from quiz_arena.core.quiz_exporter import build_scorecard_pdf
from quiz_arena.core.quiz_manager import QuizManager
from quiz_arena.core.services.scoring_engine import grade_answers, percentage
from quiz_arena.core.services.session_controller import SessionController, SessionState
from quiz_arena.server.student_page import STUDENT_PAGE_HTML

logger = logging.getLogger(__name__)


class StartSessionPayload(BaseModel):
    """Payload schema for starting a quiz attempt."""

    quiz_id: str
    student_name: str


class AnswerPayload(BaseModel):
    """Payload schema for selecting an option."""

    question_index: int
    option_index: int


@contextmanager
def _core_errors() -> Iterator[None]:
    try:
        yield
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except SessionStateError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc


def _quiz_summary(quiz: Quiz) -> dict[str, object]:
    return {
        "id": quiz.id,
        "title": quiz.title,
        "subject": quiz.subject,
        "difficulty": quiz.difficulty.value,
        "duration_minutes": quiz.effective_duration_minutes,
        "question_count": quiz.question_count,
        "created_at": quiz.created_at.isoformat(),
    }


def _quiz_for_student(quiz: Quiz) -> dict[str, object]:
    # Correct answers stay server-side until the attempt is finished.
    summary = _quiz_summary(quiz)
    summary["questions"] = [
        {"text_html": renderer.render_fragment(question.text), "options": list(question.options)}
        for question in quiz.questions
    ]
    return summary


def _leaderboard_row(entry: LeaderboardEntry) -> dict[str, object]:
    return {
        "rank": entry.rank,
        "student_name": entry.student_name,
        "score": entry.score,
        "total": entry.total,
        "submitted_at": entry.submitted_at.isoformat(),
    }


def _session_state(session_id: str, controller: SessionController, stored: bool) -> dict[str, object]:
    quiz = controller.quiz
    body: dict[str, object] = {
        "session_id": session_id,
        "state": controller.state.value,
        "quiz_id": quiz.id if quiz else None,
        "student_name": controller.student_name,
        "remaining_seconds": controller.remaining_seconds,
        "answers": list(controller.answers),
        "answered_count": controller.answered_count,
        "is_complete": controller.is_complete,
        "result": None,
        "result_stored": stored,
        "review": [],
    }
    result = controller.result
    if result is not None:
        body["result"] = {
            "score": result.score,
            "total": result.total,
            "percentage": percentage(result.score, result.total),
            "submitted_at": result.submitted_at.isoformat(),
        }
        body["review"] = [
            {
                "selected_index": review.selected_index,
                "correct_index": review.correct_index,
                "correct_option": quiz.questions[review.question_index].options[review.correct_index],
                "is_correct": review.is_correct,
                "is_unanswered": review.is_unanswered,
                "explanation_html": renderer.render_fragment(quiz.questions[review.question_index].explanation),
            }
            for review in grade_answers(quiz, controller.answers)
        ]
    return body


async def _sweep_idle_sessions(quiz_manager: QuizManager, interval_seconds: float) -> None:
    while True:
        await asyncio.sleep(interval_seconds)
        quiz_manager.close_idle_sessions()


def _get_quiz_manager_dependency(quiz_manager: QuizManager):
    def dependency() -> QuizManager:
        return quiz_manager

    return dependency


def create_api_app(
    quiz_manager: QuizManager,
    sweep_interval_seconds: float = SESSION_SWEEP_INTERVAL_SECONDS,
) -> FastAPI:
    """Create a FastAPI application wired to the provided quiz manager.

    Session endpoints are coroutines so that session timers are scheduled on
    the server's event loop. A background task closes sessions whose page
    stopped polling.
    """
    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        sweeper = asyncio.create_task(_sweep_idle_sessions(quiz_manager, sweep_interval_seconds))
        try:
            yield
        finally:
            sweeper.cancel()
            with suppress(asyncio.CancelledError):
                await sweeper
            quiz_manager.close_all_sessions()

    app = FastAPI(title="QuizArena API", version="0.1.0", lifespan=lifespan)
    quiz_manager_dep = _get_quiz_manager_dependency(quiz_manager)

    def session_body(manager: QuizManager, session_id: str) -> dict[str, object]:
        return _session_state(
            session_id,
            manager.get_session(session_id),
            manager.is_result_stored(session_id),
        )

    @app.get("/", response_class=HTMLResponse)
    def serve_student_page() -> str:
        return STUDENT_PAGE_HTML

    @app.get("/quizzes")
    def list_quizzes(manager: QuizManager = Depends(quiz_manager_dep)) -> list[dict[str, object]]:
        return [_quiz_summary(quiz) for quiz in manager.list_quizzes()]

    @app.get("/quizzes/{quiz_id}")
    def get_quiz(quiz_id: str, manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, object]:
        with _core_errors():
            return _quiz_for_student(manager.get_quiz(quiz_id))

    @app.get("/quizzes/{quiz_id}/leaderboard")
    def get_leaderboard(
        quiz_id: str,
        limit: int | None = None,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> list[dict[str, object]]:
        with _core_errors():
            manager.get_quiz(quiz_id)
            return [_leaderboard_row(entry) for entry in manager.get_leaderboard(quiz_id, limit=limit)]

    @app.post("/sessions", status_code=201)
    async def start_session(
        payload: StartSessionPayload,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        with _core_errors():
            session_id = manager.start_session(payload.quiz_id, payload.student_name)
            return session_body(manager, session_id)

    @app.get("/sessions/{session_id}")
    async def get_session(session_id: str, manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, object]:
        with _core_errors():
            return session_body(manager, session_id)

    @app.post("/sessions/{session_id}/answers")
    async def select_answer(
        session_id: str,
        payload: AnswerPayload,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        with _core_errors():
            manager.select_answer(session_id, payload.question_index, payload.option_index)
            return session_body(manager, session_id)

    @app.post("/sessions/{session_id}/submit")
    async def submit_session(session_id: str, manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, object]:
        with _core_errors():
            manager.submit_session(session_id, require_complete=True)
            return session_body(manager, session_id)

    @app.delete("/sessions/{session_id}", status_code=204)
    async def cancel_session(session_id: str, manager: QuizManager = Depends(quiz_manager_dep)) -> Response:
        with _core_errors():
            manager.end_session(session_id)
        return Response(status_code=204)

    @app.get("/sessions/{session_id}/scorecard.pdf")
    def download_scorecard(session_id: str, manager: QuizManager = Depends(quiz_manager_dep)) -> Response:
        with _core_errors():
            controller = manager.get_session(session_id)
        if controller.state is not SessionState.FINISHED:
            raise HTTPException(status_code=409, detail="The quiz has not been submitted yet.")
        document = build_scorecard_pdf(controller.quiz, controller.result, controller.answers)
        return Response(
            content=document,
            media_type="application/pdf",
            headers={"Content-Disposition": 'attachment; filename="scorecard.pdf"'},
        )

    @app.get("/students/{student_name}/progress")
    def get_progress(student_name: str, manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, object]:
        with _core_errors():
            progress = manager.get_student_progress(student_name)
        return {
            "student_name": progress.student_name,
            "attempt_count": progress.attempt_count,
            "streak_days": progress.streak_days,
            "badges": sorted(badge.value for badge in progress.badges),
        }

    @app.get("/notes")
    def list_notes(manager: QuizManager = Depends(quiz_manager_dep)) -> list[dict[str, object]]:
        return [
            {
                "id": note.id,
                "title": note.title,
                "description": note.description,
                "file_name": note.file_name,
                "mime_type": note.mime_type,
                "created_at": note.created_at.isoformat(),
            }
            for note in manager.list_notes()
        ]

    @app.get("/notes/{note_id}/download")
    def download_note(note_id: str, manager: QuizManager = Depends(quiz_manager_dep)) -> Response:
        with _core_errors():
            note = manager.get_note(note_id)
        return Response(
            content=base64.b64decode(note.file_data),
            media_type=note.mime_type,
            headers={"Content-Disposition": f'attachment; filename="{note.file_name}"'},
        )

    return app


def start_api_server(
    quiz_manager: QuizManager,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> Thread:
    """Start the FastAPI server in a background daemon thread."""
    app = create_api_app(quiz_manager)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)

    def run_server() -> None:
        server.run()

    thread = Thread(target=run_server, name="QuizApiServer", daemon=True)
    thread.start()
    logger.info("Student API listening on %s:%s", host, port)
    return thread
