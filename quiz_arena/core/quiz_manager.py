"""Business logic for quizzes, attempts, and rankings shared between UI and API."""

from __future__ import annotations

import base64
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
import logging
from threading import RLock
from uuid import uuid4

from quiz_arena.constants.quiz_constants import SESSION_IDLE_TIMEOUT_SECONDS
from quiz_arena.core.errors import PersistenceError, SessionStateError, ValidationError
from quiz_arena.core.models import LeaderboardEntry, Note, Quiz, Result, StudentProgress, utc_now
from quiz_arena.core.services import gamification
from quiz_arena.core.services.leaderboard import build_leaderboard
from quiz_arena.core.services.quiz_generator import GenerationRequest, QuizGenerator
from quiz_arena.core.services.quiz_store import Collection, QuizStore, SnapshotListener, Subscription
from quiz_arena.core.services.session_controller import SessionController, SessionState
from quiz_arena.core.services.session_timer import AsyncioTickTimer, TimerFactory

logger = logging.getLogger(__name__)

SESSION_IDLE_TIMEOUT = timedelta(seconds=SESSION_IDLE_TIMEOUT_SECONDS)


@dataclass(slots=True)
class _SessionRecord:
    controller: SessionController
    last_seen: datetime
    stored_result: Result | None = None


class QuizManager:
    """Facade over the store, the generator, and running quiz sessions.

    The API server runs in its own thread next to the Qt event loop, so every
    public method takes the manager lock. Session timers call back into the
    manager on expiry, hence the re-entrant lock.
    """

    def __init__(
        self,
        store: QuizStore,
        generator: QuizGenerator | None = None,
        timer_factory: TimerFactory = AsyncioTickTimer,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._lock = RLock()
        self._store = store
        self._generator = generator
        self._timer_factory = timer_factory
        self._clock = clock
        self._sessions: dict[str, _SessionRecord] = {}

    @property
    def store(self) -> QuizStore:
        return self._store

    # --- Quizzes ---

    def generate_quiz(self, request: GenerationRequest) -> Quiz:
        """Ask the AI generator for a draft. Drafts are not stored until published."""
        if self._generator is None:
            raise ValidationError("Quiz generation is not configured.")
        return self._generator.generate(request)

    def publish_quiz(self, draft: Quiz, duration_minutes: int | None = None) -> Quiz:
        if duration_minutes is not None:
            draft = replace(draft, duration_minutes=duration_minutes)
        with self._lock:
            return self._store.add_quiz(replace(draft, created_at=self._clock()))

    def delete_quiz(self, quiz_id: str) -> None:
        with self._lock:
            self._store.delete_quiz(quiz_id)

    def get_quiz(self, quiz_id: str) -> Quiz:
        with self._lock:
            return self._store.get_quiz(quiz_id)

    def list_quizzes(self) -> list[Quiz]:
        with self._lock:
            return self._store.list_quizzes()

    # --- Notes ---

    def upload_note(self, title: str, file_name: str, content: bytes, mime_type: str) -> Note:
        note = Note(
            id="",
            title=title,
            file_name=file_name,
            file_data=base64.b64encode(content).decode("ascii"),
            mime_type=mime_type,
            created_at=self._clock(),
        )
        with self._lock:
            return self._store.add_note(note)

    def delete_note(self, note_id: str) -> None:
        with self._lock:
            self._store.delete_note(note_id)

    def get_note(self, note_id: str) -> Note:
        with self._lock:
            return self._store.get_note(note_id)

    def list_notes(self) -> list[Note]:
        with self._lock:
            return self._store.list_notes()

    # --- Sessions ---

    def start_session(self, quiz_id: str, student_name: str) -> str:
        with self._lock:
            quiz = self._store.get_quiz(quiz_id)
            session_id = uuid4().hex
            controller = SessionController(timer_factory=self._timer_factory, clock=self._clock)
            controller.add_finished_listener(lambda result: self._handle_finished(session_id, result))
            controller.start(quiz, student_name)
            self._sessions[session_id] = _SessionRecord(controller=controller, last_seen=self._clock())
            return session_id

    def get_session(self, session_id: str) -> SessionController:
        with self._lock:
            return self._touch(session_id).controller

    def select_answer(self, session_id: str, question_index: int, option_index: int) -> None:
        with self._lock:
            self._touch(session_id).controller.select_answer(question_index, option_index)

    def submit_session(self, session_id: str, require_complete: bool = False) -> Result:
        """Finalize an attempt and make sure its result is stored exactly once.

        Re-submitting a finished session whose earlier write failed retries the
        write; otherwise the stored result is returned unchanged.
        """
        with self._lock:
            record = self._touch(session_id)
            controller = record.controller
            already_finished = controller.state is SessionState.FINISHED
            if require_complete and not already_finished and not controller.is_complete:
                raise SessionStateError("Answer every question before submitting.")
            result = controller.submit()
            if record.stored_result is None:
                if not already_finished:
                    # The finished listener already tried and logged the write.
                    raise PersistenceError("The result could not be saved. Submit again to retry.")
                self._persist_result(session_id, result)
            return record.stored_result

    def cancel_session(self, session_id: str) -> None:
        with self._lock:
            record = self._record(session_id)
            record.controller.cancel()
            del self._sessions[session_id]

    def end_session(self, session_id: str) -> None:
        """Leave an attempt: cancel it while running, forget it once its result is stored.

        A finished session whose result is not stored yet is kept so that the
        student can still resubmit it.
        """
        with self._lock:
            record = self._record(session_id)
            state = record.controller.state
            if state is SessionState.FINISHED and record.stored_result is None:
                raise SessionStateError("The result has not been saved yet. Submit again to retry.")
            if state is SessionState.ACTIVE:
                self.cancel_session(session_id)
            else:
                self.close_session(session_id)

    def close_session(self, session_id: str) -> None:
        """Drop a session whose host went away, releasing its timer."""
        with self._lock:
            record = self._sessions.pop(session_id, None)
            if record is not None:
                record.controller.close()

    def close_all_sessions(self) -> None:
        with self._lock:
            for session_id in list(self._sessions):
                self.close_session(session_id)

    def close_idle_sessions(self, max_idle: timedelta = SESSION_IDLE_TIMEOUT) -> list[str]:
        """Close sessions nobody has looked at for ``max_idle``.

        An abandoned attempt is cancelled, so it never expires into a result.
        Finished sessions are only dropped once their result is stored.
        Returns the closed session ids.
        """
        cutoff = self._clock() - max_idle
        with self._lock:
            idle = [
                session_id
                for session_id, record in self._sessions.items()
                if record.last_seen < cutoff
                and not (
                    record.controller.state is SessionState.FINISHED
                    and record.stored_result is None
                )
            ]
            for session_id in idle:
                self.close_session(session_id)
        if idle:
            logger.info("Closed %s idle session(s)", len(idle))
        return idle

    def session_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def is_result_stored(self, session_id: str) -> bool:
        with self._lock:
            return self._record(session_id).stored_result is not None

    # --- Rankings ---

    def get_leaderboard(self, quiz_id: str, limit: int | None = None) -> list[LeaderboardEntry]:
        with self._lock:
            return build_leaderboard(self._store.results_for_quiz(quiz_id), limit=limit)

    def get_student_progress(self, student_name: str, today: date | None = None) -> StudentProgress:
        if not student_name.strip():
            raise ValidationError("Student name must not be empty.")
        with self._lock:
            results = self._store.list_results()
        return gamification.evaluate(student_name, results, today=today)

    def subscribe(self, collection: Collection, listener: SnapshotListener | None = None) -> Subscription:
        return self._store.subscribe(collection, listener)

    # --- Internals ---

    def _record(self, session_id: str) -> _SessionRecord:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise LookupError(f"Session {session_id} not found") from None

    def _touch(self, session_id: str) -> _SessionRecord:
        record = self._record(session_id)
        record.last_seen = self._clock()
        return record

    def _handle_finished(self, session_id: str, result: Result) -> None:
        try:
            self._persist_result(session_id, result)
        except PersistenceError:
            # Already logged; expiry has no caller, and submit_session reports it.
            return

    def _persist_result(self, session_id: str, result: Result) -> None:
        with self._lock:
            record = self._sessions.get(session_id)
            if record is None or record.stored_result is not None:
                return
            try:
                record.stored_result = self._store.add_result(result)
            except PersistenceError:
                logger.error(
                    "Result for quiz=%s student=%s not stored; resubmit to retry",
                    result.quiz_id,
                    result.student_name,
                )
                raise
