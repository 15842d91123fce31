"""Timed state machine governing one student's quiz attempt."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from enum import Enum
import logging

from quiz_arena.constants.quiz_constants import UNANSWERED
from quiz_arena.core.errors import SessionStateError, ValidationError
from quiz_arena.core.models import Quiz, Result, utc_now
from quiz_arena.core.services import scoring_engine
from quiz_arena.core.services.session_timer import AsyncioTickTimer, TickTimer, TimerFactory

logger = logging.getLogger(__name__)

FinishedListener = Callable[[Result], None]


class SessionState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    FINISHED = "finished"


class SessionController:
    """Runs one attempt: ``IDLE -> ACTIVE -> FINISHED`` or ``ACTIVE -> IDLE`` on cancel.

    The tick timer is acquired when the session becomes active and released on
    every exit path (manual submit, expiry, cancel, close). A finished session
    is terminal: ``submit()`` then returns the cached result.
    """

    def __init__(
        self,
        timer_factory: TimerFactory = AsyncioTickTimer,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._timer_factory = timer_factory
        self._clock = clock
        self._listeners: list[FinishedListener] = []

        self._state = SessionState.IDLE
        self._quiz: Quiz | None = None
        self._student_name: str | None = None
        self._answers: list[int] = []
        self._frozen_answers: tuple[int, ...] | None = None
        self._remaining_seconds: int = 0
        self._started_at: datetime | None = None
        self._result: Result | None = None
        self._timer: TickTimer | None = None

    # --- Observers ---

    def add_finished_listener(self, listener: FinishedListener) -> None:
        self._listeners.append(listener)

    # --- Read-only state ---

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def quiz(self) -> Quiz | None:
        return self._quiz

    @property
    def student_name(self) -> str | None:
        return self._student_name

    @property
    def remaining_seconds(self) -> int:
        return self._remaining_seconds

    @property
    def started_at(self) -> datetime | None:
        return self._started_at

    @property
    def answers(self) -> tuple[int, ...]:
        if self._frozen_answers is not None:
            return self._frozen_answers
        return tuple(self._answers)

    @property
    def result(self) -> Result | None:
        return self._result

    @property
    def answered_count(self) -> int:
        return sum(1 for answer in self.answers if answer != UNANSWERED)

    @property
    def is_complete(self) -> bool:
        """True when every question has a selection (UI gate for manual submit)."""
        answers = self.answers
        return bool(answers) and all(answer != UNANSWERED for answer in answers)

    @property
    def timer_running(self) -> bool:
        return self._timer is not None and self._timer.running

    # --- Transitions ---

    def start(self, quiz: Quiz, student_name: str) -> None:
        if self._state is not SessionState.IDLE:
            raise SessionStateError(f"Cannot start a session that is {self._state.value}.")
        cleaned_name = (student_name or "").strip()
        if not cleaned_name:
            raise ValidationError("Please enter your name first!")

        self._quiz = quiz
        self._student_name = cleaned_name
        self._answers = [UNANSWERED] * quiz.question_count
        self._frozen_answers = None
        self._remaining_seconds = quiz.effective_duration_minutes * 60
        self._started_at = self._clock()
        self._result = None
        self._acquire_timer()
        self._state = SessionState.ACTIVE
        logger.info(
            "Session started: quiz=%s student=%s duration=%ss",
            quiz.id,
            cleaned_name,
            self._remaining_seconds,
        )

    def tick(self) -> None:
        """Advance the countdown by one second; expiry finalizes the attempt."""
        if self._state is not SessionState.ACTIVE:
            return
        self._remaining_seconds = max(0, self._remaining_seconds - 1)
        if self._remaining_seconds == 0:
            logger.info("Time limit reached for quiz=%s student=%s", self._quiz.id, self._student_name)
            self._finalize()

    def select_answer(self, question_index: int, option_index: int) -> None:
        self._require_active("select an answer")
        if not 0 <= question_index < len(self._answers):
            raise ValidationError(f"Question index {question_index} out of range")
        option_count = len(self._quiz.questions[question_index].options)
        if not 0 <= option_index < option_count:
            raise ValidationError(f"Option index {option_index} out of range")
        self._answers[question_index] = option_index

    def submit(self) -> Result:
        if self._state is SessionState.FINISHED:
            return self._result
        self._require_active("submit")
        return self._finalize()

    def cancel(self) -> None:
        self._require_active("cancel")
        self._release_timer()
        logger.info("Session cancelled: quiz=%s student=%s", self._quiz.id, self._student_name)
        self._state = SessionState.IDLE
        self._quiz = None
        self._student_name = None
        self._answers = []
        self._remaining_seconds = 0
        self._started_at = None

    def close(self) -> None:
        """Release the session when its host goes away; cancels an active attempt."""
        if self._state is SessionState.ACTIVE:
            self.cancel()
        else:
            self._release_timer()

    def __enter__(self) -> SessionController:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # --- Internals ---

    def _require_active(self, action: str) -> None:
        if self._state is not SessionState.ACTIVE:
            raise SessionStateError(f"Cannot {action} while the session is {self._state.value}.")

    def _acquire_timer(self) -> None:
        self._release_timer()
        self._timer = self._timer_factory(self.tick)
        self._timer.start()

    def _release_timer(self) -> None:
        if self._timer is not None:
            self._timer.stop()
            self._timer = None

    def _finalize(self) -> Result:
        self._release_timer()
        self._frozen_answers = tuple(self._answers)
        quiz = self._quiz
        result = Result(
            quiz_id=quiz.id,
            student_name=self._student_name,
            score=scoring_engine.score(quiz, self._frozen_answers),
            total=quiz.question_count,
            submitted_at=self._clock(),
        )
        self._result = result
        self._state = SessionState.FINISHED
        logger.info(
            "Session finished: quiz=%s student=%s score=%s/%s",
            quiz.id,
            result.student_name,
            result.score,
            result.total,
        )
        for listener in list(self._listeners):
            listener(result)
        return result
