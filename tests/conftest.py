from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from quiz_arena.core.models import Difficulty, Question, Quiz, Result
from quiz_arena.core.quiz_manager import QuizManager
from quiz_arena.core.services.quiz_store import QuizStore
from quiz_arena.core.services.session_timer import ManualTickTimer

BASE_TIME = datetime(2024, 3, 10, 9, 0, 0)


def make_question(correct_index: int = 0, text: str = "Pick one", explanation: str | None = None) -> Question:
    return Question(
        text=text,
        options=("Alpha", "Bravo", "Charlie", "Delta"),
        correct_index=correct_index,
        explanation=explanation,
    )


def make_quiz(
    correct_indexes: tuple[int, ...] = (1, 0, 2),
    duration_minutes: int | None = 10,
    quiz_id: str = "quiz-1",
    title: str = "Parts of Speech",
) -> Quiz:
    return Quiz(
        id=quiz_id,
        title=title,
        subject="Grammar",
        difficulty=Difficulty.EASY,
        duration_minutes=duration_minutes,
        created_at=BASE_TIME,
        questions=tuple(
            make_question(index, text=f"Question {number}")
            for number, index in enumerate(correct_indexes, start=1)
        ),
    )


def make_result(
    student_name: str,
    score: int,
    minutes: int = 0,
    total: int = 5,
    quiz_id: str = "quiz-1",
    at: datetime | None = None,
) -> Result:
    return Result(
        quiz_id=quiz_id,
        student_name=student_name,
        score=score,
        total=total,
        submitted_at=at or BASE_TIME + timedelta(minutes=minutes),
    )


class TimerRecorder:
    """Timer factory that keeps every ManualTickTimer it creates."""

    def __init__(self) -> None:
        self.timers: list[ManualTickTimer] = []

    def __call__(self, callback) -> ManualTickTimer:
        timer = ManualTickTimer(callback)
        self.timers.append(timer)
        return timer

    @property
    def last(self) -> ManualTickTimer:
        return self.timers[-1]


class FakeClock:
    def __init__(self, start: datetime = BASE_TIME) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def timers() -> TimerRecorder:
    return TimerRecorder()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> QuizStore:
    return QuizStore()


@pytest.fixture
def manager(store: QuizStore, timers: TimerRecorder, clock: FakeClock) -> QuizManager:
    return QuizManager(store, timer_factory=timers, clock=clock)


@pytest.fixture
def published_quiz(manager: QuizManager) -> Quiz:
    return manager.publish_quiz(make_quiz())
