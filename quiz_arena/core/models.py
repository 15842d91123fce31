"""Domain models for the quiz application."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from quiz_arena.constants.quiz_constants import (
    DEFAULT_DURATION_MINUTES,
    PERFECT_SCORE_BADGE_LABEL,
    TOP_THREE_BADGE_LABEL,
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def normalize_student_name(name: str) -> str:
    """Identity key used wherever attempts are grouped by student.

    Names are free text and not verified, so two students typing the same name
    share one identity.
    """
    return name.strip().casefold()


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


@dataclass(frozen=True, slots=True)
class Question:
    """Multiple-choice question; correctness is positional."""

    text: str
    options: tuple[str, ...]
    correct_index: int
    explanation: str | None = None


@dataclass(frozen=True, slots=True)
class Quiz:
    """Published quiz. Edits produce a new quiz instead of mutating this one."""

    id: str
    title: str
    questions: tuple[Question, ...]
    difficulty: Difficulty = Difficulty.MEDIUM
    subject: str | None = None
    duration_minutes: int | None = DEFAULT_DURATION_MINUTES
    created_at: datetime = field(default_factory=utc_now)

    @property
    def question_count(self) -> int:
        return len(self.questions)

    @property
    def effective_duration_minutes(self) -> int:
        if not self.duration_minutes or self.duration_minutes <= 0:
            return DEFAULT_DURATION_MINUTES
        return self.duration_minutes


@dataclass(frozen=True, slots=True)
class Result:
    """One completed attempt of a quiz by one student."""

    quiz_id: str
    student_name: str
    score: int
    total: int
    submitted_at: datetime
    id: str | None = None

    @property
    def is_perfect(self) -> bool:
        return self.total > 0 and self.score == self.total


@dataclass(frozen=True, slots=True)
class Note:
    """Study material uploaded by the teacher (base64-encoded file)."""

    id: str
    title: str
    file_name: str
    file_data: str
    mime_type: str
    description: str = ""
    created_at: datetime = field(default_factory=utc_now)


@dataclass(frozen=True, slots=True)
class LeaderboardEntry:
    """Ranked, deduplicated view of a result. Never persisted."""

    rank: int
    quiz_id: str
    student_name: str
    score: int
    total: int
    submitted_at: datetime


class Badge(str, Enum):
    GRAMMAR_MASTER = PERFECT_SCORE_BADGE_LABEL
    TOP_THREE = TOP_THREE_BADGE_LABEL


@dataclass(frozen=True, slots=True)
class StudentProgress:
    """Streak and badges derived from one student's attempt history."""

    student_name: str
    attempt_count: int
    streak_days: int
    badges: frozenset[Badge] = frozenset()

    def has_badge(self, badge: Badge) -> bool:
        return badge in self.badges
