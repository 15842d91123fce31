"""Scoring of answer sets against a quiz."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from quiz_arena.constants.quiz_constants import UNANSWERED
from quiz_arena.core.models import Quiz


@dataclass(frozen=True, slots=True)
class QuestionReview:
    """Per-question outcome shown on the result page and scorecard."""

    question_index: int
    selected_index: int
    correct_index: int

    @property
    def is_unanswered(self) -> bool:
        return self.selected_index == UNANSWERED

    @property
    def is_correct(self) -> bool:
        return self.selected_index == self.correct_index


def _answer_at(answers: Sequence[int], index: int) -> int:
    return answers[index] if index < len(answers) else UNANSWERED


def score(quiz: Quiz, answers: Sequence[int]) -> int:
    """Count the questions whose selected option equals the correct index."""
    return sum(
        1
        for index, question in enumerate(quiz.questions)
        if _answer_at(answers, index) == question.correct_index
    )


def grade_answers(quiz: Quiz, answers: Sequence[int]) -> list[QuestionReview]:
    return [
        QuestionReview(
            question_index=index,
            selected_index=_answer_at(answers, index),
            correct_index=question.correct_index,
        )
        for index, question in enumerate(quiz.questions)
    ]


def percentage(score_value: int, total: int) -> int:
    """Whole-number percentage, rounding halves up like the result page."""
    if total <= 0:
        return 0
    return int(score_value * 100 / total + 0.5)
