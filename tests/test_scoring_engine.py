from __future__ import annotations

import pytest

from quiz_arena.core.services.scoring_engine import grade_answers, percentage, score
from tests.conftest import make_quiz


def test_partial_answers_score_only_matching_positions():
    quiz = make_quiz((1, 0, 2))
    assert score(quiz, [1, 0, -1]) == 2


def test_unanswered_never_matches():
    quiz = make_quiz((0, 0, 0))
    assert score(quiz, [-1, -1, -1]) == 0


@pytest.mark.parametrize(
    "answers",
    [[], [3, 3, 3], [1, 0, 2], [0, 1, 2], [1, 0, 2, 3, 3], [9, -1, 2]],
)
def test_score_is_bounded_by_question_count(answers):
    quiz = make_quiz((1, 0, 2))
    assert 0 <= score(quiz, answers) <= quiz.question_count


def test_swapping_answers_between_questions_changes_score():
    quiz = make_quiz((1, 0, 2))
    assert score(quiz, [1, 0, 2]) == 3
    assert score(quiz, [0, 1, 2]) == 1


def test_short_answer_set_treats_missing_as_unanswered():
    quiz = make_quiz((1, 0, 2))
    assert score(quiz, [1]) == 1


def test_grade_answers_reports_each_question():
    quiz = make_quiz((1, 0, 2))
    reviews = grade_answers(quiz, [1, 3, -1])
    assert [r.is_correct for r in reviews] == [True, False, False]
    assert [r.is_unanswered for r in reviews] == [False, False, True]
    assert reviews[1].correct_index == 0


def test_percentage_rounds_and_handles_empty_quiz():
    assert percentage(2, 3) == 67
    assert percentage(1, 8) == 13
    assert percentage(0, 0) == 0
