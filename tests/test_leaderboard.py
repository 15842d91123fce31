from __future__ import annotations

from quiz_arena.core.services.leaderboard import build_leaderboard, deduplicate_results, rank_of
from tests.conftest import make_result


def test_repeated_submission_keeps_earliest_copy():
    results = [
        make_result("Ann", 4, minutes=10),
        make_result("ann ", 4, minutes=2),
        make_result("Bob", 3, minutes=5),
    ]

    unique = deduplicate_results(results)

    assert len(unique) == 2
    ann = next(result for result in unique if result.student_name.strip().lower() == "ann")
    assert ann.submitted_at == make_result("x", 0, minutes=2).submitted_at


def test_same_student_with_different_scores_keeps_both():
    results = [make_result("Ann", 4, minutes=1), make_result("Ann", 5, minutes=2)]

    entries = build_leaderboard(results)

    assert [(entry.rank, entry.score) for entry in entries] == [(1, 5), (2, 4)]


def test_ties_are_broken_by_earliest_submission():
    results = [
        make_result("Cid", 5, minutes=3),
        make_result("Ann", 4, minutes=10),
        make_result("Bob", 5, minutes=1),
        make_result("ann", 4, minutes=2),
    ]

    entries = build_leaderboard(results)

    assert [(entry.rank, entry.student_name, entry.score) for entry in entries] == [
        (1, "Bob", 5),
        (2, "Cid", 5),
        (3, "ann", 4),
    ]


def test_ranking_is_idempotent():
    results = [
        make_result("Ann", 4, minutes=10),
        make_result("Bob", 5, minutes=1),
        make_result("ann", 4, minutes=2),
    ]
    first = build_leaderboard(results)
    rebuilt = build_leaderboard(
        [make_result(entry.student_name, entry.score, total=entry.total, at=entry.submitted_at) for entry in first]
    )
    assert rebuilt == first


def test_ranks_are_contiguous_from_one():
    results = [make_result(f"Student {index}", index % 3, minutes=index) for index in range(7)]
    entries = build_leaderboard(results)
    assert [entry.rank for entry in entries] == list(range(1, 8))


def test_single_result_ranks_first():
    entries = build_leaderboard([make_result("Ada", 2, total=3)])
    assert len(entries) == 1
    assert entries[0].rank == 1
    assert (entries[0].score, entries[0].total) == (2, 3)


def test_limit_and_quiz_filter():
    results = [
        make_result("Ann", 5, minutes=1),
        make_result("Bob", 4, minutes=2),
        make_result("Cid", 3, minutes=3),
        make_result("Dee", 5, minutes=4, quiz_id="quiz-2"),
    ]

    entries = build_leaderboard(results, quiz_id="quiz-1", limit=2)

    assert [entry.student_name for entry in entries] == ["Ann", "Bob"]
    assert build_leaderboard(results, quiz_id="quiz-1", limit=0) == []


def test_empty_input_yields_empty_board():
    assert build_leaderboard([]) == []


def test_rank_of_matches_normalized_name():
    entries = build_leaderboard([make_result("Ann", 5, minutes=1), make_result("Bob", 4, minutes=2)])
    assert rank_of(entries, "  BOB ") == 2
    assert rank_of(entries, "Cid") is None
