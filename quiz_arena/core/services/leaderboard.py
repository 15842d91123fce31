"""Per-quiz leaderboard built from the stored results."""

from __future__ import annotations

from collections.abc import Iterable

from quiz_arena.core.models import LeaderboardEntry, Result, normalize_student_name


def deduplicate_results(results: Iterable[Result]) -> list[Result]:
    """Keep the earliest result for each (normalized name, score) pair.

    Reloads that re-send the same submission would otherwise add rows.
    """
    seen: set[tuple[str, int]] = set()
    unique: list[Result] = []
    for result in sorted(results, key=lambda r: r.submitted_at):
        key = (normalize_student_name(result.student_name), result.score)
        if key in seen:
            continue
        seen.add(key)
        unique.append(result)
    return unique


def build_leaderboard(
    results: Iterable[Result],
    quiz_id: str | None = None,
    limit: int | None = None,
) -> list[LeaderboardEntry]:
    """Rank results by score, ties going to whoever reached the score first."""
    if quiz_id is not None:
        results = [result for result in results if result.quiz_id == quiz_id]

    ranked = sorted(deduplicate_results(results), key=lambda r: (-r.score, r.submitted_at))
    if limit is not None:
        ranked = ranked[: max(0, limit)]

    return [
        LeaderboardEntry(
            rank=position,
            quiz_id=result.quiz_id,
            student_name=result.student_name,
            score=result.score,
            total=result.total,
            submitted_at=result.submitted_at,
        )
        for position, result in enumerate(ranked, start=1)
    ]


def rank_of(entries: Iterable[LeaderboardEntry], student_name: str) -> int | None:
    """Best rank held by the student on a leaderboard, or None."""
    key = normalize_student_name(student_name)
    for entry in entries:
        if normalize_student_name(entry.student_name) == key:
            return entry.rank
    return None
