"""Streaks and badges derived from a student's attempt history."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, timedelta

from quiz_arena.constants.quiz_constants import PODIUM_SIZE
from quiz_arena.core.models import Badge, Result, StudentProgress, normalize_student_name
from quiz_arena.core.services.leaderboard import build_leaderboard, rank_of


def results_for_student(results: Iterable[Result], student_name: str) -> list[Result]:
    key = normalize_student_name(student_name)
    return [result for result in results if normalize_student_name(result.student_name) == key]


def local_day(timestamp: datetime) -> date:
    """Calendar day of a timestamp in the local timezone (naive values are local)."""
    if timestamp.tzinfo is None:
        return timestamp.date()
    return timestamp.astimezone().date()


def has_perfect_score(results: Iterable[Result]) -> bool:
    return any(result.is_perfect for result in results)


def streak_days(results: Iterable[Result], today: date | None = None) -> int:
    """Count consecutive active days ending today or yesterday.

    Several attempts on one day count once. A streak whose most recent day is
    older than yesterday has lapsed and counts as zero.
    """
    days = sorted({local_day(result.submitted_at) for result in results}, reverse=True)
    if not days:
        return 0

    today = today or date.today()
    if days[0] not in (today, today - timedelta(days=1)):
        return 0

    streak = 1
    for newer, older in zip(days, days[1:]):
        if (newer - older).days != 1:
            break
        streak += 1
    return streak


def has_top_three(student_name: str, all_results: Iterable[Result]) -> bool:
    """True if the student holds a podium rank on any quiz they attempted."""
    all_results = list(all_results)
    attempted = {result.quiz_id for result in results_for_student(all_results, student_name)}
    for quiz_id in attempted:
        entries = build_leaderboard(all_results, quiz_id=quiz_id, limit=PODIUM_SIZE)
        if rank_of(entries, student_name) is not None:
            return True
    return False


def evaluate(
    student_name: str,
    all_results: Iterable[Result],
    today: date | None = None,
) -> StudentProgress:
    all_results = list(all_results)
    history = results_for_student(all_results, student_name)

    badges: set[Badge] = set()
    if has_perfect_score(history):
        badges.add(Badge.GRAMMAR_MASTER)
    if has_top_three(student_name, all_results):
        badges.add(Badge.TOP_THREE)

    return StudentProgress(
        student_name=student_name.strip(),
        attempt_count=len(history),
        streak_days=streak_days(history, today=today),
        badges=frozenset(badges),
    )
