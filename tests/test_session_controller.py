from __future__ import annotations

import asyncio

import pytest

from quiz_arena.core.errors import SessionStateError, ValidationError
from quiz_arena.core.services.session_controller import SessionController, SessionState
from quiz_arena.core.services.session_timer import AsyncioTickTimer
from tests.conftest import BASE_TIME, make_quiz


@pytest.fixture
def controller(timers, clock) -> SessionController:
    return SessionController(timer_factory=timers, clock=clock)


def test_start_allocates_unanswered_slots_and_countdown(controller, timers):
    controller.start(make_quiz(duration_minutes=1), "  Ada ")

    assert controller.state is SessionState.ACTIVE
    assert controller.answers == (-1, -1, -1)
    assert controller.remaining_seconds == 60
    assert controller.student_name == "Ada"
    assert timers.last.running


@pytest.mark.parametrize("duration", [None, 0])
def test_missing_duration_defaults_to_ten_minutes(controller, duration):
    controller.start(make_quiz(duration_minutes=duration), "Ada")
    assert controller.remaining_seconds == 600


@pytest.mark.parametrize("name", ["", "   ", "\t\n"])
def test_blank_name_is_rejected_without_state_change(controller, timers, name):
    with pytest.raises(ValidationError):
        controller.start(make_quiz(), name)
    assert controller.state is SessionState.IDLE
    assert timers.timers == []


def test_timer_expiry_finalizes_even_with_no_answers(controller, timers):
    finished = []
    controller.add_finished_listener(finished.append)
    controller.start(make_quiz(duration_minutes=1), "Ada")

    timers.last.fire(59)
    assert controller.state is SessionState.ACTIVE
    assert controller.remaining_seconds == 1

    timers.last.fire()
    assert controller.state is SessionState.FINISHED
    assert controller.result.score == 0
    assert controller.result.total == 3
    assert finished == [controller.result]
    assert not timers.last.running


def test_ticks_after_finish_are_ignored(controller, timers):
    finished = []
    controller.add_finished_listener(finished.append)
    controller.start(make_quiz(duration_minutes=1), "Ada")
    controller.submit()

    controller.tick()
    timers.last.fire(120)

    assert len(finished) == 1
    assert timers.last.fired_count == 0


def test_select_answer_overwrites_and_is_idempotent(controller):
    controller.start(make_quiz(), "Ada")
    controller.select_answer(0, 2)
    controller.select_answer(0, 1)
    controller.select_answer(0, 1)

    assert controller.answers == (1, -1, -1)
    assert controller.state is SessionState.ACTIVE


@pytest.mark.parametrize("question_index, option_index", [(3, 0), (-1, 0), (0, 4), (0, -1)])
def test_select_answer_rejects_out_of_range(controller, question_index, option_index):
    controller.start(make_quiz(), "Ada")
    with pytest.raises(ValidationError):
        controller.select_answer(question_index, option_index)
    assert controller.answers == (-1, -1, -1)


def test_select_answer_requires_active_session(controller):
    with pytest.raises(SessionStateError):
        controller.select_answer(0, 0)


def test_manual_submit_scores_partial_answers(controller, clock):
    controller.start(make_quiz((1, 0, 2)), "Ada")
    controller.select_answer(0, 1)
    controller.select_answer(1, 0)
    assert not controller.is_complete
    clock.advance(minutes=3)

    result = controller.submit()

    assert (result.score, result.total) == (2, 3)
    assert result.submitted_at == clock.now
    assert result.quiz_id == "quiz-1"


def test_second_submit_returns_cached_result_without_emitting(controller):
    finished = []
    controller.add_finished_listener(finished.append)
    controller.start(make_quiz(), "Ada")

    first = controller.submit()
    second = controller.submit()

    assert first is second
    assert len(finished) == 1


def test_answers_are_frozen_after_submit(controller):
    controller.start(make_quiz(), "Ada")
    controller.submit()
    with pytest.raises(SessionStateError):
        controller.select_answer(0, 1)
    assert controller.answers == (-1, -1, -1)


def test_cancel_returns_to_idle_without_result(controller, timers):
    finished = []
    controller.add_finished_listener(finished.append)
    controller.start(make_quiz(), "Ada")

    controller.cancel()

    assert controller.state is SessionState.IDLE
    assert controller.result is None
    assert finished == []
    assert not timers.last.running


def test_cancel_is_only_valid_while_active(controller):
    with pytest.raises(SessionStateError):
        controller.cancel()
    controller.start(make_quiz(), "Ada")
    controller.submit()
    with pytest.raises(SessionStateError):
        controller.cancel()


def test_submit_before_start_is_rejected(controller):
    with pytest.raises(SessionStateError):
        controller.submit()


def test_cancelled_session_can_be_restarted(controller, timers):
    controller.start(make_quiz(), "Ada")
    controller.cancel()
    controller.start(make_quiz(), "Grace")
    assert controller.student_name == "Grace"
    assert len(timers.timers) == 2


def test_finished_session_cannot_start_again(controller):
    controller.start(make_quiz(), "Ada")
    controller.submit()
    with pytest.raises(SessionStateError):
        controller.start(make_quiz(), "Ada")


def test_context_exit_releases_timer_of_active_session(timers, clock):
    with SessionController(timer_factory=timers, clock=clock) as controller:
        controller.start(make_quiz(), "Ada")
        assert timers.last.running
    assert not timers.last.running
    assert controller.state is SessionState.IDLE


def test_started_at_uses_clock(controller):
    controller.start(make_quiz(), "Ada")
    assert controller.started_at == BASE_TIME


def test_asyncio_timer_drives_expiry():
    async def run() -> SessionController:
        controller = SessionController(
            timer_factory=lambda callback: AsyncioTickTimer(callback, interval_seconds=0.001),
        )
        controller.start(make_quiz(duration_minutes=1), "Ada")
        for _ in range(2000):
            if controller.state is SessionState.FINISHED:
                break
            await asyncio.sleep(0.001)
        return controller

    controller = asyncio.run(run())
    assert controller.state is SessionState.FINISHED
    assert controller.remaining_seconds == 0
    assert not controller.timer_running
