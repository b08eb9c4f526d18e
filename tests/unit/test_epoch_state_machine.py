"""Тесты для Epoch State Machine.

Coverage:
- Time-gated переход Open → InSubmission
- Принятие решения InSubmission → InExecution
- Challenge period InExecution → Closed
- Открытие следующей эпохи
- Отказы в переходах (без исключений)
- Display helpers
"""

from datetime import datetime, timezone

import pytest
from structlog.testing import capture_logs

from rwa_epoch.core.domain import Epoch, EpochSolution, EpochState, EpochTiming
from rwa_epoch.epoch import (
    EpochStateMachine,
    describe_epoch_state,
    estimate_next_epoch_execution,
    format_duration,
    format_epoch_countdown,
)

DAY = 86_400
HOUR = 3_600


@pytest.fixture
def sm() -> EpochStateMachine:
    return EpochStateMachine()


@pytest.fixture
def open_epoch() -> Epoch:
    return Epoch(pool_id="1", epoch_id=5, started_at=1_000)


@pytest.fixture
def feasible_solution() -> EpochSolution:
    return EpochSolution(score="0.75")


class TestEpochClose:
    """Open → InSubmission."""

    def test_close_before_min_duration_refused(self, sm, open_epoch):
        result = sm.close_epoch(open_epoch, now=1_000 + 12 * HOUR)

        assert not result.transition_occurred
        assert result.new_state == EpochState.OPEN
        assert result.new_epoch is open_epoch
        assert result.transition_reason == "min_epoch_duration_not_reached"
        assert result.details == "Remaining: 12h"

    def test_close_at_min_duration(self, sm, open_epoch):
        now = 1_000 + DAY
        result = sm.close_epoch(open_epoch, now=now)

        assert result.transition_occurred
        assert result.previous_state == EpochState.OPEN
        assert result.new_state == EpochState.IN_SUBMISSION
        assert result.new_epoch.closed_at == now
        assert result.transition_reason == "min_epoch_duration_elapsed"
        assert open_epoch.state == EpochState.OPEN

    def test_close_in_wrong_state_refused(self, sm, open_epoch):
        closing = open_epoch.model_copy(update={"state": EpochState.IN_SUBMISSION})
        result = sm.close_epoch(closing, now=1_000 + 2 * DAY)

        assert not result.transition_occurred
        assert result.transition_reason == "invalid_state"

    def test_custom_timing(self, open_epoch):
        sm = EpochStateMachine(timing=EpochTiming(min_epoch_duration=60, challenge_period=0))
        assert sm.close_epoch(open_epoch, now=1_060).transition_occurred

    def test_countdown(self, sm, open_epoch):
        assert sm.close_time(open_epoch) == 1_000 + DAY
        assert sm.close_countdown(open_epoch, now=1_000) == DAY
        assert sm.close_countdown(open_epoch, now=1_000 + 2 * DAY) == 0
        assert not sm.can_close_epoch(open_epoch, now=1_000 + DAY - 1)
        assert sm.can_close_epoch(open_epoch, now=1_000 + DAY)


class TestSolutionSubmission:
    """InSubmission → InExecution."""

    def test_accept_feasible_solution(self, sm, open_epoch, feasible_solution):
        now = 1_000 + DAY
        closed = sm.close_epoch(open_epoch, now=now).new_epoch
        result = sm.submit_solution(closed, feasible_solution, now=now + 10)

        assert result.transition_occurred
        assert result.new_state == EpochState.IN_EXECUTION
        assert result.new_epoch.solution == feasible_solution
        assert result.new_epoch.solution_submitted_at == now + 10
        assert result.transition_reason == "solution_accepted"

    def test_infeasible_solution_refused(self, sm, open_epoch):
        now = 1_000 + DAY
        closed = sm.close_epoch(open_epoch, now=now).new_epoch
        infeasible = EpochSolution(is_feasible=False, violations=("Exceeds maximum reserve",))
        result = sm.submit_solution(closed, infeasible, now=now)

        assert not result.transition_occurred
        assert result.new_state == EpochState.IN_SUBMISSION
        assert result.transition_reason == "solution_infeasible"
        assert "Exceeds maximum reserve" in result.details

    def test_submission_before_min_duration_refused(self, sm, open_epoch, feasible_solution):
        """Решение до истечения min_epoch_duration отклоняется."""
        result = sm.submit_solution(open_epoch, feasible_solution, now=1_000 + HOUR)

        assert not result.transition_occurred
        assert result.transition_reason == "min_epoch_duration_not_reached"

    def test_submission_to_open_epoch_refused(self, sm, open_epoch, feasible_solution):
        result = sm.submit_solution(open_epoch, feasible_solution, now=1_000 + DAY)

        assert not result.transition_occurred
        assert result.transition_reason == "invalid_state"


class TestEpochExecution:
    """InExecution → Closed → следующая эпоха."""

    @pytest.fixture
    def executing(self, sm, open_epoch, feasible_solution) -> Epoch:
        now = 1_000 + DAY
        closed = sm.close_epoch(open_epoch, now=now).new_epoch
        return sm.submit_solution(closed, feasible_solution, now=now).new_epoch

    def test_challenge_period_active(self, sm, executing):
        result = sm.execute_epoch(executing, now=executing.solution_submitted_at + HOUR - 1)

        assert not result.transition_occurred
        assert result.transition_reason == "challenge_period_active"
        assert result.details == "Remaining: 1s"

    def test_execute_after_challenge_period(self, sm, executing):
        now = executing.solution_submitted_at + HOUR
        result = sm.execute_epoch(executing, now=now)

        assert result.transition_occurred
        assert result.new_state == EpochState.CLOSED
        assert result.new_epoch.executed_at == now
        assert result.transition_reason == "challenge_period_elapsed"

    def test_execute_open_epoch_refused(self, sm, open_epoch):
        result = sm.execute_epoch(open_epoch, now=10 * DAY)
        assert result.transition_reason == "invalid_state"

    def test_open_next_epoch(self, sm, executing):
        closed = sm.execute_epoch(executing, now=10 * DAY).new_epoch
        result = sm.open_next_epoch(closed, now=10 * DAY + 5)

        assert result.transition_occurred
        assert result.new_state == EpochState.OPEN
        assert result.new_epoch.epoch_id == 6
        assert result.new_epoch.started_at == 10 * DAY + 5
        assert result.new_epoch.solution is None
        assert result.transition_reason == "next_epoch_opened"

    def test_open_next_from_open_refused(self, sm, open_epoch):
        result = sm.open_next_epoch(open_epoch, now=10 * DAY)
        assert not result.transition_occurred
        assert result.new_epoch.epoch_id == 5


class TestTransitionLogging:
    """События epoch_transition."""

    def test_transition_logged(self, open_epoch):
        with capture_logs() as logs:
            sm = EpochStateMachine()
            sm.close_epoch(open_epoch, now=1_000 + DAY)

        (event,) = [log for log in logs if log["event"] == "epoch_transition"]
        assert event["log_level"] == "info"
        assert event["from_state"] == "Open"
        assert event["to_state"] == "InSubmission"
        assert event["reason"] == "min_epoch_duration_elapsed"
        assert event["subsystem"] == "epoch_lifecycle"
        assert event["audit_trail"] is True

    def test_refusal_logged_as_debug(self, open_epoch):
        with capture_logs() as logs:
            sm = EpochStateMachine()
            sm.close_epoch(open_epoch, now=1_000)

        (event,) = [log for log in logs if log["event"] == "epoch_transition_refused"]
        assert event["log_level"] == "debug"
        assert event["context"] == {"details": "Remaining: 1d"}


class TestDisplayHelpers:
    """Форматирование для UI."""

    @pytest.mark.parametrize(
        "seconds,expected",
        [(0, "Ready to close"), (-5, "Ready to close"), (3725, "1h 2m"), (125, "2m 5s"), (42, "42s")],
    )
    def test_format_epoch_countdown(self, seconds, expected):
        assert format_epoch_countdown(seconds) == expected

    @pytest.mark.parametrize(
        "seconds,expected",
        [(0, "0s"), (59, "59s"), (3661, "1h 1m 1s"), (90061, "1d 1h 1m"), (DAY, "1d")],
    )
    def test_format_duration(self, seconds, expected):
        assert format_duration(seconds) == expected

    def test_estimate_next_epoch_execution(self):
        assert estimate_next_epoch_execution(0) == datetime(1970, 1, 2, 1, tzinfo=timezone.utc)

    def test_describe_epoch_state(self):
        assert describe_epoch_state(EpochState.OPEN) == "Accepting investment and redemption orders"
        assert describe_epoch_state("Closed") == "Epoch completed, new epoch pending"
        assert describe_epoch_state("Bogus") == "Unknown state"
