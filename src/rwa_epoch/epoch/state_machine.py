"""
Epoch State Machine — жизненный цикл эпохи пула

    Open → InSubmission → InExecution → Closed → (epoch_id + 1) Open

- Open → InSubmission: только при now ≥ started_at + min_epoch_duration
- InSubmission → InExecution: принятие feasible решения (после того же гейта)
- InExecution → Closed: после challenge_period от подачи решения
- Closed → Open: следующая эпоха, epoch_id + 1

Машина stateless: каждый метод получает Epoch и явное `now` (UTC, секунды)
и возвращает EpochTransitionResult с новым Epoch. Часы не читаются.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from structlog.types import FilteringBoundLogger

from rwa_epoch.core.domain.epoch import Epoch, EpochSolution, EpochState, EpochTiming
from rwa_epoch.logging.config import get_epoch_logger, log_epoch_transition


_STATE_DESCRIPTIONS = {
    EpochState.OPEN: "Accepting investment and redemption orders",
    EpochState.IN_SUBMISSION: "Collecting final orders before solution",
    EpochState.IN_EXECUTION: "Executing the epoch solution",
    EpochState.CLOSED: "Epoch completed, new epoch pending",
}


@dataclass(frozen=True)
class EpochTransitionResult:
    """Результат перехода состояния эпохи."""

    new_epoch: Epoch

    # Диагностика
    transition_occurred: bool
    transition_reason: str
    previous_state: EpochState

    details: str

    @property
    def new_state(self) -> EpochState:
        return self.new_epoch.state


class EpochStateMachine:
    """
    State machine эпохи с time-gated переходами.

    Отказ в переходе: не исключение: результат с transition_occurred=False
    и причиной в transition_reason.
    """

    def __init__(
        self,
        timing: Optional[EpochTiming] = None,
        logger: Optional[FilteringBoundLogger] = None,
    ):
        """
        Args:
            timing: min_epoch_duration / challenge_period (по умолчанию 24h / 1h)
            logger: structlog логгер (по умолчанию: epoch logger модуля)
        """
        self.timing = timing or EpochTiming()
        self.logger = logger or get_epoch_logger(__name__)

    # -------------------------------------------------------------------------
    # Time gate
    # -------------------------------------------------------------------------

    def close_time(self, epoch: Epoch) -> int:
        return epoch.started_at + self.timing.min_epoch_duration

    def can_close_epoch(self, epoch: Epoch, now: int) -> bool:
        """now ≥ started_at + min_epoch_duration."""
        return now >= self.close_time(epoch)

    def close_countdown(self, epoch: Epoch, now: int) -> int:
        """Секунды до возможности закрыть эпоху (0 если уже можно)."""
        return max(0, self.close_time(epoch) - now)

    # -------------------------------------------------------------------------
    # Переходы
    # -------------------------------------------------------------------------

    def close_epoch(self, epoch: Epoch, now: int) -> EpochTransitionResult:
        """Open → InSubmission."""
        if epoch.state != EpochState.OPEN:
            return self._refuse(epoch, "invalid_state", f"Cannot close epoch in state {epoch.state.value}")

        if not self.can_close_epoch(epoch, now):
            remaining = self.close_countdown(epoch, now)
            return self._refuse(
                epoch,
                "min_epoch_duration_not_reached",
                f"Remaining: {format_duration(remaining)}",
            )

        return self._transition(
            epoch,
            epoch.model_copy(update={"state": EpochState.IN_SUBMISSION, "closed_at": now}),
            "min_epoch_duration_elapsed",
            f"Closed after {format_duration(now - epoch.started_at)}",
        )

    def submit_solution(
        self,
        epoch: Epoch,
        solution: EpochSolution,
        now: int,
    ) -> EpochTransitionResult:
        """
        InSubmission → InExecution.

        Решение отклоняется, если эпоха не прошла гейт min_epoch_duration,
        не закрыта или решение infeasible.
        """
        if not self.can_close_epoch(epoch, now):
            return self._refuse(
                epoch,
                "min_epoch_duration_not_reached",
                f"Remaining: {format_duration(self.close_countdown(epoch, now))}",
            )

        if epoch.state != EpochState.IN_SUBMISSION:
            return self._refuse(
                epoch, "invalid_state", f"Cannot accept solution in state {epoch.state.value}"
            )

        if not solution.is_feasible:
            return self._refuse(
                epoch,
                "solution_infeasible",
                f"Violations: {', '.join(solution.violations)}",
            )

        return self._transition(
            epoch,
            epoch.model_copy(
                update={
                    "state": EpochState.IN_EXECUTION,
                    "solution": solution,
                    "solution_submitted_at": now,
                }
            ),
            "solution_accepted",
            f"Score {solution.score}",
        )

    def execute_epoch(self, epoch: Epoch, now: int) -> EpochTransitionResult:
        """InExecution → Closed после challenge_period."""
        if epoch.state != EpochState.IN_EXECUTION or epoch.solution_submitted_at is None:
            return self._refuse(
                epoch, "invalid_state", f"Cannot execute epoch in state {epoch.state.value}"
            )

        executable_at = epoch.solution_submitted_at + self.timing.challenge_period
        if now < executable_at:
            return self._refuse(
                epoch,
                "challenge_period_active",
                f"Remaining: {format_duration(executable_at - now)}",
            )

        return self._transition(
            epoch,
            epoch.model_copy(update={"state": EpochState.CLOSED, "executed_at": now}),
            "challenge_period_elapsed",
            f"Executed at {now}",
        )

    def open_next_epoch(self, epoch: Epoch, now: int) -> EpochTransitionResult:
        """Closed → новая эпоха Open с epoch_id + 1."""
        if epoch.state != EpochState.CLOSED:
            return self._refuse(
                epoch, "invalid_state", f"Cannot open next epoch from state {epoch.state.value}"
            )

        return self._transition(
            epoch,
            Epoch(pool_id=epoch.pool_id, epoch_id=epoch.epoch_id + 1, started_at=now),
            "next_epoch_opened",
            f"Epoch {epoch.epoch_id} → {epoch.epoch_id + 1}",
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _transition(
        self, epoch: Epoch, new_epoch: Epoch, reason: str, details: str
    ) -> EpochTransitionResult:
        log_epoch_transition(
            self.logger,
            pool_id=epoch.pool_id,
            epoch_id=new_epoch.epoch_id,
            from_state=epoch.state.value,
            to_state=new_epoch.state.value,
            reason=reason,
        )
        return EpochTransitionResult(
            new_epoch=new_epoch,
            transition_occurred=True,
            transition_reason=reason,
            previous_state=epoch.state,
            details=details,
        )

    def _refuse(self, epoch: Epoch, reason: str, details: str) -> EpochTransitionResult:
        log_epoch_transition(
            self.logger,
            pool_id=epoch.pool_id,
            epoch_id=epoch.epoch_id,
            from_state=epoch.state.value,
            to_state=epoch.state.value,
            reason=reason,
            context={"details": details},
        )
        return EpochTransitionResult(
            new_epoch=epoch,
            transition_occurred=False,
            transition_reason=reason,
            previous_state=epoch.state,
            details=details,
        )


# =============================================================================
# DISPLAY HELPERS
# =============================================================================


def estimate_next_epoch_execution(
    epoch_started_at: int,
    timing: Optional[EpochTiming] = None,
) -> datetime:
    """Оценка времени исполнения: start + min_epoch_duration + challenge_period (UTC)."""
    timing = timing or EpochTiming()
    execution_time = epoch_started_at + timing.min_epoch_duration + timing.challenge_period
    return datetime.fromtimestamp(execution_time, tz=timezone.utc)


def format_epoch_countdown(seconds: int) -> str:
    """
    Countdown до закрытия эпохи.

    Examples:
        >>> format_epoch_countdown(0)
        'Ready to close'
        >>> format_epoch_countdown(3725)
        '1h 2m'
        >>> format_epoch_countdown(125)
        '2m 5s'
    """
    if seconds <= 0:
        return "Ready to close"

    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)

    if hours > 0:
        return f"{hours}h {minutes}m"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def format_duration(seconds: int) -> str:
    """
    Длительность в виде "1d 1h 1m"; секунды показываются только без дней.

    Examples:
        >>> format_duration(90061)
        '1d 1h 1m'
        >>> format_duration(0)
        '0s'
    """
    if seconds <= 0:
        return "0s"

    days, remainder = divmod(seconds, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, secs = divmod(remainder, 60)

    parts = []
    if days > 0:
        parts.append(f"{days}d")
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0 and days == 0:
        parts.append(f"{secs}s")

    return " ".join(parts) or "0s"


def describe_epoch_state(state: EpochState | str) -> str:
    try:
        return _STATE_DESCRIPTIONS[EpochState(state)]
    except ValueError:
        return "Unknown state"
