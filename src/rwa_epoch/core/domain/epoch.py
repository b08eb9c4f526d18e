"""
Epoch — Модели эпохи, решения и ограничений

Жизненный цикл эпохи (линейный):
    Open → InSubmission → InExecution → Closed → (новая эпоха) Open

Эпоха принадлежит ровно одному пулу; текущей является одна эпоха пула.
Ядро не хранит состояние эпохи между вызовами: EpochStateMachine
получает Epoch и явное `now`, возвращает новый Epoch.
"""

from enum import Enum

from pydantic import BaseModel, Field, model_validator

from rwa_epoch.core.domain.amount import BaseUnits, RatioValue, SignedBaseUnits
from rwa_epoch.core.domain.order import OrderFill, OrderSummary
from rwa_epoch.core.math.ratio import Ratio


# =============================================================================
# ENUMS
# =============================================================================


class EpochState(str, Enum):
    """Состояние эпохи"""

    OPEN = "Open"
    IN_SUBMISSION = "InSubmission"
    IN_EXECUTION = "InExecution"
    CLOSED = "Closed"


# =============================================================================
# SOLUTION
# =============================================================================


class TrancheAllocation(BaseModel):
    """
    Аллокация транша в решении эпохи.

    invest_amount и redeem_amount: в валюте пула; redeem_tokens:
    исполненная часть redeem-ордеров в tranche-токенах.
    """

    tranche_id: str = Field(..., min_length=1)
    invest_amount: BaseUnits = 0
    invest_fulfillment_ratio: RatioValue = Ratio.ONE
    redeem_amount: BaseUnits = 0
    redeem_tokens: BaseUnits = 0
    redeem_fulfillment_ratio: RatioValue = Ratio.ONE

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_ratio_range(self) -> "TrancheAllocation":
        for name in ("invest_fulfillment_ratio", "redeem_fulfillment_ratio"):
            ratio = getattr(self, name)
            if not ratio.is_within_unit_interval():
                raise ValueError(f"{name} {ratio} must be within [0, 1]")
        return self


class EpochSolution(BaseModel):
    """
    Решение эпохи.

    Инварианты:
    - fulfillment ratios ∈ [0, 1]
    - суммы аллокаций ≤ агрегированных сумм ордеров
    - is_feasible=False ⇒ нулевые аллокации и непустые violations
    """

    allocations: tuple[TrancheAllocation, ...] = ()
    is_feasible: bool = True
    score: RatioValue = Ratio.ZERO
    violations: tuple[str, ...] = ()
    order_fills: tuple[OrderFill, ...] = ()

    model_config = {"frozen": True}

    @property
    def total_invest(self) -> int:
        return sum(a.invest_amount for a in self.allocations)

    @property
    def total_redeem(self) -> int:
        return sum(a.redeem_amount for a in self.allocations)

    def allocation(self, tranche_id: str) -> TrancheAllocation | None:
        for allocation in self.allocations:
            if allocation.tranche_id == tranche_id:
                return allocation
        return None


# =============================================================================
# CONSTRAINTS & TIMING
# =============================================================================


class SolutionConstraints(BaseModel):
    """
    Ограничения решения эпохи.

    Диапазоны проверяются движком (validate_constraints → InvalidConstraints),
    поэтому модель допускает любые значения поля.
    """

    max_reserve: SignedBaseUnits = Field(..., description="Максимальный резерв (base units)")
    min_subordination_ratio: RatioValue = Field(
        Ratio.ZERO, description="Минимальная доля junior в стоимости пула"
    )
    max_nav_decrease: RatioValue | None = Field(
        None, description="Максимальное падение NAV за эпоху (None = без проверки)"
    )

    model_config = {"frozen": True}


class EpochTiming(BaseModel):
    """Тайминги эпохи (секунды)."""

    min_epoch_duration: int = Field(24 * 60 * 60, ge=0, description="Минимальная длительность эпохи")
    challenge_period: int = Field(60 * 60, ge=0, description="Challenge period перед исполнением")

    model_config = {"frozen": True}


# =============================================================================
# EPOCH MODEL
# =============================================================================


class Epoch(BaseModel):
    """Снапшот эпохи пула."""

    pool_id: str = Field(..., min_length=1)
    epoch_id: int = Field(..., ge=0, description="Монотонный идентификатор эпохи пула")
    state: EpochState = EpochState.OPEN
    started_at: int = Field(..., ge=0, description="Начало эпохи (UTC, секунды)")
    closed_at: int | None = Field(None, ge=0)
    solution_submitted_at: int | None = Field(None, ge=0)
    executed_at: int | None = Field(None, ge=0)

    invest_orders: dict[str, OrderSummary] = Field(default_factory=dict)
    redeem_orders: dict[str, OrderSummary] = Field(default_factory=dict)
    solution: EpochSolution | None = None

    model_config = {"frozen": True}

    @property
    def is_open(self) -> bool:
        return self.state == EpochState.OPEN
