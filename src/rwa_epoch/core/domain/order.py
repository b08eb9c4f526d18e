"""
Order — Модель инвестиционного ордера эпохи

Immutable Pydantic модель. Ордер ссылается на пул/транш/эпоху только по id
(lookup-only связь, без back-pointers). Смена статуса при исполнении
порождает новое значение (OrderFill.new_status), исходный ордер не меняется.

Единицы amount:
- Invest: валюта пула (base units)
- Redeem: tranche-токены (base units)
"""

from enum import Enum

from pydantic import BaseModel, Field

from rwa_epoch.core.domain.amount import BaseUnits, RatioValue, SignedBaseUnits
from rwa_epoch.core.math.ratio import Ratio


# =============================================================================
# ENUMS
# =============================================================================


class OrderType(str, Enum):
    """Направление ордера"""

    INVEST = "Invest"
    REDEEM = "Redeem"


class OrderStatus(str, Enum):
    """Статус ордера"""

    PENDING = "Pending"
    PARTIALLY_FULFILLED = "PartiallyFulfilled"
    FULFILLED = "Fulfilled"
    CANCELLED = "Cancelled"


# =============================================================================
# ORDER MODEL
# =============================================================================


class Order(BaseModel):
    """
    Ордер инвестора на одну эпоху.

    amount допускает знак на уровне модели: отрицательные суммы отклоняются
    движком клиринга с InvalidOrder до агрегации.
    """

    order_id: str = Field(..., min_length=1, description="Идентификатор ордера")
    investor_address: str = Field(..., min_length=1, description="Адрес инвестора")
    pool_id: str = Field(..., min_length=1, description="Идентификатор пула")
    tranche_id: str = Field(..., min_length=1, description="Идентификатор транша")
    order_type: OrderType = Field(..., description="Invest / Redeem")
    amount: SignedBaseUnits = Field(..., description="Сумма ордера (base units)")
    epoch_id: int = Field(..., ge=0, description="Идентификатор эпохи")
    timestamp: int = Field(0, ge=0, description="Время подачи (UTC, секунды)")
    status: OrderStatus = Field(OrderStatus.PENDING, description="Статус ордера")

    model_config = {"frozen": True}

    @property
    def is_active(self) -> bool:
        """Ордер участвует в клиринге (не отменён)."""
        return self.status != OrderStatus.CANCELLED


# =============================================================================
# SUMMARIES
# =============================================================================


class OrderSummary(BaseModel):
    """Агрегат ордеров одного направления."""

    total_amount: BaseUnits = Field(0, description="Сумма ордеров (base units)")
    order_count: int = Field(0, ge=0, description="Количество ордеров")
    fulfillment_ratio: RatioValue = Field(
        Ratio.ZERO, description="Доля исполненных ордеров [0, 1]"
    )

    model_config = {"frozen": True}


class TrancheOrderSummary(BaseModel):
    """Агрегаты invest/redeem ордеров одного транша."""

    tranche_id: str = Field(..., min_length=1)
    invest: OrderSummary = Field(default_factory=OrderSummary)
    redeem: OrderSummary = Field(default_factory=OrderSummary)

    model_config = {"frozen": True}


class OrderFill(BaseModel):
    """
    Исполнение одного ордера в решении эпохи.

    fulfillment_ratio одинаков для всех ордеров транша и направления
    (pro-rata, не first-come-first-served).
    """

    order_id: str
    tranche_id: str
    order_type: OrderType
    requested_amount: BaseUnits
    fulfilled_amount: BaseUnits
    fulfillment_ratio: RatioValue
    new_status: OrderStatus

    model_config = {"frozen": True}

    @property
    def remaining_amount(self) -> int:
        """Неисполненный остаток (переносится в следующую эпоху)."""
        return self.requested_amount - self.fulfilled_amount
