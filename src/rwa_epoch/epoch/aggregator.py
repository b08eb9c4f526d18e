"""
Epoch Order Aggregator — агрегация ордеров эпохи и pro-rata доли

Все суммы: целые base units, все отношения: Ratio (truncate).
Pro-rata: каждый ордер транша и направления получает одинаковую долю
доступной ликвидности; очерёдность подачи (timestamp) не влияет на исполнение.

ФОРМУЛЫ:
    fulfillment_ratio = min(1, available / total)        (1 если total == 0)
    pro_rata_share    = order * available // total       (0 если total == 0)
"""

from typing import Iterable, Sequence

from rwa_epoch.core.domain.order import (
    Order,
    OrderStatus,
    OrderSummary,
    OrderType,
    TrancheOrderSummary,
)
from rwa_epoch.core.domain.validation import ValidationResult
from rwa_epoch.core.errors import InvalidAmountFormat, InvalidIdentifier, InvalidOrder
from rwa_epoch.core.math.decimal_units import parse_base_units
from rwa_epoch.core.math.ratio import Ratio


# =============================================================================
# SUMMARIES
# =============================================================================


def create_empty_order_summary() -> OrderSummary:
    """Пустой агрегат: total 0, count 0, ratio 0."""
    return OrderSummary(total_amount=0, order_count=0, fulfillment_ratio=Ratio.ZERO)


def aggregate_orders(orders: Sequence[Order]) -> OrderSummary:
    """
    Агрегат ордеров: сумма, количество и доля Fulfilled.

    Raises:
        InvalidOrder: ордер с отрицательной суммой
    """
    if not orders:
        return create_empty_order_summary()

    total_amount = 0
    fulfilled_count = 0
    for order in orders:
        _require_non_negative(order)
        total_amount += order.amount
        if order.status == OrderStatus.FULFILLED:
            fulfilled_count += 1

    return OrderSummary(
        total_amount=total_amount,
        order_count=len(orders),
        fulfillment_ratio=Ratio.from_fraction(fulfilled_count, len(orders)),
    )


def summarize_by_tranche(
    orders: Iterable[Order],
    tranche_ids: Sequence[str],
) -> tuple[TrancheOrderSummary, ...]:
    """
    Invest и redeem агрегаты по каждому траншу (в порядке tranche_ids).

    Отменённые ордера исключаются; транш без ордеров получает пустые агрегаты.

    Raises:
        InvalidOrder: ордер ссылается на транш вне tranche_ids
    """
    grouped: dict[str, dict[OrderType, list[Order]]] = {
        tranche_id: {OrderType.INVEST: [], OrderType.REDEEM: []} for tranche_id in tranche_ids
    }
    for order in orders:
        if not order.is_active:
            continue
        if order.tranche_id not in grouped:
            raise InvalidOrder(
                f"Order {order.order_id} references unknown tranche {order.tranche_id}"
            )
        grouped[order.tranche_id][order.order_type].append(order)

    return tuple(
        TrancheOrderSummary(
            tranche_id=tranche_id,
            invest=aggregate_orders(grouped[tranche_id][OrderType.INVEST]),
            redeem=aggregate_orders(grouped[tranche_id][OrderType.REDEEM]),
        )
        for tranche_id in tranche_ids
    )


# =============================================================================
# PRO-RATA
# =============================================================================


def fulfillment_ratio(total_orders: int | str, available_liquidity: int | str) -> Ratio:
    """
    Доля исполнения ордеров при данной ликвидности.

    Returns:
        Ratio.ONE если ордеров нет или ликвидности достаточно,
        иначе available / total с усечением (строго меньше 1)
    """
    total = parse_base_units(total_orders)
    available = parse_base_units(available_liquidity)

    if total == 0 or available >= total:
        return Ratio.ONE
    if available <= 0:
        return Ratio.ZERO
    return Ratio.from_fraction(available, total)


def pro_rata_share(
    order_amount: int | str,
    total_orders: int | str,
    available_amount: int | str,
) -> int:
    """
    Pro-rata доля ордера: order * available // total.

    Сумма долей по всем ордерам не превышает available.

    Returns:
        0 если total_orders == 0
    """
    order = parse_base_units(order_amount)
    total = parse_base_units(total_orders)
    available = parse_base_units(available_amount)

    if total == 0:
        return 0
    return order * available // total


# =============================================================================
# ORDER CHECKS
# =============================================================================


def validate_order(
    order_type: OrderType,
    amount: int | str,
    min_investment: int | str | None = None,
    max_investment: int | str | None = None,
    available_balance: int | str | None = None,
) -> ValidationResult:
    """
    Проверка ордера до подачи.

    Invest проверяется по min/max investment, Redeem: по доступному
    балансу tranche-токенов. Неприменимые ограничения игнорируются.
    """
    value = parse_base_units(amount)

    if value <= 0:
        return ValidationResult.from_violations(["Amount must be greater than zero"])

    if order_type == OrderType.INVEST:
        if min_investment is not None and value < parse_base_units(min_investment):
            return ValidationResult.from_violations(["Amount below minimum investment"])
        if max_investment is not None and value > parse_base_units(max_investment):
            return ValidationResult.from_violations(["Amount exceeds maximum investment"])

    if order_type == OrderType.REDEEM:
        if available_balance is not None and value > parse_base_units(available_balance):
            return ValidationResult.from_violations(["Amount exceeds available balance"])

    return ValidationResult.ok()


def validate_min_investment(amount: int | str, min_amount: int | str) -> ValidationResult:
    minimum = parse_base_units(min_amount)
    if parse_base_units(amount) < minimum:
        return ValidationResult.from_violations(
            [f"Amount below minimum investment of {minimum}"]
        )
    return ValidationResult.ok()


def parse_epoch_id(epoch_id: int | str) -> int:
    """
    Epoch ID из int или десятичной строки.

    Raises:
        InvalidIdentifier: не целое или отрицательное значение
    """
    try:
        parsed = parse_base_units(epoch_id)
    except InvalidAmountFormat as e:
        raise InvalidIdentifier(f"Invalid epoch ID: {epoch_id!r}") from e
    if parsed < 0:
        raise InvalidIdentifier(f"Invalid epoch ID: {epoch_id!r}")
    return parsed


def _require_non_negative(order: Order) -> None:
    if order.amount < 0:
        raise InvalidOrder(f"Order {order.order_id} has negative amount {order.amount}")
