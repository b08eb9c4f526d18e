"""
Тесты Epoch Order Aggregator

Проверяет:
1. Агрегацию ордеров и группировку по траншам
2. fulfillment_ratio и pro-rata доли (fairness, conservation)
3. Проверки ордеров до подачи
"""

import pytest

from rwa_epoch.core.domain import Order, OrderStatus, OrderType
from rwa_epoch.core.errors import InvalidAmountFormat, InvalidIdentifier, InvalidOrder
from rwa_epoch.core.math.ratio import Ratio
from rwa_epoch.epoch import (
    aggregate_orders,
    create_empty_order_summary,
    fulfillment_ratio,
    parse_epoch_id,
    pro_rata_share,
    summarize_by_tranche,
    validate_min_investment,
    validate_order,
)


# =============================================================================
# FIXTURES
# =============================================================================


def make_order(
    order_id: str,
    amount: int | str,
    tranche_id: str = "senior",
    order_type: OrderType = OrderType.INVEST,
    status: OrderStatus = OrderStatus.PENDING,
) -> Order:
    return Order(
        order_id=order_id,
        investor_address=f"investor-{order_id}",
        pool_id="1",
        tranche_id=tranche_id,
        order_type=order_type,
        amount=amount,
        epoch_id=1,
        status=status,
    )


# =============================================================================
# AGGREGATION
# =============================================================================


class TestAggregateOrders:
    """Тесты aggregate_orders."""

    def test_empty(self):
        assert aggregate_orders([]) == create_empty_order_summary()

    def test_totals(self):
        summary = aggregate_orders(
            [
                make_order("a", 100),
                make_order("b", "250"),
                make_order("c", 50, status=OrderStatus.FULFILLED),
            ]
        )
        assert summary.total_amount == 400
        assert summary.order_count == 3
        assert summary.fulfillment_ratio == Ratio.from_fraction(1, 3)

    def test_large_amounts_exact(self):
        big = 10**30
        summary = aggregate_orders([make_order("a", big), make_order("b", big + 1)])
        assert summary.total_amount == 2 * big + 1

    def test_negative_amount_rejected(self):
        with pytest.raises(InvalidOrder):
            aggregate_orders([make_order("a", 100), make_order("b", -1)])


class TestSummarizeByTranche:
    """Тесты summarize_by_tranche."""

    def test_grouping(self):
        summaries = summarize_by_tranche(
            [
                make_order("a", 100),
                make_order("b", 40, order_type=OrderType.REDEEM),
                make_order("c", 70, tranche_id="junior"),
            ],
            ("senior", "junior"),
        )
        senior, junior = summaries
        assert senior.tranche_id == "senior"
        assert senior.invest.total_amount == 100
        assert senior.redeem.total_amount == 40
        assert junior.invest.total_amount == 70
        assert junior.redeem == create_empty_order_summary()

    def test_cancelled_orders_excluded(self):
        (senior,) = summarize_by_tranche(
            [make_order("a", 100), make_order("b", 900, status=OrderStatus.CANCELLED)],
            ("senior",),
        )
        assert senior.invest.total_amount == 100
        assert senior.invest.order_count == 1

    def test_unknown_tranche_rejected(self):
        with pytest.raises(InvalidOrder):
            summarize_by_tranche([make_order("a", 1, tranche_id="ghost")], ("senior",))


# =============================================================================
# PRO-RATA
# =============================================================================


class TestFulfillmentRatio:
    """Тесты fulfillment_ratio."""

    def test_no_orders(self):
        assert fulfillment_ratio(0, 100) == Ratio.ONE

    def test_enough_liquidity(self):
        assert fulfillment_ratio(500, 500) == Ratio.ONE
        assert fulfillment_ratio("500", "900") == Ratio.ONE

    def test_partial(self):
        assert fulfillment_ratio(500, 200) == Ratio.parse("0.4")

    def test_truncates_below_one(self):
        assert fulfillment_ratio(3, 2).bps == 6666

    def test_no_liquidity(self):
        assert fulfillment_ratio(500, 0) == Ratio.ZERO

    def test_malformed_input_raises(self):
        with pytest.raises(InvalidAmountFormat):
            fulfillment_ratio("1e3", 10)


class TestProRataShare:
    """Тесты pro_rata_share (fairness и conservation)."""

    def test_zero_total(self):
        assert pro_rata_share(100, 0, 50) == 0

    def test_proportional(self):
        assert pro_rata_share(300, 1000, 500) == 150

    def test_equal_orders_get_equal_shares(self):
        """Ордера одного размера получают одинаковую долю независимо от порядка."""
        shares = [pro_rata_share(333, 999, 500) for _ in range(3)]
        assert len(set(shares)) == 1

    def test_shares_never_exceed_available(self):
        orders = [1, 7, 13, 101, 999]
        total = sum(orders)
        available = 555
        shares = [pro_rata_share(o, total, available) for o in orders]
        assert sum(shares) <= available
        assert all(share <= order for share, order in zip(shares, orders))

    def test_full_liquidity(self):
        assert pro_rata_share(42, 100, 100) == 42


# =============================================================================
# ORDER CHECKS
# =============================================================================


class TestValidateOrder:
    """Тесты validate_order / validate_min_investment."""

    def test_valid_invest(self):
        assert validate_order(OrderType.INVEST, 100, min_investment=10, max_investment=1000).is_valid

    @pytest.mark.parametrize("amount", [0, -5])
    def test_non_positive_amount(self, amount):
        result = validate_order(OrderType.INVEST, amount)
        assert result.error == "Amount must be greater than zero"

    def test_below_minimum(self):
        result = validate_order(OrderType.INVEST, 5, min_investment=10)
        assert result.error == "Amount below minimum investment"

    def test_above_maximum(self):
        result = validate_order(OrderType.INVEST, "5000", max_investment="1000")
        assert result.error == "Amount exceeds maximum investment"

    def test_redeem_balance(self):
        assert validate_order(OrderType.REDEEM, 50, available_balance=50).is_valid
        result = validate_order(OrderType.REDEEM, 51, available_balance=50)
        assert result.error == "Amount exceeds available balance"

    def test_investment_limits_ignored_for_redeem(self):
        assert validate_order(OrderType.REDEEM, 5, min_investment=10).is_valid

    def test_validate_min_investment(self):
        assert validate_min_investment(100, 100).is_valid
        result = validate_min_investment("99", "100")
        assert result.error == "Amount below minimum investment of 100"


class TestParseEpochId:
    """Тесты parse_epoch_id."""

    def test_valid(self):
        assert parse_epoch_id("12") == 12
        assert parse_epoch_id(0) == 0

    @pytest.mark.parametrize("epoch_id", ["-1", "abc", 1.5])
    def test_invalid(self, epoch_id):
        with pytest.raises(InvalidIdentifier):
            parse_epoch_id(epoch_id)
