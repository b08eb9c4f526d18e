"""
Epoch Clearing Engine — вычисление и валидация решения эпохи

Решение эпохи: аллокация invest/redeem ордеров по траншам, которая
удовлетворяет ограничениям пула:

1. Reserve: 0 ≤ projected_reserve ≤ max_reserve,
   projected_reserve = reserve + Σ invest − Σ redeem
2. Subordination: junior / total ≥ min_subordination_ratio
   (по прогнозным стоимостям траншей, только при total > 0)
3. Risk buffer транша k: Σ value(младше k) / total ≥ min_risk_buffer(k)
4. NAV decrease: (Σ redeem − Σ invest) ≤ max_nav_decrease × nav

Вычисление: greedy в два прохода:
- redeem senior → junior: ограничен ликвидностью резерва, бюджетом падения
  NAV и ограничениями субординации
- invest: субординационная ёмкость траншей считается junior → senior,
  затем headroom = max_reserve − reserve_after_redeems распределяется
  senior → junior; senior получает максимум, который ещё покрывают
  invest-ордера младших траншей в оставшемся headroom

Redeem исполняется в tranche-токенах, пропорционально выплаченной валюте:
токены, стоимость которых усекается до 0, не исполняются.

Внутри транша и направления исполнение pro-rata: одинаковый fulfillment
ratio для всех ордеров. Итоговое решение повторно валидируется; при любом
нарушении возвращается is_feasible=False с нулевыми аллокациями.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from structlog.types import FilteringBoundLogger

from rwa_epoch.core.domain.epoch import EpochSolution, SolutionConstraints, TrancheAllocation
from rwa_epoch.core.domain.order import Order, OrderFill, OrderStatus, OrderType
from rwa_epoch.core.domain.pool import Pool, PoolValuationState
from rwa_epoch.core.domain.validation import ValidationResult
from rwa_epoch.core.errors import InvalidConstraints, InvalidOrder
from rwa_epoch.core.math.ratio import RATIO_SCALE, Ratio
from rwa_epoch.core.math.valuation import redeem_currency
from rwa_epoch.epoch.aggregator import fulfillment_ratio, pro_rata_share, summarize_by_tranche
from rwa_epoch.logging.config import get_clearing_logger


# =============================================================================
# VIOLATIONS
# =============================================================================

VIOLATION_MAX_RESERVE = "Exceeds maximum reserve"
VIOLATION_INSUFFICIENT_RESERVE = "Insufficient reserve for redemptions"
VIOLATION_MIN_SUBORDINATION = "Below minimum subordination ratio"
VIOLATION_MAX_NAV_DECREASE = "Exceeds maximum NAV decrease"


def risk_buffer_violation(tranche_id: str) -> str:
    return f"Below minimum risk buffer for tranche {tranche_id}"


# =============================================================================
# INPUT VALIDATION (fail fast)
# =============================================================================


def validate_constraints(constraints: SolutionConstraints) -> None:
    """
    Raises:
        InvalidConstraints: min_subordination_ratio вне [0, 1], отрицательный
            max_reserve, max_nav_decrease вне [0, 1]
    """
    if not constraints.min_subordination_ratio.is_within_unit_interval():
        raise InvalidConstraints(
            f"min_subordination_ratio must be within [0, 1], "
            f"got {constraints.min_subordination_ratio}"
        )
    if constraints.max_reserve < 0:
        raise InvalidConstraints(
            f"max_reserve must be non-negative, got {constraints.max_reserve}"
        )
    if (
        constraints.max_nav_decrease is not None
        and not constraints.max_nav_decrease.is_within_unit_interval()
    ):
        raise InvalidConstraints(
            f"max_nav_decrease must be within [0, 1], got {constraints.max_nav_decrease}"
        )


def validate_orders(pool: Pool, orders: Sequence[Order]) -> None:
    """
    Проверка пакета ордеров до агрегации.

    Raises:
        InvalidOrder: отрицательная сумма, неизвестный транш, чужой пул,
            ордера из разных эпох
    """
    epoch_ids: set[int] = set()
    for order in orders:
        if order.amount < 0:
            raise InvalidOrder(f"Order {order.order_id} has negative amount {order.amount}")
        if order.pool_id != pool.pool_id:
            raise InvalidOrder(
                f"Order {order.order_id} belongs to pool {order.pool_id}, not {pool.pool_id}"
            )
        if pool.tranche(order.tranche_id) is None:
            raise InvalidOrder(
                f"Order {order.order_id} references unknown tranche {order.tranche_id}"
            )
        epoch_ids.add(order.epoch_id)

    if len(epoch_ids) > 1:
        raise InvalidOrder(f"Orders span multiple epochs: {sorted(epoch_ids)}")


# =============================================================================
# SUBORDINATION RULES
# =============================================================================


@dataclass(frozen=True)
class _SubordinationRule:
    """
    value(траншей с индексом ≥ first_subordinate) × SCALE ≥ min_bps × total.

    Глобальная субординация: first_subordinate = junior.
    Risk buffer транша k: first_subordinate = k + 1.
    """

    min_bps: int
    first_subordinate: int
    violation: str

    def slack(self, values: Sequence[int]) -> int:
        return sum(values[self.first_subordinate:]) * RATIO_SCALE - self.min_bps * sum(values)

    def is_satisfied(self, values: Sequence[int]) -> bool:
        if sum(values) <= 0:
            return True
        return self.slack(values) >= 0

    def redeem_cap(self, index: int, values: Sequence[int]) -> Optional[int]:
        """Максимальный redeem транша index, сохраняющий правило (None = без лимита)."""
        if index < self.first_subordinate:
            return None
        slack = self.slack(values)
        if slack < 0:
            return 0
        if self.min_bps >= RATIO_SCALE:
            return None
        return slack // (RATIO_SCALE - self.min_bps)

    def invest_cap(self, index: int, values: Sequence[int]) -> Optional[int]:
        """Максимальный invest транша index, сохраняющий правило (None = без лимита)."""
        if index >= self.first_subordinate or self.min_bps == 0:
            return None
        slack = self.slack(values)
        if slack < 0:
            return 0
        return slack // self.min_bps


def _subordination_rules(
    min_subordination_ratio: Ratio,
    tranche_ids: Sequence[str],
    min_risk_buffers: Sequence[Optional[Ratio]],
) -> list[_SubordinationRule]:
    junior_index = len(tranche_ids) - 1
    rules = [
        _SubordinationRule(
            min_bps=min_subordination_ratio.bps,
            first_subordinate=junior_index,
            violation=VIOLATION_MIN_SUBORDINATION,
        )
    ]
    # у junior транша нет субординации, его буфер не проверяется
    for index, buffer in enumerate(min_risk_buffers[:junior_index]):
        if buffer is None:
            continue
        rules.append(
            _SubordinationRule(
                min_bps=buffer.bps,
                first_subordinate=index + 1,
                violation=risk_buffer_violation(tranche_ids[index]),
            )
        )
    return rules


def _subordinate_capacity(
    rules: Sequence[_SubordinationRule],
    values: Sequence[int],
    invest_desired: Sequence[int],
) -> list[int]:
    """Invest junior → senior: ёмкость транша при полностью исполненных младших."""
    projected = list(values)
    capacity = [0] * len(values)
    for index in reversed(range(len(values))):
        caps = [invest_desired[index]]
        caps.extend(
            cap
            for cap in (rule.invest_cap(index, projected) for rule in rules)
            if cap is not None
        )
        capacity[index] = max(min(caps), 0)
        projected[index] += capacity[index]
    return capacity


def _junior_first_fill(capacity: Sequence[int], start: int, amount: int) -> list[int]:
    """Распределение amount по траншам с индексом ≥ start, начиная с junior."""
    fill = [0] * len(capacity)
    for index in reversed(range(start, len(capacity))):
        fill[index] = min(capacity[index], max(amount, 0))
        amount -= fill[index]
    return fill


def _invest_holds(
    rules: Sequence[_SubordinationRule],
    values: Sequence[int],
    capacity: Sequence[int],
    index: int,
    remaining: int,
    amount: int,
) -> bool:
    """Правила выполняются при amount в транше index и junior-first остатке."""
    projected = list(values)
    projected[index] += amount
    for junior, extra in enumerate(_junior_first_fill(capacity, index + 1, remaining - amount)):
        projected[junior] += extra
    return all(rule.is_satisfied(projected) for rule in rules)


# =============================================================================
# SOLUTION VALIDATION
# =============================================================================


def validate_solution(
    solution: EpochSolution,
    constraints: SolutionConstraints,
    state: PoolValuationState,
) -> ValidationResult:
    """
    Проверка решения эпохи против ограничений и текущей оценки пула.

    Нарушения возвращаются как результат; решение с нарушениями должно
    быть отклонено вызывающей стороной, а не исправлено.

    Raises:
        InvalidConstraints: некорректные ограничения (до любой проверки решения)

    Examples:
        >>> state = PoolValuationState(
        ...     reserve=1000, nav=1000, tranche_ids=("senior", "junior"),
        ...     tranche_values=(800, 200),
        ... )
        >>> solution = EpochSolution(allocations=(
        ...     TrancheAllocation(tranche_id="senior", invest_amount=500),
        ... ))
        >>> validate_solution(solution, SolutionConstraints(max_reserve=1200), state).violations
        ('Exceeds maximum reserve',)
    """
    validate_constraints(constraints)
    violations: list[str] = []

    projected_values = list(state.tranche_values)
    for allocation in solution.allocations:
        if allocation.tranche_id not in state.tranche_ids:
            violations.append(f"Unknown tranche {allocation.tranche_id}")
            continue
        index = state.tranche_ids.index(allocation.tranche_id)
        projected_values[index] += allocation.invest_amount - allocation.redeem_amount

    total_invest = solution.total_invest
    total_redeem = solution.total_redeem
    projected_reserve = state.reserve + total_invest - total_redeem

    if projected_reserve > constraints.max_reserve:
        violations.append(VIOLATION_MAX_RESERVE)
    if projected_reserve < 0:
        violations.append(VIOLATION_INSUFFICIENT_RESERVE)

    for rule in _subordination_rules(
        constraints.min_subordination_ratio, state.tranche_ids, state.min_risk_buffers
    ):
        if not rule.is_satisfied(projected_values):
            violations.append(rule.violation)

    if constraints.max_nav_decrease is not None:
        nav_decrease = total_redeem - total_invest
        if nav_decrease * RATIO_SCALE > constraints.max_nav_decrease.bps * state.nav:
            violations.append(VIOLATION_MAX_NAV_DECREASE)

    return ValidationResult.from_violations(violations)


# =============================================================================
# CLEARING ENGINE
# =============================================================================


class EpochClearingEngine:
    """
    Вычисление решения эпохи (stateless, детерминированное).

    Один и тот же вход всегда даёт одно и то же решение; движок не хранит
    состояние между вызовами.
    """

    def __init__(self, logger: Optional[FilteringBoundLogger] = None):
        """
        Args:
            logger: structlog логгер (по умолчанию: clearing logger модуля)
        """
        self.logger = logger or get_clearing_logger(__name__)

    def compute_solution(
        self,
        pool: Pool,
        orders: Sequence[Order],
        constraints: SolutionConstraints,
    ) -> EpochSolution:
        """
        Решение эпохи для пакета ордеров.

        Args:
            pool: снапшот пула (транши senior → junior)
            orders: ордера текущей эпохи (отменённые игнорируются)
            constraints: ограничения решения

        Returns:
            EpochSolution; is_feasible=False с нарушениями, если даже
            greedy-решение не проходит validate_solution

        Raises:
            InvalidConstraints: некорректные ограничения
            InvalidOrder: некорректный пакет ордеров
        """
        validate_constraints(constraints)
        validate_orders(pool, orders)

        state = pool.valuation_state()
        summaries = summarize_by_tranche(orders, state.tranche_ids)
        decimals = pool.currency_decimals

        invest_desired = [s.invest.total_amount for s in summaries]
        redeem_tokens_desired = [s.redeem.total_amount for s in summaries]
        redeem_desired = [
            redeem_currency(tokens, tranche.token_price, decimals)
            for tokens, tranche in zip(redeem_tokens_desired, pool.tranches)
        ]

        rules = _subordination_rules(
            constraints.min_subordination_ratio, state.tranche_ids, state.min_risk_buffers
        )
        values = list(state.tranche_values)

        redeem_filled = self._fill_redemptions(state, constraints, rules, values, redeem_desired)
        invest_filled = self._fill_investments(
            state, constraints, rules, values, invest_desired, sum(redeem_filled)
        )

        allocations = []
        redeem_tokens_filled = []
        for index, tranche in enumerate(pool.tranches):
            redeem_tokens = self._redeem_tokens(
                redeem_tokens_desired[index], redeem_desired[index], redeem_filled[index]
            )
            redeem_tokens_filled.append(redeem_tokens)
            allocations.append(
                TrancheAllocation(
                    tranche_id=tranche.id,
                    invest_amount=invest_filled[index],
                    invest_fulfillment_ratio=fulfillment_ratio(
                        invest_desired[index], invest_filled[index]
                    ),
                    redeem_amount=redeem_filled[index],
                    redeem_tokens=redeem_tokens,
                    redeem_fulfillment_ratio=fulfillment_ratio(
                        redeem_tokens_desired[index], redeem_tokens
                    ),
                )
            )

        desired_total = sum(invest_desired) + sum(redeem_desired)
        fulfilled_total = sum(invest_filled) + sum(redeem_filled)
        if desired_total == 0 and sum(redeem_tokens_filled) == sum(redeem_tokens_desired):
            score = Ratio.ONE
        else:
            # from_fraction(x, 0) = 0: токены без стоимости не засчитываются
            score = Ratio.from_fraction(fulfilled_total, desired_total)

        candidate = EpochSolution(
            allocations=tuple(allocations),
            is_feasible=True,
            score=score,
            order_fills=self._order_fills(orders, allocations, invest_desired, redeem_tokens_desired),
        )

        result = validate_solution(candidate, constraints, state)
        if not result.is_valid:
            self.logger.warning(
                "epoch_solution_infeasible",
                pool_id=pool.pool_id,
                violations=list(result.violations),
            )
            return self._infeasible_solution(pool, invest_desired, redeem_tokens_desired, result)

        self.logger.info(
            "epoch_solution_computed",
            pool_id=pool.pool_id,
            order_count=len(orders),
            total_invest=candidate.total_invest,
            total_redeem=candidate.total_redeem,
            score=score,
        )
        return candidate

    # -------------------------------------------------------------------------
    # Greedy passes
    # -------------------------------------------------------------------------

    def _fill_redemptions(
        self,
        state: PoolValuationState,
        constraints: SolutionConstraints,
        rules: Sequence[_SubordinationRule],
        values: list[int],
        redeem_desired: Sequence[int],
    ) -> list[int]:
        """Redeem senior → junior; values обновляются на месте."""
        liquidity = state.reserve
        nav_budget = (
            None
            if constraints.max_nav_decrease is None
            else constraints.max_nav_decrease.apply(state.nav)
        )

        filled = []
        for index, desired in enumerate(redeem_desired):
            caps = [desired, liquidity, max(values[index], 0)]
            if nav_budget is not None:
                caps.append(nav_budget)
            caps.extend(
                cap
                for cap in (rule.redeem_cap(index, values) for rule in rules)
                if cap is not None
            )
            amount = max(min(caps), 0)

            values[index] -= amount
            liquidity -= amount
            if nav_budget is not None:
                nav_budget -= amount
            filled.append(amount)
        return filled

    def _fill_investments(
        self,
        state: PoolValuationState,
        constraints: SolutionConstraints,
        rules: Sequence[_SubordinationRule],
        values: list[int],
        invest_desired: Sequence[int],
        total_redeemed: int,
    ) -> list[int]:
        """
        Invest в пределах headroom резерва; values обновляются на месте.

        1. capacity: junior → senior, каждый транш берёт максимум, который
           покрывают полностью исполненные младшие транши
        2. headroom распределяется senior → junior: транш index получает
           наибольшую сумму x, при которой junior-first заполнение
           оставшегося headroom младшими траншами сохраняет все правила

        Slack каждого правила монотонен по x, поэтому допустимые x образуют
        отрезок; он ищется бинарным поиском от junior-first суммы, которая
        допустима по построению.
        """
        reserve_after_redeems = state.reserve - total_redeemed
        remaining = max(0, constraints.max_reserve - reserve_after_redeems)
        capacity = _subordinate_capacity(rules, values, invest_desired)

        filled = []
        for index, desired in enumerate(invest_desired):
            low = _junior_first_fill(capacity, index, remaining)[index]
            high = max(min(desired, remaining), low)

            # при уже нарушенном правиле транш берёт только junior-first сумму
            if _invest_holds(rules, values, capacity, index, remaining, low):
                while low < high:
                    mid = (low + high + 1) // 2
                    if _invest_holds(rules, values, capacity, index, remaining, mid):
                        low = mid
                    else:
                        high = mid - 1

            values[index] += low
            remaining -= low
            filled.append(low)
        return filled

    # -------------------------------------------------------------------------
    # Результат
    # -------------------------------------------------------------------------

    @staticmethod
    def _redeem_tokens(tokens_desired: int, currency_desired: int, currency_filled: int) -> int:
        """Погашаемые токены пропорционально выплаченной валюте."""
        if currency_desired == 0:
            return 0
        if currency_filled >= currency_desired:
            return tokens_desired
        return pro_rata_share(tokens_desired, currency_desired, currency_filled)

    @staticmethod
    def _order_fills(
        orders: Sequence[Order],
        allocations: Sequence[TrancheAllocation],
        invest_desired: Sequence[int],
        redeem_tokens_desired: Sequence[int],
    ) -> tuple[OrderFill, ...]:
        """Pro-rata исполнение каждого активного ордера."""
        index_by_tranche = {a.tranche_id: i for i, a in enumerate(allocations)}

        fills = []
        for order in orders:
            if not order.is_active:
                continue
            index = index_by_tranche[order.tranche_id]
            allocation = allocations[index]

            if order.order_type == OrderType.INVEST:
                fulfilled = pro_rata_share(
                    order.amount, invest_desired[index], allocation.invest_amount
                )
                ratio = allocation.invest_fulfillment_ratio
            else:
                fulfilled = pro_rata_share(
                    order.amount, redeem_tokens_desired[index], allocation.redeem_tokens
                )
                ratio = allocation.redeem_fulfillment_ratio

            if fulfilled == order.amount:
                status = OrderStatus.FULFILLED
            elif fulfilled > 0:
                status = OrderStatus.PARTIALLY_FULFILLED
            else:
                status = OrderStatus.PENDING

            fills.append(
                OrderFill(
                    order_id=order.order_id,
                    tranche_id=order.tranche_id,
                    order_type=order.order_type,
                    requested_amount=order.amount,
                    fulfilled_amount=fulfilled,
                    fulfillment_ratio=ratio,
                    new_status=status,
                )
            )
        return tuple(fills)

    @staticmethod
    def _infeasible_solution(
        pool: Pool,
        invest_desired: Sequence[int],
        redeem_tokens_desired: Sequence[int],
        result: ValidationResult,
    ) -> EpochSolution:
        """Нулевые аллокации + нарушения; ордера остаются Pending."""
        allocations = tuple(
            TrancheAllocation(
                tranche_id=tranche.id,
                invest_amount=0,
                invest_fulfillment_ratio=fulfillment_ratio(invest_desired[index], 0),
                redeem_amount=0,
                redeem_tokens=0,
                redeem_fulfillment_ratio=fulfillment_ratio(redeem_tokens_desired[index], 0),
            )
            for index, tranche in enumerate(pool.tranches)
        )
        return EpochSolution(
            allocations=allocations,
            is_feasible=False,
            score=Ratio.ZERO,
            violations=result.violations,
        )
