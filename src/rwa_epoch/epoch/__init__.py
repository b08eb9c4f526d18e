"""
Epoch — агрегация ордеров, клиринг и жизненный цикл эпохи
"""

# Aggregator
from rwa_epoch.epoch.aggregator import (
    aggregate_orders,
    create_empty_order_summary,
    fulfillment_ratio,
    parse_epoch_id,
    pro_rata_share,
    summarize_by_tranche,
    validate_min_investment,
    validate_order,
)

# Clearing
from rwa_epoch.epoch.clearing import (
    VIOLATION_INSUFFICIENT_RESERVE,
    VIOLATION_MAX_NAV_DECREASE,
    VIOLATION_MAX_RESERVE,
    VIOLATION_MIN_SUBORDINATION,
    EpochClearingEngine,
    risk_buffer_violation,
    validate_constraints,
    validate_orders,
    validate_solution,
)

# State machine
from rwa_epoch.epoch.state_machine import (
    EpochStateMachine,
    EpochTransitionResult,
    describe_epoch_state,
    estimate_next_epoch_execution,
    format_duration,
    format_epoch_countdown,
)

__all__ = [
    # Aggregator
    "aggregate_orders",
    "create_empty_order_summary",
    "fulfillment_ratio",
    "parse_epoch_id",
    "pro_rata_share",
    "summarize_by_tranche",
    "validate_min_investment",
    "validate_order",
    # Clearing
    "VIOLATION_INSUFFICIENT_RESERVE",
    "VIOLATION_MAX_NAV_DECREASE",
    "VIOLATION_MAX_RESERVE",
    "VIOLATION_MIN_SUBORDINATION",
    "EpochClearingEngine",
    "risk_buffer_violation",
    "validate_constraints",
    "validate_orders",
    "validate_solution",
    # State machine
    "EpochStateMachine",
    "EpochTransitionResult",
    "describe_epoch_state",
    "estimate_next_epoch_execution",
    "format_duration",
    "format_epoch_countdown",
]
