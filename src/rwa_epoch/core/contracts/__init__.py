"""
Contract Validation Module

Валидация JSON контрактов движка клиринга (jsonschema, Draft 2020-12).
"""

from .validators import (
    ContractValidator,
    EpochSolutionValidator,
    OrderBatchValidator,
    PoolSnapshotValidator,
    SchemaLoader,
    SolutionConstraintsValidator,
    ValidationError,
    load_epoch_solution,
    load_order_batch,
    load_pool_snapshot,
    load_solution_constraints,
    validate_epoch_solution,
    validate_order_batch,
    validate_pool_snapshot,
    validate_solution_constraints,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "PoolSnapshotValidator",
    "OrderBatchValidator",
    "SolutionConstraintsValidator",
    "EpochSolutionValidator",
    "ValidationError",
    # Functions
    "validate_pool_snapshot",
    "validate_order_batch",
    "validate_solution_constraints",
    "validate_epoch_solution",
    "load_pool_snapshot",
    "load_order_batch",
    "load_solution_constraints",
    "load_epoch_solution",
]
