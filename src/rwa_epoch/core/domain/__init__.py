"""
Domain models для RWA Epoch

Immutable Pydantic модели пула, траншей, ордеров и эпохи.
Суммы: целые base units (JSON → строка), отношения: Ratio.
"""

# Amount
from rwa_epoch.core.domain.amount import Amount, BaseUnits, RatioValue, SignedBaseUnits

# Currency
from rwa_epoch.core.domain.currency import (
    AIR_TOKEN,
    CFG_TOKEN,
    FOREIGN_ASSETS,
    AUSDCurrency,
    CurrencyId,
    CurrencyKind,
    CurrencyMetadata,
    ForeignAssetCurrency,
    LocalAssetCurrency,
    NativeCurrency,
    StakingCurrency,
    TrancheCurrency,
    create_tranche_currency_id,
    currency_id_from_chain,
    currency_id_to_chain,
    get_currency_by_symbol,
    get_foreign_asset,
    is_native_token,
    is_tranche_token,
)

# Order
from rwa_epoch.core.domain.order import (
    Order,
    OrderFill,
    OrderStatus,
    OrderSummary,
    OrderType,
    TrancheOrderSummary,
)

# Epoch
from rwa_epoch.core.domain.epoch import (
    Epoch,
    EpochSolution,
    EpochState,
    EpochTiming,
    SolutionConstraints,
    TrancheAllocation,
)

# Pool
from rwa_epoch.core.domain.pool import (
    TRANCHE_ID_BYTES,
    Pool,
    PoolStateSummary,
    PoolValuationState,
    Tranche,
    TrancheType,
    format_pool_tranche_id,
    generate_tranche_id,
    get_tranche_type,
    normalize_pool_id,
    parse_pool_tranche_id,
    sort_tranches_by_seniority,
    validate_pool_id,
    validate_tranche_id,
)

# Validation
from rwa_epoch.core.domain.validation import ValidationResult

__all__ = [
    # Amount
    "Amount",
    "BaseUnits",
    "RatioValue",
    "SignedBaseUnits",
    # Currency
    "AIR_TOKEN",
    "CFG_TOKEN",
    "FOREIGN_ASSETS",
    "AUSDCurrency",
    "CurrencyId",
    "CurrencyKind",
    "CurrencyMetadata",
    "ForeignAssetCurrency",
    "LocalAssetCurrency",
    "NativeCurrency",
    "StakingCurrency",
    "TrancheCurrency",
    "create_tranche_currency_id",
    "currency_id_from_chain",
    "currency_id_to_chain",
    "get_currency_by_symbol",
    "get_foreign_asset",
    "is_native_token",
    "is_tranche_token",
    # Order
    "Order",
    "OrderFill",
    "OrderStatus",
    "OrderSummary",
    "OrderType",
    "TrancheOrderSummary",
    # Epoch
    "Epoch",
    "EpochSolution",
    "EpochState",
    "EpochTiming",
    "SolutionConstraints",
    "TrancheAllocation",
    # Pool
    "TRANCHE_ID_BYTES",
    "Pool",
    "PoolStateSummary",
    "PoolValuationState",
    "Tranche",
    "TrancheType",
    "format_pool_tranche_id",
    "generate_tranche_id",
    "get_tranche_type",
    "normalize_pool_id",
    "parse_pool_tranche_id",
    "sort_tranches_by_seniority",
    "validate_pool_id",
    "validate_tranche_id",
    # Validation
    "ValidationResult",
]
