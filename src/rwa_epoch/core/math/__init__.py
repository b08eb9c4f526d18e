"""
Core math modules для RWA Epoch

Fixed-point примитивы: десятичные суммы, отношения, ставки, оценка пула.
Ни один модуль не использует binary float для сумм.
"""

# Decimal Engine
from rwa_epoch.core.math.decimal_units import (
    DECIMALS,
    DEFAULT_DECIMALS,
    MAX_SAFE_INTEGER,
    SUPPORTED_DECIMALS,
    base_units_to_cfg,
    base_units_to_usdc,
    calculate_percentage,
    cfg_to_base_units,
    convert_decimals,
    div_trunc,
    exceeds_max_safe_integer,
    format_amount,
    format_currency,
    format_large_number,
    from_base_units,
    get_decimals,
    parse_base_units,
    to_base_units,
    usdc_to_base_units,
    validate_decimals,
)

# Ratio
from rwa_epoch.core.math.ratio import RATIO_DECIMALS, RATIO_SCALE, Ratio

# Interest Rates
from rwa_epoch.core.math.interest_rates import (
    RAY,
    SECONDS_PER_YEAR,
    apr_to_per_sec_rate,
    expected_yield,
    per_sec_rate_to_apr,
    per_sec_rate_to_apy,
)

# Valuation
from rwa_epoch.core.math.valuation import (
    InvestmentReturn,
    calculate_nav,
    invest_tokens,
    investment_return,
    nav_per_share,
    position_value,
    redeem_currency,
    reserve_ratio,
    subordination,
)

__all__ = [
    # Decimal Engine: Constants
    "DECIMALS",
    "DEFAULT_DECIMALS",
    "MAX_SAFE_INTEGER",
    "SUPPORTED_DECIMALS",
    # Decimal Engine: Functions
    "base_units_to_cfg",
    "base_units_to_usdc",
    "calculate_percentage",
    "cfg_to_base_units",
    "convert_decimals",
    "div_trunc",
    "exceeds_max_safe_integer",
    "format_amount",
    "format_currency",
    "format_large_number",
    "from_base_units",
    "get_decimals",
    "parse_base_units",
    "to_base_units",
    "usdc_to_base_units",
    "validate_decimals",
    # Ratio
    "RATIO_DECIMALS",
    "RATIO_SCALE",
    "Ratio",
    # Interest Rates
    "RAY",
    "SECONDS_PER_YEAR",
    "apr_to_per_sec_rate",
    "expected_yield",
    "per_sec_rate_to_apr",
    "per_sec_rate_to_apy",
    # Valuation
    "InvestmentReturn",
    "calculate_nav",
    "invest_tokens",
    "investment_return",
    "nav_per_share",
    "position_value",
    "redeem_currency",
    "reserve_ratio",
    "subordination",
]
