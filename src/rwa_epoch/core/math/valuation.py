"""
Valuation — NAV, reserve ratio, subordination, стоимость позиций и доходность

Все суммы: целые base units; все отношения: Ratio (4 знака, truncate).

ФОРМУЛЫ:
    nav              = portfolio_valuation + reserve
    reserve_ratio    = reserve / nav
    subordination    = junior_value / total_value
    position_value   = tokens * token_price / 10^decimals
    invest_tokens    = invest_amount * 10^decimals / token_price
    redeem_currency  = redeem_tokens * token_price / 10^decimals
    nav_per_share    = nav * 10^decimals / shares

Нулевые делители (nav = 0, token_price = 0, shares = 0): нормальное
состояние пула без ликвидности: результат определён как ноль.
"""

from decimal import Decimal
from typing import NamedTuple

from rwa_epoch.core.math.decimal_units import (
    from_base_units,
    parse_base_units,
    validate_decimals,
)
from rwa_epoch.core.math.ratio import Ratio


# =============================================================================
# ТИПЫ
# =============================================================================


class InvestmentReturn(NamedTuple):
    """Доходность инвестиции."""

    absolute_return: int  # current - invested (base units, со знаком)
    ratio: Ratio  # absolute_return / invested (4 знака)

    @property
    def percentage_return(self) -> Decimal:
        """Доходность в процентах с шагом 0.01%."""
        return self.ratio.as_percentage()


# =============================================================================
# NAV И ОТНОШЕНИЯ
# =============================================================================


def calculate_nav(portfolio_valuation: int | str, reserve: int | str) -> int:
    """NAV = portfolio_valuation + reserve."""
    return parse_base_units(portfolio_valuation) + parse_base_units(reserve)


def reserve_ratio(reserve: int | str, nav: int | str) -> Ratio:
    """
    Reserve ratio = reserve / NAV.

    Examples:
        >>> str(reserve_ratio(100, 1000))
        '0.1'
        >>> reserve_ratio(100, 0)
        Ratio(bps=0)
    """
    return Ratio.from_fraction(reserve, nav)


def subordination(junior_value: int | str, total_value: int | str) -> Ratio:
    """
    Subordination ratio = junior_value / total_value.

    Доля стоимости пула, поглощающая первые убытки (first-loss buffer).
    """
    return Ratio.from_fraction(junior_value, total_value)


# =============================================================================
# TOKEN PRICE КОНВЕРСИИ
# =============================================================================


def position_value(tokens: int | str, token_price: int | str, decimals: int = 18) -> int:
    """Стоимость позиции в валюте пула: tokens * price / 10^decimals."""
    validate_decimals(decimals)
    return parse_base_units(tokens) * parse_base_units(token_price) // 10**decimals


def invest_tokens(invest_amount: int | str, token_price: int | str, decimals: int = 18) -> int:
    """
    Количество tranche-токенов за инвестицию: amount * 10^decimals / price.

    Returns:
        0 если token_price == 0 (транш без цены)
    """
    validate_decimals(decimals)
    price = parse_base_units(token_price)
    if price == 0:
        return 0
    return parse_base_units(invest_amount) * 10**decimals // price


def redeem_currency(redeem_tokens: int | str, token_price: int | str, decimals: int = 18) -> int:
    """Валюта к выплате за погашение: tokens * price / 10^decimals."""
    return position_value(redeem_tokens, token_price, decimals)


def nav_per_share(total_nav: int | str, total_shares: int | str, decimals: int = 18) -> str:
    """
    NAV на один токен в human-readable виде.

    Returns:
        "0" если total_shares == 0
    """
    validate_decimals(decimals)
    shares = parse_base_units(total_shares)
    if shares == 0:
        return "0"
    per_share = parse_base_units(total_nav) * 10**decimals // shares
    return from_base_units(per_share, decimals)


# =============================================================================
# ДОХОДНОСТЬ
# =============================================================================


def investment_return(current_value: int | str, invested_value: int | str) -> InvestmentReturn:
    """
    Абсолютная и относительная доходность.

    Examples:
        >>> r = investment_return(1100, 1000)
        >>> r.absolute_return, r.percentage_return
        (100, Decimal('10.00'))
    """
    current = parse_base_units(current_value)
    invested = parse_base_units(invested_value)
    absolute = current - invested

    return InvestmentReturn(
        absolute_return=absolute,
        ratio=Ratio.from_fraction(absolute, invested),
    )
