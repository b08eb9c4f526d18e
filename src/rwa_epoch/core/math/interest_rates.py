"""
InterestRates — конверсия per-second rate (RAY) ↔ APR

Ставки хранятся как fixed-point per-second множитель, масштабированный RAY = 10^27:

    rate_per_sec = RAY * (1 + r_sec)

ФОРМУЛЫ (линейная аппроксимация, НЕ геометрическое компаундирование):
    apr_pct   ≈ (rate_per_sec - RAY) * SECONDS_PER_YEAR / RAY * 100
    rate      ≈ RAY + floor(apr / 100 * RAY) / SECONDS_PER_YEAR

Аппроксимация сохраняется намеренно: отображаемые yield-цифры должны
совпадать бит-в-бит с уже опубликованными. Точный геометрический APY
доступен отдельной функцией per_sec_rate_to_apy и не подменяет APR.
"""

from decimal import Decimal, localcontext
from typing import Final

from rwa_epoch.core.math.decimal_units import (
    div_trunc,
    parse_base_units,
    to_base_units,
)

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Fixed-point масштаб per-second ставок
RAY: Final[int] = 10**27

# Количество десятичных разрядов RAY
RAY_DECIMALS: Final[int] = 27

# 365 * 24 * 3600 (без високосных дней)
SECONDS_PER_YEAR: Final[int] = 365 * 24 * 60 * 60

# Точность Decimal-контекста для геометрического компаундирования
APY_PRECISION: Final[int] = 60


def _format_hundredths(hundredths: int) -> str:
    """Целое в сотых долях процента → строка с 2 знаками ("-4.99", "5.00")."""
    sign = "-" if hundredths < 0 else ""
    whole, fraction = divmod(abs(hundredths), 100)
    return f"{sign}{whole}.{fraction:02d}"


# =============================================================================
# PER-SECOND RATE ↔ APR
# =============================================================================


def per_sec_rate_to_apr(rate_per_sec: int | str) -> str:
    """
    Per-second rate (RAY) → APR в процентах с 2 знаками.

    Examples:
        >>> per_sec_rate_to_apr(10**27)
        '0.00'
        >>> per_sec_rate_to_apr(apr_to_per_sec_rate("5"))
        '4.99'
    """
    rate = parse_base_units(rate_per_sec)
    annual_hundredths = div_trunc((rate - RAY) * SECONDS_PER_YEAR * 10_000, RAY)
    return _format_hundredths(annual_hundredths)


def apr_to_per_sec_rate(apr: str | int | Decimal) -> int:
    """
    APR в процентах ("5" = 5%) → per-second rate (RAY).

    Обратная линейная аппроксимация per_sec_rate_to_apr. Из-за двух
    усечений прямой и обратный путь могут расходиться на 0.01%.

    Raises:
        InvalidAmountFormat: некорректная запись APR
    """
    # apr / 100 * RAY без float: base units с точностью 27 разрядов, затем / 100
    rate_increase = div_trunc(div_trunc(to_base_units(apr, RAY_DECIMALS), 100), SECONDS_PER_YEAR)
    return RAY + rate_increase


def expected_yield(interest_rate_per_sec: int | str, duration: int = SECONDS_PER_YEAR) -> str:
    """
    Ожидаемая доходность за период (простые проценты) в виде "x.xx%".

    Args:
        interest_rate_per_sec: per-second rate (RAY)
        duration: длительность периода в секундах (default: год)
    """
    if duration < 0:
        raise ValueError(f"duration must be non-negative, got {duration}")

    rate = parse_base_units(interest_rate_per_sec)
    hundredths = div_trunc((rate - RAY) * duration * 10_000, RAY)
    return f"{_format_hundredths(hundredths)}%"


def per_sec_rate_to_apy(rate_per_sec: int | str) -> str:
    """
    Точный геометрический APY: ((rate / RAY) ^ SECONDS_PER_YEAR - 1) * 100.

    Используется только для сравнения с линейным APR (compounding drag);
    отображаемый APR продолжает считаться per_sec_rate_to_apr.

    Examples:
        >>> per_sec_rate_to_apy(10**27)
        '0.00'
    """
    rate = parse_base_units(rate_per_sec)
    if rate <= 0:
        raise ValueError(f"rate_per_sec must be positive, got {rate}")

    with localcontext() as ctx:
        ctx.prec = APY_PRECISION
        growth = (Decimal(rate) / Decimal(RAY)) ** SECONDS_PER_YEAR
        hundredths = int((growth - 1) * 10_000)

    return _format_hundredths(hundredths)
