"""
Ratio — fixed-point отношение с шагом 1 basis point

Все отношения движка (reserve ratio, subordination, fulfillment ratio,
investment return) считаются в целочисленной арифметике:

    ratio_bps = (numerator * RATIO_SCALE) // denominator    (truncate toward zero)

RATIO_SCALE = 10_000 → 4 десятичных разряда (1 bps = 0.0001).
Деление на нулевой знаменатель: легитимное бизнес-состояние (пул без NAV),
результат определён как Ratio.ZERO.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar, Final

from rwa_epoch.core.errors import InvalidAmountFormat
from rwa_epoch.core.math.decimal_units import (
    div_trunc,
    from_base_units,
    parse_base_units,
    to_base_units,
)

# Масштаб fixed-point отношения (4 десятичных разряда)
RATIO_SCALE: Final[int] = 10_000

# Количество десятичных разрядов, соответствующее RATIO_SCALE
RATIO_DECIMALS: Final[int] = 4


@dataclass(frozen=True, order=True)
class Ratio:
    """
    Отношение в basis points (bps / RATIO_SCALE).

    Immutable, сравнимое, со знаком (investment return может быть отрицательным).

    Examples:
        >>> Ratio.from_fraction(100, 1000)
        Ratio(bps=1000)
        >>> str(Ratio(bps=1000))
        '0.1'
        >>> Ratio.parse("0.25").bps
        2500
    """

    bps: int

    ZERO: ClassVar["Ratio"]
    ONE: ClassVar["Ratio"]

    def __post_init__(self) -> None:
        if isinstance(self.bps, bool) or not isinstance(self.bps, int):
            raise InvalidAmountFormat(f"Ratio bps must be an integer, got {self.bps!r}")

    # -------------------------------------------------------------------------
    # Конструкторы
    # -------------------------------------------------------------------------

    @classmethod
    def from_fraction(cls, numerator: int | str, denominator: int | str) -> "Ratio":
        """
        numerator / denominator с точностью 4 знака (truncate).

        Returns:
            Ratio.ZERO если denominator == 0
        """
        num = parse_base_units(numerator)
        den = parse_base_units(denominator)

        if den == 0:
            return cls.ZERO

        return cls(div_trunc(num * RATIO_SCALE, den))

    @classmethod
    def parse(cls, value: "str | int | Decimal | Ratio") -> "Ratio":
        """
        Разбор десятичной записи отношения ("0.2", Decimal("0.05"), 1).

        Разряды после 4-го отбрасываются.
        """
        if isinstance(value, Ratio):
            return value
        return cls(to_base_units(value, RATIO_DECIMALS))

    @classmethod
    def from_percentage(cls, value: str | int | Decimal) -> "Ratio":
        """Разбор процента ("12.5" → 0.125)."""
        return cls(div_trunc(to_base_units(value, RATIO_DECIMALS), 100))

    # -------------------------------------------------------------------------
    # Представления
    # -------------------------------------------------------------------------

    def as_decimal(self) -> Decimal:
        """Точное Decimal значение отношения."""
        return Decimal(self.bps).scaleb(-RATIO_DECIMALS)

    def as_percentage(self) -> Decimal:
        """Отношение в процентах с шагом 0.01% ("0.1234" → 12.34)."""
        return Decimal(self.bps).scaleb(-2)

    def apply(self, amount: int) -> int:
        """amount * ratio в base units (truncate)."""
        return div_trunc(amount * self.bps, RATIO_SCALE)

    def is_within_unit_interval(self) -> bool:
        return 0 <= self.bps <= RATIO_SCALE

    def __str__(self) -> str:
        return from_base_units(self.bps, RATIO_DECIMALS)


Ratio.ZERO = Ratio(0)
Ratio.ONE = Ratio(RATIO_SCALE)
