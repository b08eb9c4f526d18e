"""
DecimalUnits — Lossless конверсия десятичных сумм и base units

Единственный допустимый способ преобразований между:
- human-readable десятичной строкой ("100.5")
- integer base units (100.5 при decimals=18 → 100500000000000000000)
- base units разной точности (USDC 6 → DAI 18)

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Сумма никогда не проходит через binary float (только str/int)
2. Лишние дробные разряды отбрасываются (truncate), а не округляются
3. Недостающие дробные разряды дополняются нулями
4. Некорректный ввод → InvalidAmountFormat / InvalidPrecision, без подстановки defaults

СВОЙСТВО:
    from_base_units(to_base_units(s, d), d) == normalize(s)
    для любой строки s с ≤ d дробными разрядами без экспоненты.
"""

import math
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Final

from rwa_epoch.core.errors import InvalidAmountFormat, InvalidPrecision

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Точность известных валют (base units = 10^decimals)
DECIMALS: Final[dict[str, int]] = {
    "CFG": 18,
    "USDC": 6,
    "USDT": 6,
    "DAI": 18,
    "ETH": 18,
    "BTC": 8,
}

# Поддерживаемые конфигурации точности
SUPPORTED_DECIMALS: Final[tuple[int, ...]] = (6, 8, 12, 18)

# Точность по умолчанию для неизвестных символов (наиболее распространённая)
DEFAULT_DECIMALS: Final[int] = 18

# Граница экспоненты scientific-нотации (защита от гигантских строк)
MAX_SCIENTIFIC_EXPONENT: Final[int] = 1000

# Number.MAX_SAFE_INTEGER внешних JSON-потребителей
MAX_SAFE_INTEGER: Final[int] = 2**53 - 1

_DECIMAL_LITERAL = re.compile(r"([+-]?)(\d*)(?:\.(\d*))?(?:[eE]([+-]?\d+))?")
_INTEGER_LITERAL = re.compile(r"[+-]?\d+")


# =============================================================================
# ВАЛИДАЦИЯ ВХОДОВ
# =============================================================================


def validate_decimals(decimals: int) -> int:
    """
    Проверка параметра точности.

    Raises:
        InvalidPrecision: decimals не int или отрицательный
    """
    if isinstance(decimals, bool) or not isinstance(decimals, int):
        raise InvalidPrecision(f"decimals must be an integer, got {decimals!r}")
    if decimals < 0:
        raise InvalidPrecision(f"decimals must be non-negative, got {decimals}")
    return decimals


def _decimal_literal(amount: str | int | Decimal | float) -> str:
    """Приведение входа к строке десятичного литерала без float-арифметики."""
    if isinstance(amount, bool):
        raise InvalidAmountFormat(f"Boolean is not an amount: {amount!r}")
    if isinstance(amount, int):
        return str(amount)
    if isinstance(amount, float):
        if not math.isfinite(amount):
            raise InvalidPrecision(f"Amount is not finite: {amount!r}")
        # repr даёт кратчайшую десятичную запись, дальше работаем со строкой
        return repr(amount)
    if isinstance(amount, Decimal):
        if not amount.is_finite():
            raise InvalidPrecision(f"Amount is not finite: {amount!r}")
        return str(amount)
    if isinstance(amount, str):
        return amount.strip()
    raise InvalidAmountFormat(f"Unsupported amount type: {type(amount).__name__}")


def parse_base_units(value: int | str) -> int:
    """
    Разбор значения в base units (целое число).

    Принимает int или строку целого числа в base-10 (с опциональным знаком).
    Float не принимается никогда: base units: всегда целые.

    Raises:
        InvalidAmountFormat: если значение не целое число
    """
    if isinstance(value, bool):
        raise InvalidAmountFormat(f"Boolean is not a base-unit amount: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if _INTEGER_LITERAL.fullmatch(text):
            return int(text)
        raise InvalidAmountFormat(f"Invalid base-unit amount: {value!r}")
    raise InvalidAmountFormat(
        f"Base-unit amount must be int or integer string, got {type(value).__name__}"
    )


def div_trunc(numerator: int, denominator: int) -> int:
    """
    Целочисленное деление с усечением к нулю.

    Python `//` округляет к -inf; для знаковых сумм (absolute return,
    APR ниже RAY) нужна семантика truncate toward zero.
    """
    quotient = abs(numerator) // abs(denominator)
    if (numerator < 0) != (denominator < 0):
        return -quotient
    return quotient


# =============================================================================
# БАЗОВЫЕ КОНВЕРТЕРЫ
# =============================================================================


def to_base_units(amount: str | int | Decimal | float, decimals: int) -> int:
    """
    Конверсия: human-readable сумма → base units.

    Scientific-нотация нормализуется сдвигом десятичной точки на уровне
    строки, поэтому "1.5e-3" и "0.0015" дают одинаковый результат.

    Args:
        amount: Десятичный литерал ("100.5", "1e-6", Decimal, int)
        decimals: Точность валюты (количество дробных разрядов)

    Returns:
        Целое число base units (amount * 10^decimals, truncate)

    Raises:
        InvalidAmountFormat: некорректный литерал
        InvalidPrecision: отрицательный decimals или NaN/Inf

    Examples:
        >>> to_base_units("100.5", 18)
        100500000000000000000
        >>> to_base_units("100", 6)
        100000000
        >>> to_base_units("0.1234567", 6)
        123456
    """
    validate_decimals(decimals)
    literal = _decimal_literal(amount)
    if literal == "":
        return 0

    match = _DECIMAL_LITERAL.fullmatch(literal)
    if match is None:
        raise InvalidAmountFormat(f"Invalid decimal amount: {amount!r}")

    sign, whole, fraction, exponent_str = match.groups()
    fraction = fraction or ""
    if not whole and not fraction:
        raise InvalidAmountFormat(f"Invalid decimal amount: {amount!r}")

    exponent = int(exponent_str) if exponent_str else 0
    if abs(exponent) > MAX_SCIENTIFIC_EXPONENT:
        raise InvalidAmountFormat(
            f"Exponent {exponent} out of range ±{MAX_SCIENTIFIC_EXPONENT}: {amount!r}"
        )

    # Позиция десятичной точки после масштабирования на 10^decimals
    digits = whole + fraction
    point = len(whole) + exponent + decimals

    if point <= 0:
        scaled = ""
    elif point >= len(digits):
        scaled = digits + "0" * (point - len(digits))
    else:
        scaled = digits[:point]

    value = int(scaled.lstrip("0") or "0")
    return -value if sign == "-" else value


def from_base_units(value: int | str, decimals: int) -> str:
    """
    Конверсия: base units → human-readable строка.

    Args:
        value: Сумма в base units (int или строка целого)
        decimals: Точность валюты

    Returns:
        Десятичная строка без хвостовых нулей; целые значения без точки

    Examples:
        >>> from_base_units(100500000000000000000, 18)
        '100.5'
        >>> from_base_units(100000000, 6)
        '100'
        >>> from_base_units(5, 6)
        '0.000005'
    """
    validate_decimals(decimals)
    raw = parse_base_units(value)

    sign = "-" if raw < 0 else ""
    whole, fraction = divmod(abs(raw), 10**decimals)

    if fraction == 0:
        return f"{sign}{whole}"

    fraction_str = str(fraction).rjust(decimals, "0").rstrip("0")
    return f"{sign}{whole}.{fraction_str}"


def convert_decimals(value: int | str, source_decimals: int, target_decimals: int) -> int:
    """
    Пересчёт суммы между точностями.

    Масштабирование вверх: умножение (без потерь), вниз: деление с усечением.

    Examples:
        >>> convert_decimals(1_000_000, 6, 18)
        1000000000000000000
        >>> convert_decimals(1_234_567_890_123_456_789, 18, 6)
        1234567
    """
    validate_decimals(source_decimals)
    validate_decimals(target_decimals)
    raw = parse_base_units(value)

    if source_decimals == target_decimals:
        return raw

    if target_decimals > source_decimals:
        return raw * 10 ** (target_decimals - source_decimals)

    return div_trunc(raw, 10 ** (source_decimals - target_decimals))


# =============================================================================
# КОНВЕРТЕРЫ ПО СИМВОЛУ ВАЛЮТЫ
# =============================================================================


def get_decimals(symbol: str) -> int:
    """Точность известной валюты по символу (default 18)."""
    return DECIMALS.get(symbol.upper(), DEFAULT_DECIMALS)


def cfg_to_base_units(amount: str | int | Decimal) -> int:
    return to_base_units(amount, DECIMALS["CFG"])


def base_units_to_cfg(value: int | str) -> str:
    return from_base_units(value, DECIMALS["CFG"])


def usdc_to_base_units(amount: str | int | Decimal) -> int:
    return to_base_units(amount, DECIMALS["USDC"])


def base_units_to_usdc(value: int | str) -> str:
    return from_base_units(value, DECIMALS["USDC"])


def exceeds_max_safe_integer(value: int | str) -> bool:
    """True если значение не представимо точно в JSON number потребителя."""
    return parse_base_units(value) > MAX_SAFE_INTEGER


# =============================================================================
# ФОРМАТИРОВАНИЕ ДЛЯ ОТОБРАЖЕНИЯ
# =============================================================================


def _to_decimal(amount: str | int | Decimal) -> Decimal:
    if isinstance(amount, bool) or isinstance(amount, float):
        raise InvalidAmountFormat(f"Display amount must be str, int or Decimal: {amount!r}")
    try:
        result = Decimal(amount.strip() if isinstance(amount, str) else amount)
    except (InvalidOperation, TypeError) as e:
        raise InvalidAmountFormat(f"Invalid display amount: {amount!r}") from e
    if not result.is_finite():
        raise InvalidAmountFormat(f"Display amount is not finite: {amount!r}")
    return result


def _quantize(value: Decimal, places: int) -> Decimal:
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def calculate_percentage(part: int | str, total: int | str, precision: int = 2) -> str:
    """
    Процент part от total с точностью до сотых процента.

    Returns:
        Строка с `precision` знаками после точки; "0" если total == 0

    Examples:
        >>> calculate_percentage(250, 1000)
        '25.00'
        >>> calculate_percentage(1, 3, precision=1)
        '33.3'
    """
    part_value = parse_base_units(part)
    total_value = parse_base_units(total)

    if total_value == 0:
        return "0"

    hundredths = div_trunc(part_value * 10_000, total_value)
    percentage = Decimal(hundredths).scaleb(-2)
    return f"{_quantize(percentage, precision):f}"


def format_amount(amount: str | int | Decimal, display_decimals: int = 2) -> str:
    """
    Форматирование суммы с разделителями тысяч.

    Округление half-up до `display_decimals`, хвостовые нули не выводятся.

    Examples:
        >>> format_amount("1234567.891")
        '1,234,567.89'
        >>> format_amount("1000")
        '1,000'
    """
    validate_decimals(display_decimals)
    value = _quantize(_to_decimal(amount), display_decimals)

    text = f"{value:,f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def format_currency(amount: str | int | Decimal, symbol: str, display_decimals: int = 2) -> str:
    """Сумма с символом валюты: '1,000.5 USDC'."""
    return f"{format_amount(amount, display_decimals)} {symbol}"


_ABBREVIATIONS: Final[tuple[tuple[Decimal, str], ...]] = (
    (Decimal("1e12"), "T"),
    (Decimal("1e9"), "B"),
    (Decimal("1e6"), "M"),
    (Decimal("1e3"), "K"),
)


def format_large_number(value: str | int | Decimal) -> str:
    """
    Сокращённая запись больших чисел (K, M, B, T).

    Examples:
        >>> format_large_number("1500000")
        '1.50M'
        >>> format_large_number(999)
        '999.00'
    """
    number = _to_decimal(value)

    for threshold, suffix in _ABBREVIATIONS:
        if abs(number) >= threshold:
            return f"{_quantize(number / threshold, 2):f}{suffix}"

    return f"{_quantize(number, 2):f}"
