"""
Errors — таксономия исключений движка клиринга

Исключения поднимаются только для некорректного ввода (malformed input).
Нарушения ограничений решения эпохи (constraint violations) не являются
исключениями: это результат ValidationResult(is_valid=False, violations=...).

Деление на ноль в легитимных бизнес-состояниях (NAV = 0, token price = 0)
возвращает определённый нулевой результат и не поднимает исключений.
"""


class EpochEngineError(Exception):
    """Базовый класс всех ошибок движка."""


# =============================================================================
# DECIMAL ENGINE
# =============================================================================


class InvalidAmountFormat(EpochEngineError, ValueError):
    """
    Строка суммы не является десятичным литералом.

    Допустимы только цифры, опциональный знак, одна десятичная точка
    и опциональная scientific-нотация (e/E).
    """


class InvalidPrecision(EpochEngineError, ValueError):
    """Отрицательное/нецелое значение decimals или non-finite число (NaN/Inf)."""


# =============================================================================
# CLEARING ENGINE
# =============================================================================


class InvalidOrder(EpochEngineError, ValueError):
    """
    Некорректный ордер в пакете (fail fast до агрегации).

    Причины: отрицательная сумма, неизвестный tranche_id, чужой pool_id,
    ордера из разных эпох в одном пакете.
    """


class InvalidConstraints(EpochEngineError, ValueError):
    """
    Некорректные ограничения решения.

    Причины: min_subordination_ratio вне [0, 1], отрицательный max_reserve,
    max_nav_decrease вне [0, 1].
    """


# =============================================================================
# IDENTIFIERS
# =============================================================================


class InvalidCurrencyId(EpochEngineError, ValueError):
    """Chain-представление CurrencyId не соответствует ни одному варианту."""


class InvalidIdentifier(EpochEngineError, ValueError):
    """Некорректный pool_id / tranche_id / epoch_id."""
