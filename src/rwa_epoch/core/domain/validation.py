"""
ValidationResult — результат проверки без исключения

Нарушение ограничения (ConstraintViolation): не ошибка, а результат:
вызывающая сторона решает, пересобрать ордера или ослабить ограничения.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ValidationResult:
    """Результат проверки: is_valid и список нарушений."""

    is_valid: bool
    violations: tuple[str, ...] = ()

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(is_valid=True)

    @classmethod
    def from_violations(cls, violations: list[str] | tuple[str, ...]) -> "ValidationResult":
        """is_valid=True тогда и только тогда, когда нарушений нет."""
        return cls(is_valid=len(violations) == 0, violations=tuple(violations))

    @property
    def error(self) -> str | None:
        """Первое нарушение (или None)."""
        return self.violations[0] if self.violations else None
