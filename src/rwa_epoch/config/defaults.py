"""Глобальные параметры эпохи и ограничений решения по умолчанию."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class EpochDefaults:
    """Тайминги эпохи (секунды)."""
    min_epoch_duration: int = 24 * 60 * 60           # Минимальная длительность эпохи
    challenge_period: int = 60 * 60                  # Challenge period перед исполнением


@dataclass(frozen=True)
class ConstraintDefaults:
    """Ограничения решения; max_reserve задаётся per-pool."""
    max_reserve: Optional[str] = None                # base units, обязателен для пула
    min_subordination_ratio: str = "0"               # доля junior [0, 1]
    max_nav_decrease: Optional[str] = None           # None = не проверяется


@dataclass(frozen=True)
class DefaultConfig:
    """Полная конфигурация по умолчанию."""
    epoch: EpochDefaults
    constraints: ConstraintDefaults


def get_default_config() -> DefaultConfig:
    return DefaultConfig(
        epoch=EpochDefaults(),
        constraints=ConstraintDefaults(),
    )
