"""
Amount — типы сумм на границе с внешними коллабораторами

Суммы пересекают границу как base-10 строки целых (или int) плюс явный
decimals. Float не принимается ни в одном поле суммы.

Типы:
- BaseUnits: неотрицательное целое в base units (JSON → строка)
- SignedBaseUnits: целое со знаком (JSON → строка)
- RatioValue: Ratio из "0.2" / Decimal / Ratio (JSON → "0.2")
- Amount: пара (value, decimals) с конверсиями
"""

from typing import Annotated, Any

from pydantic import (
    BaseModel,
    BeforeValidator,
    Field,
    PlainSerializer,
    PlainValidator,
    SerializationInfo,
)

from rwa_epoch.core.math.decimal_units import (
    convert_decimals,
    from_base_units,
    parse_base_units,
    to_base_units,
)
from rwa_epoch.core.math.ratio import Ratio


# =============================================================================
# ANNOTATED ТИПЫ
# =============================================================================

BaseUnits = Annotated[
    int,
    BeforeValidator(parse_base_units),
    Field(ge=0),
    PlainSerializer(str, return_type=str, when_used="json"),
]

SignedBaseUnits = Annotated[
    int,
    BeforeValidator(parse_base_units),
    PlainSerializer(str, return_type=str, when_used="json"),
]


def _serialize_ratio(value: Ratio, info: SerializationInfo) -> Ratio | str:
    # python-режим сохраняет Ratio, JSON получает десятичную строку
    return str(value) if info.mode_is_json() else value


RatioValue = Annotated[
    Ratio,
    PlainValidator(Ratio.parse),
    PlainSerializer(_serialize_ratio, return_type=Any),
]


# =============================================================================
# AMOUNT MODEL
# =============================================================================


class Amount(BaseModel):
    """
    Сумма в base units с явной точностью.

    Immutable модель (frozen=True).
    """

    value: BaseUnits = Field(..., description="Сумма в base units")
    decimals: int = Field(..., ge=0, description="Количество дробных разрядов валюты")

    model_config = {"frozen": True}

    @classmethod
    def from_human(cls, amount: str | int, decimals: int) -> "Amount":
        """Создание из human-readable строки ("100.5")."""
        return cls(value=to_base_units(amount, decimals), decimals=decimals)

    def to_human(self) -> str:
        """Human-readable строка без хвостовых нулей."""
        return from_base_units(self.value, self.decimals)

    def convert(self, target_decimals: int) -> "Amount":
        """Пересчёт в другую точность (вниз: с усечением)."""
        return Amount(
            value=convert_decimals(self.value, self.decimals, target_decimals),
            decimals=target_decimals,
        )
