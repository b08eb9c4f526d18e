"""
Pool — Модель пула, траншей и снапшота оценки

Immutable Pydantic модели. Pool владеет списком траншей по значению;
эпоха исполнения не мутирует Pool, а порождает новый снапшот
через Pool.with_valuation().

Транши упорядочены по seniority: индекс 0: самый senior,
последний: junior (first-loss).
"""

import hashlib
import re
from enum import Enum
from typing import Final, Sequence

from pydantic import BaseModel, Field, field_validator, model_validator

from rwa_epoch.core.domain.amount import BaseUnits, RatioValue
from rwa_epoch.core.domain.currency import CurrencyId
from rwa_epoch.core.domain.epoch import EpochState
from rwa_epoch.core.domain.validation import ValidationResult
from rwa_epoch.core.errors import InvalidIdentifier
from rwa_epoch.core.math.ratio import Ratio
from rwa_epoch.core.math.valuation import position_value, reserve_ratio, subordination

# Длина tranche_id в байтах (16 байт = 32 hex символа)
TRANCHE_ID_BYTES: Final[int] = 16

_HEX_BODY = re.compile(r"[0-9a-fA-F]*")
_POOL_ID = re.compile(r"\d+")


# =============================================================================
# ENUMS
# =============================================================================


class TrancheType(str, Enum):
    """Тип транша по seniority"""

    SENIOR = "Senior"
    MEZZANINE = "Mezzanine"
    JUNIOR = "Junior"


def get_tranche_type(seniority: int, total_tranches: int) -> TrancheType:
    """
    Тип транша: 0 → Senior, последний → Junior, иначе Mezzanine.

    Пул из одного транша считается Senior.
    """
    if seniority == 0:
        return TrancheType.SENIOR
    if seniority == total_tranches - 1:
        return TrancheType.JUNIOR
    return TrancheType.MEZZANINE


# =============================================================================
# TRANCHE MODEL
# =============================================================================


class Tranche(BaseModel):
    """
    Транш пула.

    token_price масштабирован точностью валюты пула:
    стоимость 1 токена = token_price / 10^currency_decimals.
    """

    id: str = Field(..., min_length=1, description="Идентификатор транша")
    seniority: int = Field(..., ge=0, description="Seniority (0 = most senior)")
    token_supply: BaseUnits = Field(..., description="Эмиссия tranche-токенов (base units)")
    token_price: BaseUnits = Field(..., description="Цена токена (base units валюты пула)")
    interest_rate_per_sec: BaseUnits | None = Field(
        None, description="Per-second ставка (RAY), nullable для junior"
    )
    min_risk_buffer: RatioValue | None = Field(
        None, description="Минимальная subordination ниже транша"
    )

    model_config = {"frozen": True}

    @field_validator("min_risk_buffer")
    @classmethod
    def validate_risk_buffer_range(cls, v: Ratio | None) -> Ratio | None:
        if v is not None and not v.is_within_unit_interval():
            raise ValueError(f"min_risk_buffer {v} must be within [0, 1]")
        return v

    def value(self, decimals: int) -> int:
        """Стоимость транша в валюте пула: supply * price / 10^decimals."""
        return position_value(self.token_supply, self.token_price, decimals)


def sort_tranches_by_seniority(tranches: Sequence[Tranche]) -> list[Tranche]:
    """Копия списка траншей, отсортированная senior → junior."""
    return sorted(tranches, key=lambda t: t.seniority)


# =============================================================================
# POOL MODEL
# =============================================================================


class Pool(BaseModel):
    """
    Снапшот пула.

    Инварианты:
    - транши упорядочены по seniority, seniority и id уникальны
    - nav = portfolio_valuation + reserve
    """

    pool_id: str = Field(..., description="Идентификатор пула (u64 в десятичной записи)")
    currency_decimals: int = Field(..., ge=0, description="Точность валюты пула")
    currency: CurrencyId | None = Field(None, description="Валюта пула")
    reserve: BaseUnits = Field(..., description="Ликвидный резерв (base units)")
    portfolio_valuation: BaseUnits = Field(
        ..., description="Оценка неликвидного портфеля (base units)"
    )
    tranches: tuple[Tranche, ...] = Field(..., min_length=1, description="Транши senior → junior")

    model_config = {"frozen": True}

    @field_validator("pool_id")
    @classmethod
    def validate_pool_id_format(cls, v: str) -> str:
        result = validate_pool_id(v)
        if not result.is_valid:
            raise ValueError(result.error)
        return v

    @field_validator("tranches")
    @classmethod
    def validate_tranche_order(cls, v: tuple[Tranche, ...]) -> tuple[Tranche, ...]:
        """Проверка порядка senior → junior и уникальности."""
        seniorities = [t.seniority for t in v]
        if seniorities != sorted(set(seniorities)):
            raise ValueError(
                f"tranches must be ordered by unique seniority, got {seniorities}"
            )
        ids = [t.id for t in v]
        if len(ids) != len(set(ids)):
            raise ValueError(f"tranche ids must be unique, got {ids}")
        return v

    # -------------------------------------------------------------------------
    # Производные величины
    # -------------------------------------------------------------------------

    @property
    def nav(self) -> int:
        return self.portfolio_valuation + self.reserve

    @property
    def reserve_ratio(self) -> Ratio:
        return reserve_ratio(self.reserve, self.nav)

    @property
    def senior_tranche(self) -> Tranche:
        return self.tranches[0]

    @property
    def junior_tranche(self) -> Tranche:
        return self.tranches[-1]

    def tranche(self, tranche_id: str) -> Tranche | None:
        """Поиск транша по id (None если не найден)."""
        for tranche in self.tranches:
            if tranche.id == tranche_id:
                return tranche
        return None

    def tranche_type(self, tranche: Tranche) -> TrancheType:
        return get_tranche_type(self.tranches.index(tranche), len(self.tranches))

    def tranche_values(self) -> tuple[int, ...]:
        """Стоимости траншей senior → junior."""
        return tuple(t.value(self.currency_decimals) for t in self.tranches)

    def valuation_state(self) -> "PoolValuationState":
        """Снапшот оценки для валидации решения эпохи."""
        return PoolValuationState(
            reserve=self.reserve,
            nav=self.nav,
            tranche_ids=tuple(t.id for t in self.tranches),
            tranche_values=self.tranche_values(),
            min_risk_buffers=tuple(t.min_risk_buffer for t in self.tranches),
        )

    def with_valuation(
        self,
        reserve: int | None = None,
        portfolio_valuation: int | None = None,
        tranches: tuple[Tranche, ...] | None = None,
    ) -> "Pool":
        """Новый снапшот пула с обновлённой оценкой (исходный не меняется)."""
        return Pool(
            pool_id=self.pool_id,
            currency_decimals=self.currency_decimals,
            currency=self.currency,
            reserve=self.reserve if reserve is None else reserve,
            portfolio_valuation=(
                self.portfolio_valuation if portfolio_valuation is None else portfolio_valuation
            ),
            tranches=self.tranches if tranches is None else tranches,
        )


# =============================================================================
# VALUATION STATE
# =============================================================================


class PoolValuationState(BaseModel):
    """
    Текущее состояние оценки пула для validate_solution.

    tranche_values упорядочены senior → junior; последний: junior.
    """

    reserve: BaseUnits
    nav: BaseUnits
    tranche_ids: tuple[str, ...] = Field(..., min_length=1)
    tranche_values: tuple[BaseUnits, ...] = Field(..., min_length=1)
    min_risk_buffers: tuple[RatioValue | None, ...] = Field(
        (), description="Risk buffer каждого транша (пусто = не проверяется)"
    )

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_lengths(self) -> "PoolValuationState":
        if len(self.tranche_ids) != len(self.tranche_values):
            raise ValueError("tranche_ids and tranche_values must have the same length")
        if self.min_risk_buffers and len(self.min_risk_buffers) != len(self.tranche_ids):
            raise ValueError("min_risk_buffers must match tranche_ids when given")
        return self

    @property
    def junior_value(self) -> int:
        return self.tranche_values[-1]

    @property
    def senior_value(self) -> int:
        """Стоимость всех траншей старше junior."""
        return sum(self.tranche_values[:-1])

    @property
    def subordination(self) -> Ratio:
        return subordination(self.junior_value, self.senior_value + self.junior_value)


# =============================================================================
# POOL STATE SUMMARY
# =============================================================================


class PoolStateSummary(BaseModel):
    """Сводка состояния пула для UI / automation слоя."""

    pool_id: str
    nav: BaseUnits
    reserve: BaseUnits
    reserve_ratio: RatioValue
    total_debt: BaseUnits
    number_of_loans: int = Field(..., ge=0)
    epoch_id: int = Field(..., ge=0)
    is_epoch_open: bool

    model_config = {"frozen": True}

    @classmethod
    def create(
        cls,
        pool_id: str,
        nav: int | str = 0,
        reserve: int | str = 0,
        total_debt: int | str = 0,
        number_of_loans: int = 0,
        epoch_id: int = 0,
        epoch_state: str | None = None,
    ) -> "PoolStateSummary":
        """
        Сводка из сырых полей коллаборатора.

        Отсутствующие поля: нули; reserve_ratio вычисляется из reserve/nav.
        """
        return cls(
            pool_id=pool_id,
            nav=nav,
            reserve=reserve,
            reserve_ratio=reserve_ratio(reserve, nav),
            total_debt=total_debt,
            number_of_loans=number_of_loans,
            epoch_id=epoch_id,
            is_epoch_open=epoch_state == EpochState.OPEN.value,
        )


# =============================================================================
# IDENTIFIERS
# =============================================================================


def validate_pool_id(pool_id: str | int) -> ValidationResult:
    """Pool ID: неотрицательное целое (u64) в десятичной записи."""
    if isinstance(pool_id, bool):
        return ValidationResult.from_violations(["Invalid pool ID format"])
    if isinstance(pool_id, int):
        if pool_id < 0:
            return ValidationResult.from_violations(["Pool ID must be positive"])
        return ValidationResult.ok()
    text = str(pool_id).strip()
    if text.startswith("-") and _POOL_ID.fullmatch(text[1:]):
        return ValidationResult.from_violations(["Pool ID must be positive"])
    if not _POOL_ID.fullmatch(text):
        return ValidationResult.from_violations(["Invalid pool ID format"])
    return ValidationResult.ok()


def normalize_pool_id(pool_id: str | int) -> str:
    """
    Нормализованный pool ID.

    Raises:
        InvalidIdentifier: некорректный pool ID
    """
    result = validate_pool_id(pool_id)
    if not result.is_valid:
        raise InvalidIdentifier(f"{result.error}: {pool_id!r}")
    return str(int(str(pool_id).strip()))


def validate_tranche_id(tranche_id: str) -> ValidationResult:
    """Tranche ID: 16 байт в hex (префикс 0x опционален)."""
    body = tranche_id[2:] if tranche_id.startswith("0x") else tranche_id
    if not body or not _HEX_BODY.fullmatch(body):
        return ValidationResult.from_violations(["Tranche ID must be a hex string"])
    if len(body) != TRANCHE_ID_BYTES * 2:
        return ValidationResult.from_violations(
            ["Tranche ID must be 16 bytes (32 hex characters)"]
        )
    return ValidationResult.ok()


def generate_tranche_id(pool_id: str | int, seniority: int) -> str:
    """
    Детерминированный tranche ID из pool ID и seniority.

    blake2b-128 от pool_id (дополненного нулями до 16 символов) + байт seniority.
    """
    if not 0 <= seniority <= 255:
        raise InvalidIdentifier(f"seniority must fit in one byte, got {seniority}")
    payload = str(pool_id).rjust(16, "0").encode("utf-8") + bytes([seniority])
    return "0x" + hashlib.blake2b(payload, digest_size=TRANCHE_ID_BYTES).hexdigest()


def parse_pool_tranche_id(identifier: str) -> tuple[str, str | None]:
    """'poolId-trancheId' → (pool_id, tranche_id); без дефиса tranche_id = None."""
    if "-" in identifier:
        pool_id, tranche_id = identifier.split("-", 1)
        return pool_id, tranche_id
    return identifier, None


def format_pool_tranche_id(pool_id: str | int, tranche_id: str | None = None) -> str:
    if tranche_id:
        return f"{pool_id}-{tranche_id}"
    return str(pool_id)
