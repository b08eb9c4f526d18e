"""
Currency — идентификаторы и метаданные валют

CurrencyId: закрытый tagged variant (discriminated union по полю kind):
- Native: нативный токен сети (CFG / AIR)
- Tranche: токен транша (pool_id, tranche_id)
- AUSD: стейблкоин сети
- ForeignAsset: bridged актив по числовому id
- Staking: staking-валюта по ключу
- LocalAsset: локальный актив по числовому id

Chain-представление ({"Native": None}, {"Tranche": [pool, tranche]}, ...)
конвертируется только через currency_id_from_chain / currency_id_to_chain.
"""

from enum import Enum
from typing import Annotated, Any, Final, Literal, Union

from pydantic import BaseModel, Field, ValidationError

from rwa_epoch.core.errors import InvalidCurrencyId


# =============================================================================
# ENUMS
# =============================================================================


class CurrencyKind(str, Enum):
    """Вариант CurrencyId"""

    NATIVE = "Native"
    TRANCHE = "Tranche"
    AUSD = "AUSD"
    FOREIGN_ASSET = "ForeignAsset"
    STAKING = "Staking"
    LOCAL_ASSET = "LocalAsset"


# =============================================================================
# CURRENCY ID VARIANTS
# =============================================================================


class NativeCurrency(BaseModel):
    kind: Literal["Native"] = "Native"

    model_config = {"frozen": True}


class TrancheCurrency(BaseModel):
    kind: Literal["Tranche"] = "Tranche"
    pool_id: str = Field(..., min_length=1, description="Идентификатор пула")
    tranche_id: str = Field(..., min_length=1, description="Идентификатор транша")

    model_config = {"frozen": True}


class AUSDCurrency(BaseModel):
    kind: Literal["AUSD"] = "AUSD"

    model_config = {"frozen": True}


class ForeignAssetCurrency(BaseModel):
    kind: Literal["ForeignAsset"] = "ForeignAsset"
    asset_id: int = Field(..., ge=0, description="Идентификатор bridged актива")

    model_config = {"frozen": True}


class StakingCurrency(BaseModel):
    kind: Literal["Staking"] = "Staking"
    key: str = Field(..., min_length=1, description="Ключ staking-валюты")

    model_config = {"frozen": True}


class LocalAssetCurrency(BaseModel):
    kind: Literal["LocalAsset"] = "LocalAsset"
    asset_id: int = Field(..., ge=0, description="Идентификатор локального актива")

    model_config = {"frozen": True}


CurrencyId = Annotated[
    Union[
        NativeCurrency,
        TrancheCurrency,
        AUSDCurrency,
        ForeignAssetCurrency,
        StakingCurrency,
        LocalAssetCurrency,
    ],
    Field(discriminator="kind"),
]


# =============================================================================
# CHAIN REPRESENTATION
# =============================================================================


def currency_id_to_chain(currency_id: CurrencyId) -> dict[str, Any]:
    """
    CurrencyId → chain-представление ({variant: payload}).

    Raises:
        InvalidCurrencyId: объект не является вариантом CurrencyId
    """
    if isinstance(currency_id, NativeCurrency):
        return {"Native": None}
    if isinstance(currency_id, TrancheCurrency):
        return {"Tranche": [currency_id.pool_id, currency_id.tranche_id]}
    if isinstance(currency_id, AUSDCurrency):
        return {"AUSD": None}
    if isinstance(currency_id, ForeignAssetCurrency):
        return {"ForeignAsset": currency_id.asset_id}
    if isinstance(currency_id, StakingCurrency):
        return {"Staking": currency_id.key}
    if isinstance(currency_id, LocalAssetCurrency):
        return {"LocalAsset": currency_id.asset_id}
    raise InvalidCurrencyId(f"Not a CurrencyId variant: {currency_id!r}")


def currency_id_from_chain(raw: dict[str, Any]) -> CurrencyId:
    """
    Chain-представление → CurrencyId.

    Ровно один ключ, совпадающий с вариантом; payload проверяется моделью.

    Raises:
        InvalidCurrencyId: неизвестный вариант, несколько ключей или неверный payload
    """
    if not isinstance(raw, dict) or len(raw) != 1:
        raise InvalidCurrencyId(f"CurrencyId must have exactly one variant key: {raw!r}")

    (tag, payload), = raw.items()
    try:
        kind = CurrencyKind(tag)
    except ValueError as e:
        raise InvalidCurrencyId(f"Unknown CurrencyId variant: {tag!r}") from e

    try:
        if kind is CurrencyKind.NATIVE:
            return NativeCurrency()
        if kind is CurrencyKind.AUSD:
            return AUSDCurrency()
        if kind is CurrencyKind.TRANCHE:
            if not isinstance(payload, (list, tuple)) or len(payload) != 2:
                raise InvalidCurrencyId(f"Tranche payload must be [pool_id, tranche_id]: {payload!r}")
            return TrancheCurrency(pool_id=str(payload[0]), tranche_id=str(payload[1]))
        if kind is CurrencyKind.FOREIGN_ASSET:
            return ForeignAssetCurrency(asset_id=payload)
        if kind is CurrencyKind.STAKING:
            return StakingCurrency(key=payload)
        if kind is CurrencyKind.LOCAL_ASSET:
            return LocalAssetCurrency(asset_id=payload)
    except ValidationError as e:
        raise InvalidCurrencyId(f"Invalid {tag} payload: {payload!r}") from e

    raise InvalidCurrencyId(f"Unhandled CurrencyId variant: {tag!r}")


def create_tranche_currency_id(pool_id: str, tranche_id: str) -> TrancheCurrency:
    return TrancheCurrency(pool_id=pool_id, tranche_id=tranche_id)


def is_tranche_token(currency_id: CurrencyId) -> bool:
    return isinstance(currency_id, TrancheCurrency)


def is_native_token(currency_id: CurrencyId) -> bool:
    return isinstance(currency_id, NativeCurrency)


# =============================================================================
# CURRENCY METADATA
# =============================================================================


class CurrencyMetadata(BaseModel):
    """Метаданные валюты."""

    symbol: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    decimals: int = Field(..., ge=0)
    currency_id: CurrencyId
    min_balance: int = Field(..., ge=0, description="Минимальный баланс (base units)")
    existential_deposit: int = Field(..., ge=0, description="Existential deposit (base units)")

    model_config = {"frozen": True}


CFG_TOKEN: Final[CurrencyMetadata] = CurrencyMetadata(
    symbol="CFG",
    name="Centrifuge",
    decimals=18,
    currency_id=NativeCurrency(),
    min_balance=1_000_000_000_000,  # 0.000001 CFG
    existential_deposit=1_000_000_000_000_000,  # 0.001 CFG
)

AIR_TOKEN: Final[CurrencyMetadata] = CurrencyMetadata(
    symbol="AIR",
    name="Altair",
    decimals=18,
    currency_id=NativeCurrency(),
    min_balance=1_000_000_000_000,
    existential_deposit=1_000_000_000_000_000,
)


def _foreign_asset(
    asset_id: int, symbol: str, name: str, decimals: int, min_balance: int, existential_deposit: int
) -> CurrencyMetadata:
    return CurrencyMetadata(
        symbol=symbol,
        name=name,
        decimals=decimals,
        currency_id=ForeignAssetCurrency(asset_id=asset_id),
        min_balance=min_balance,
        existential_deposit=existential_deposit,
    )


FOREIGN_ASSETS: Final[dict[int, CurrencyMetadata]] = {
    1: _foreign_asset(1, "USDC", "USD Coin", 6, 1_000, 10_000),
    2: _foreign_asset(2, "DAI", "Dai Stablecoin", 18, 10**12, 10**16),
    3: _foreign_asset(3, "FRAX", "Frax", 18, 10**12, 10**16),
    4: _foreign_asset(4, "USDT", "Tether USD", 6, 1_000, 10_000),
    5: _foreign_asset(5, "wETH", "Wrapped Ether", 18, 10**12, 10**15),
    6: _foreign_asset(6, "GLMR", "Glimmer", 18, 10**12, 10**15),
}


def get_currency_by_symbol(symbol: str) -> CurrencyMetadata | None:
    """Поиск метаданных валюты по символу (регистр не важен)."""
    normalized = symbol.upper()
    if normalized == CFG_TOKEN.symbol:
        return CFG_TOKEN
    if normalized == AIR_TOKEN.symbol:
        return AIR_TOKEN
    for currency in FOREIGN_ASSETS.values():
        if currency.symbol.upper() == normalized:
            return currency
    return None


def get_foreign_asset(asset_id: int) -> CurrencyMetadata | None:
    return FOREIGN_ASSETS.get(asset_id)
