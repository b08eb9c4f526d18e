"""
Tests for CurrencyId (tagged variant) и метаданных валют
"""

import pytest

from rwa_epoch.core.domain.currency import (
    AIR_TOKEN,
    CFG_TOKEN,
    AUSDCurrency,
    CurrencyMetadata,
    ForeignAssetCurrency,
    LocalAssetCurrency,
    NativeCurrency,
    StakingCurrency,
    TrancheCurrency,
    create_tranche_currency_id,
    currency_id_from_chain,
    currency_id_to_chain,
    get_currency_by_symbol,
    get_foreign_asset,
    is_native_token,
    is_tranche_token,
)
from rwa_epoch.core.errors import InvalidCurrencyId


# =============================================================================
# CHAIN REPRESENTATION
# =============================================================================


class TestCurrencyIdChainConversion:
    """Тесты конверсии CurrencyId ↔ chain-представление."""

    @pytest.mark.parametrize(
        "currency_id,chain",
        [
            (NativeCurrency(), {"Native": None}),
            (TrancheCurrency(pool_id="1", tranche_id="0xab"), {"Tranche": ["1", "0xab"]}),
            (AUSDCurrency(), {"AUSD": None}),
            (ForeignAssetCurrency(asset_id=1), {"ForeignAsset": 1}),
            (StakingCurrency(key="BlockRewards"), {"Staking": "BlockRewards"}),
            (LocalAssetCurrency(asset_id=2), {"LocalAsset": 2}),
        ],
    )
    def test_to_and_from_chain(self, currency_id, chain):
        assert currency_id_to_chain(currency_id) == chain
        assert currency_id_from_chain(chain) == currency_id

    @pytest.mark.parametrize(
        "raw",
        [
            {},
            {"Native": None, "AUSD": None},
            {"Unknown": 1},
            {"Tranche": "1"},
            {"Tranche": ["1"]},
            {"ForeignAsset": -1},
            {"ForeignAsset": "abc"},
            {"Staking": ""},
            ["Native"],
        ],
    )
    def test_malformed_chain_value_raises(self, raw):
        with pytest.raises(InvalidCurrencyId):
            currency_id_from_chain(raw)

    def test_to_chain_rejects_non_variant(self):
        with pytest.raises(InvalidCurrencyId):
            currency_id_to_chain("Native")

    def test_discriminated_union_in_model(self):
        """Вариант выбирается по полю kind."""
        metadata = CurrencyMetadata.model_validate(
            {
                "symbol": "USDC",
                "name": "USD Coin",
                "decimals": 6,
                "currency_id": {"kind": "ForeignAsset", "asset_id": 1},
                "min_balance": 1000,
                "existential_deposit": 10000,
            }
        )
        assert metadata.currency_id == ForeignAssetCurrency(asset_id=1)

    def test_unknown_kind_rejected_by_model(self):
        with pytest.raises(ValueError):
            CurrencyMetadata.model_validate(
                {
                    "symbol": "X",
                    "name": "X",
                    "decimals": 6,
                    "currency_id": {"kind": "Bogus"},
                    "min_balance": 0,
                    "existential_deposit": 0,
                }
            )


# =============================================================================
# HELPERS & METADATA
# =============================================================================


class TestCurrencyHelpers:
    """Тесты helpers и метаданных."""

    def test_create_tranche_currency_id(self):
        currency_id = create_tranche_currency_id("7", "0xff")
        assert is_tranche_token(currency_id)
        assert not is_native_token(currency_id)
        assert currency_id_to_chain(currency_id) == {"Tranche": ["7", "0xff"]}

    def test_native_token(self):
        assert is_native_token(NativeCurrency())
        assert not is_tranche_token(NativeCurrency())

    def test_get_currency_by_symbol(self):
        assert get_currency_by_symbol("cfg") is CFG_TOKEN
        assert get_currency_by_symbol("AIR") is AIR_TOKEN
        usdc = get_currency_by_symbol("usdc")
        assert usdc is not None
        assert usdc.decimals == 6
        assert usdc.currency_id == ForeignAssetCurrency(asset_id=1)

    def test_get_currency_by_symbol_unknown(self):
        assert get_currency_by_symbol("DOGE") is None

    def test_get_foreign_asset(self):
        dai = get_foreign_asset(2)
        assert dai is not None
        assert dai.symbol == "DAI"
        assert dai.decimals == 18
        assert get_foreign_asset(999) is None
