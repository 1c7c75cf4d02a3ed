"""Tests for StaticPriceProvider."""

from unittest.mock import AsyncMock, patch

import pytest

from checkout.models.money import Money
from checkout.models.sku import SKU, InvalidSKUError
from checkout.services.price_provider import StaticPriceProvider


class TestStaticPriceProvider:
    """Tests for the in-memory price feed."""

    @pytest.mark.asyncio
    async def test_default_prices(self, price_provider):
        prices = await price_provider.get_prices({SKU.APE, SKU.PUNK, SKU.MEEBIT})

        assert prices == {
            SKU.APE: Money.from_decimal_string("75"),
            SKU.PUNK: Money.from_decimal_string("60"),
            SKU.MEEBIT: Money.from_decimal_string("4"),
        }

    @pytest.mark.asyncio
    async def test_returns_only_requested(self, price_provider):
        prices = await price_provider.get_prices([SKU.APE])
        assert set(prices) == {SKU.APE}

    @pytest.mark.asyncio
    async def test_unknown_price_omitted(self):
        provider = StaticPriceProvider(prices={"APE": "75"})
        prices = await provider.get_prices({SKU.APE, SKU.PUNK})
        assert set(prices) == {SKU.APE}

    @pytest.mark.asyncio
    async def test_set_price_visible_on_next_call(self, price_provider):
        price_provider.set_price(SKU.APE, "80.5")
        prices = await price_provider.get_prices({SKU.APE})
        assert prices[SKU.APE] == Money.from_decimal_string("80.5")

    @pytest.mark.asyncio
    async def test_set_prices_replaces_table(self, price_provider):
        price_provider.set_prices({SKU.MEEBIT: Money.from_decimal_string("1")})
        prices = await price_provider.get_prices({SKU.APE, SKU.MEEBIT})
        assert prices == {SKU.MEEBIT: Money.from_decimal_string("1")}

    def test_invalid_sku_rejected(self, price_provider):
        with pytest.raises(InvalidSKUError):
            price_provider.set_price("DOGE", "1")

    @pytest.mark.asyncio
    async def test_latency_simulation(self):
        provider = StaticPriceProvider(latency_ms=250)

        with patch("checkout.services.price_provider.asyncio.sleep", new=AsyncMock()) as sleep:
            await provider.get_prices({SKU.APE})
            sleep.assert_awaited_once_with(0.25)

            provider.disable_latency_simulation()
            await provider.get_prices({SKU.APE})
            assert sleep.await_count == 1

    def test_negative_latency_rejected(self, price_provider):
        with pytest.raises(ValueError):
            price_provider.enable_latency_simulation(-1)

    def test_latency_property(self, price_provider):
        price_provider.enable_latency_simulation(5)
        assert price_provider.latency_ms == 5
