"""
Price Providers

PriceProvider is the port the checkout service reads unit prices through.
StaticPriceProvider is a configurable in-process feed.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping

import structlog

from checkout.models.money import Money
from checkout.models.sku import SKU, validate_sku

logger = structlog.get_logger(__name__)

DEFAULT_PRICES: dict[SKU, str] = {
    SKU.APE: "75",
    SKU.PUNK: "60",
    SKU.MEEBIT: "4",
}


class PriceProvider(ABC):
    """Source of current unit prices."""

    @abstractmethod
    async def get_prices(self, skus: Iterable[SKU]) -> dict[SKU, Money]:
        """
        Fetch unit prices.

        Args:
            skus: SKUs to price

        Returns:
            Price per SKU; SKUs without a known price are omitted
        """
        pass


class StaticPriceProvider(PriceProvider):
    """
    Price feed held in memory.

    Prices can be changed at any time; every get_prices() call reads the
    current values. Latency simulation delays each call by a fixed amount.
    """

    def __init__(
        self,
        prices: Mapping[SKU | str, Money | str] | None = None,
        latency_ms: int = 0,
    ) -> None:
        self._prices: dict[SKU, Money] = {}
        self.set_prices(DEFAULT_PRICES if prices is None else prices)
        self._latency_ms = 0
        if latency_ms:
            self.enable_latency_simulation(latency_ms)

    @property
    def latency_ms(self) -> int:
        return self._latency_ms

    async def get_prices(self, skus: Iterable[SKU]) -> dict[SKU, Money]:
        requested = {validate_sku(sku) for sku in skus}
        if self._latency_ms:
            await asyncio.sleep(self._latency_ms / 1000)
        return {sku: self._prices[sku] for sku in requested if sku in self._prices}

    def set_price(self, sku: SKU | str, price: Money | str) -> None:
        self._prices[validate_sku(sku)] = _to_money(price)

    def set_prices(self, prices: Mapping[SKU | str, Money | str]) -> None:
        """Replace the whole price table."""
        self._prices = {validate_sku(sku): _to_money(price) for sku, price in prices.items()}

    def enable_latency_simulation(self, latency_ms: int) -> None:
        if latency_ms < 0:
            raise ValueError(f"Latency cannot be negative: {latency_ms}")
        self._latency_ms = latency_ms
        logger.info("price_feed_latency_enabled", latency_ms=latency_ms)

    def disable_latency_simulation(self) -> None:
        self._latency_ms = 0


def _to_money(price: Money | str) -> Money:
    if isinstance(price, Money):
        return price
    return Money.from_decimal_string(price)
