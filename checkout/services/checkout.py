"""
Checkout Service

Orchestrates cart creation, idempotency-guarded scans and pricing. Conflicts
and validation failures propagate unchanged; retrying is the caller's call.
"""

from __future__ import annotations

from typing import Any

import structlog

from checkout.models.cart import validate_quantity
from checkout.models.pricing import PricingBreakdown
from checkout.models.sku import SKU, validate_sku
from checkout.monitoring.logging import log_duration
from checkout.repositories.base import CartNotFoundError, CartRepository
from checkout.services.idempotency import IdempotencyStore
from checkout.services.price_provider import PriceProvider
from checkout.services.pricing_engine import PromotionsEngine

logger = structlog.get_logger(__name__)


class CheckoutService:
    """Cart operations exposed to the presentation layer."""

    def __init__(
        self,
        repository: CartRepository,
        price_provider: PriceProvider,
        engine: PromotionsEngine,
        idempotency_store: IdempotencyStore,
    ) -> None:
        self.repository = repository
        self.price_provider = price_provider
        self.engine = engine
        self.idempotency_store = idempotency_store

    async def create_cart(self) -> str:
        cart = await self.repository.create()
        return cart.id

    async def scan(
        self,
        cart_id: str,
        sku: SKU | str,
        quantity: Any = 1,
        idempotency_key: str | None = None,
    ) -> int:
        """
        Add units of a SKU to a cart.

        Quantity and SKU are validated before anything else, so bad input
        fails the same way with or without a key. With an idempotency key, a
        repeat of an already-saved scan returns the recorded version without
        reading or touching the cart.

        Args:
            cart_id: Target cart
            sku: Item code
            quantity: Positive number of units
            idempotency_key: Optional caller key for safe retries

        Returns:
            Cart version after the scan

        Raises:
            CartNotFoundError: If the cart does not exist
            InvalidSKUError: If the SKU is not in the catalog
            InvalidQuantityError: If quantity is not a positive integer
            CartVersionConflictError: If another writer saved first
            IdempotencyKeyConflictError: If the key was used differently
        """
        validated_quantity = validate_quantity(quantity)
        validated_sku = validate_sku(sku)

        fingerprint: str | None = None
        if idempotency_key is not None:
            fingerprint = self.idempotency_store.create_fingerprint(validated_sku, validated_quantity)
            check = self.idempotency_store.verify_and_set(idempotency_key, cart_id, fingerprint)
            if check.is_duplicate and check.version is not None:
                return check.version

        cart = await self.repository.get(cart_id)
        if cart is None:
            raise CartNotFoundError(cart_id)

        expected_version = cart.version
        cart.add_item(validated_sku, validated_quantity)
        await self.repository.save(cart, expected_version)

        if idempotency_key is not None and fingerprint is not None:
            self.idempotency_store.set(idempotency_key, cart_id, cart.version, fingerprint)

        logger.info(
            "cart_item_scanned",
            cart_id=cart_id,
            sku=validated_sku.value,
            quantity=validated_quantity,
            version=cart.version,
        )
        return cart.version

    async def get_total(self, cart_id: str) -> PricingBreakdown:
        """
        Price a cart with fresh prices.

        Raises:
            CartNotFoundError: If the cart does not exist
        """
        cart = await self.repository.get(cart_id)
        if cart is None:
            raise CartNotFoundError(cart_id)

        snapshot = cart.snapshot()
        skus = snapshot.skus
        with log_duration(logger, "price_fetch", level="debug", cart_id=cart_id, sku_count=len(skus)):
            prices = await self.price_provider.get_prices(skus)

        return self.engine.calculate_pricing(
            snapshot,
            prices,
            metadata={"cart_id": snapshot.cart_id, "cart_version": snapshot.version},
        )
