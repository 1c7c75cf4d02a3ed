"""
Promotions Engine

Prices a cart snapshot against unit prices, applying at most one promotion
per SKU. Rules are tried by priority (highest first), then by id, so the
outcome never depends on the order rules were supplied in.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

import structlog

from checkout.models.cart import CartItem, CartSnapshot
from checkout.models.money import Money
from checkout.models.pricing import Adjustment, LineItem, PricingBreakdown
from checkout.models.sku import CATALOG_ORDER, SKU
from checkout.promotions.base import Promotion

logger = structlog.get_logger(__name__)


class PromotionsEngine:
    """
    Deterministic promotion selection and pricing.

    The engine keeps no state between calls; every calculate_pricing() works
    from the snapshot and prices it is given.
    """

    def __init__(self, promotions: Iterable[Promotion] = ()) -> None:
        self._promotions: tuple[Promotion, ...] = tuple(
            sorted(promotions, key=lambda promo: (-promo.priority, promo.id))
        )

    @property
    def promotions(self) -> tuple[Promotion, ...]:
        """Rules in evaluation order."""
        return self._promotions

    def select_promotion(self, sku: SKU, quantity: int) -> Promotion | None:
        """First rule in evaluation order whose scope matches."""
        for promotion in self._promotions:
            if promotion.applies_to(sku, quantity):
                return promotion
        return None

    def calculate_pricing(
        self,
        snapshot: CartSnapshot,
        prices: Mapping[SKU, Money],
        metadata: Mapping[str, Any] | None = None,
    ) -> PricingBreakdown:
        """
        Price a snapshot.

        SKUs with zero quantity or no entry in `prices` are left out of the
        breakdown entirely. Line items follow catalog order.

        Args:
            snapshot: Cart snapshot to price
            prices: Unit price per SKU
            metadata: Extra values carried on the breakdown

        Returns:
            Immutable pricing breakdown
        """
        quantities: dict[SKU, int] = {}
        for item in snapshot.items:
            quantities[item.sku] = quantities.get(item.sku, 0) + item.quantity

        line_items: list[LineItem] = []
        adjustments: list[Adjustment] = []
        total = Money.zero()
        skipped: list[str] = []

        for sku in sorted(quantities, key=CATALOG_ORDER.__getitem__):
            quantity = quantities[sku]
            unit_price = prices.get(sku)
            if quantity == 0:
                continue
            if unit_price is None:
                skipped.append(sku.value)
                continue

            subtotal_before = unit_price.multiply(quantity)
            subtotal_after = subtotal_before

            promotion = self.select_promotion(sku, quantity)
            if promotion is not None:
                sku_snapshot = CartSnapshot(
                    cart_id=snapshot.cart_id,
                    version=snapshot.version,
                    items=(CartItem(sku=sku, quantity=quantity),),
                    captured_at=snapshot.captured_at,
                )
                result = promotion.apply(sku_snapshot, {sku: unit_price})
                subtotal_after = result.subtotal
                adjustments.extend(result.adjustments)

            line_items.append(
                LineItem(
                    sku=sku,
                    quantity=quantity,
                    unit_price=unit_price,
                    subtotal_before_promotion=subtotal_before,
                    subtotal_after_promotion=subtotal_after,
                )
            )
            total = total + subtotal_after

        if skipped:
            logger.warning(
                "pricing_skipped_unpriced_skus",
                cart_id=snapshot.cart_id,
                skus=skipped,
            )

        breakdown = PricingBreakdown(
            line_items=tuple(line_items),
            adjustments=tuple(adjustments),
            total=total,
            price_timestamp=datetime.now(UTC),
            metadata=metadata or {},
        )
        logger.debug(
            "pricing_calculated",
            cart_id=snapshot.cart_id,
            version=snapshot.version,
            line_count=len(line_items),
            adjustment_count=len(adjustments),
            total=total.to_decimal_string(),
        )
        return breakdown
