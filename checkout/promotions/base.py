"""
Promotion Base

Every promotion answers two questions through one interface: does it apply
to (sku, quantity), and what does it take off a single-SKU snapshot.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass

from checkout.models.base import CheckoutError, EmptyIdentifierError
from checkout.models.cart import CartSnapshot, aggregate_items
from checkout.models.money import Money
from checkout.models.pricing import Adjustment
from checkout.models.sku import SKU, validate_sku


class PromotionConfigError(CheckoutError, ValueError):
    """Promotion parameters are invalid."""

    pass


@dataclass(frozen=True)
class PromotionResult:
    """Discount adjustments and the discounted subtotal for one SKU."""

    adjustments: tuple[Adjustment, ...]
    subtotal: Money


class Promotion(ABC):
    """
    Base class for single-SKU promotions.

    Subclasses supply the scope test, the discount arithmetic and the human
    description; apply() is shared.

    Attributes:
        id: Unique promotion identifier, also the ordering tie-break
        sku: The only SKU this promotion prices
        priority: Higher priorities are tried first
    """

    def __init__(self, promo_id: str, sku: SKU | str, priority: int = 0) -> None:
        if not isinstance(promo_id, str) or not promo_id.strip():
            raise EmptyIdentifierError("promo_id")
        if isinstance(priority, bool) or not isinstance(priority, int):
            raise PromotionConfigError(f"Priority must be an integer, got {priority!r}")

        self.id = promo_id
        self.sku = validate_sku(sku)
        self.priority = priority

    @abstractmethod
    def applies_to(self, sku: SKU, quantity: int) -> bool:
        """Whether this promotion prices `quantity` units of `sku`."""
        pass

    @abstractmethod
    def calculate_discount(self, quantity: int, unit_price: Money) -> Money:
        """Discount for `quantity` units at `unit_price`."""
        pass

    @abstractmethod
    def describe(self, quantity: int) -> str:
        """Human description of the discount for `quantity` units."""
        pass

    def apply(self, snapshot: CartSnapshot, prices: Mapping[SKU, Money]) -> PromotionResult:
        """
        Price this promotion's SKU within a snapshot.

        Args:
            snapshot: Snapshot holding rows for this promotion's SKU
            prices: Current unit prices

        Returns:
            Zero or one adjustment plus the discounted subtotal
        """
        quantity = aggregate_items(snapshot.items).get(self.sku, 0)
        unit_price = prices.get(self.sku)
        if quantity == 0 or unit_price is None:
            return PromotionResult(adjustments=(), subtotal=Money.zero())

        subtotal = unit_price.multiply(quantity)
        if not self.applies_to(self.sku, quantity):
            return PromotionResult(adjustments=(), subtotal=subtotal)

        discount = self.calculate_discount(quantity, unit_price)
        if discount.is_zero():
            return PromotionResult(adjustments=(), subtotal=subtotal)

        adjustment = Adjustment(
            promo_id=self.id,
            sku=self.sku,
            amount=discount,
            description=self.describe(quantity),
        )
        return PromotionResult(adjustments=(adjustment,), subtotal=subtotal - discount)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id!r}, sku={self.sku.value}, priority={self.priority})"
