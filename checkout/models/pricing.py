"""
Pricing Models

Results produced by the promotions engine. All of them are frozen.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from types import MappingProxyType
from typing import Any

from checkout.models.money import Money
from checkout.models.sku import SKU


class AdjustmentKind(str, Enum):
    """Kinds of price adjustment."""

    DISCOUNT = "discount"


@dataclass(frozen=True)
class Adjustment:
    """One discount line attributed to a promotion and a SKU."""

    promo_id: str
    sku: SKU
    amount: Money
    description: str
    kind: AdjustmentKind = AdjustmentKind.DISCOUNT

    def to_dict(self) -> dict[str, Any]:
        return {
            "promo_id": self.promo_id,
            "sku": self.sku.value,
            "kind": self.kind.value,
            "amount": self.amount.to_fixed_string(),
            "description": self.description,
        }


@dataclass(frozen=True)
class LineItem:
    """Priced row for a single SKU."""

    sku: SKU
    quantity: int
    unit_price: Money
    subtotal_before_promotion: Money
    subtotal_after_promotion: Money

    @property
    def discount(self) -> Money:
        return self.subtotal_before_promotion - self.subtotal_after_promotion

    def to_dict(self) -> dict[str, Any]:
        return {
            "sku": self.sku.value,
            "quantity": self.quantity,
            "unit_price": self.unit_price.to_fixed_string(),
            "subtotal_before_promotion": self.subtotal_before_promotion.to_fixed_string(),
            "subtotal_after_promotion": self.subtotal_after_promotion.to_fixed_string(),
        }


@dataclass(frozen=True)
class PricingBreakdown:
    """Priced cart: line items, adjustments and the grand total."""

    line_items: tuple[LineItem, ...]
    adjustments: tuple[Adjustment, ...]
    total: Money
    price_timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def subtotal(self) -> Money:
        total = Money.zero()
        for line in self.line_items:
            total = total + line.subtotal_before_promotion
        return total

    @property
    def total_discount(self) -> Money:
        total = Money.zero()
        for adjustment in self.adjustments:
            total = total + adjustment.amount
        return total

    def to_dict(self) -> dict[str, Any]:
        return {
            "line_items": [line.to_dict() for line in self.line_items],
            "adjustments": [adjustment.to_dict() for adjustment in self.adjustments],
            "subtotal": self.subtotal.to_fixed_string(),
            "total_discount": self.total_discount.to_fixed_string(),
            "total": self.total.to_fixed_string(),
            "price_timestamp": self.price_timestamp.isoformat(),
            "metadata": dict(self.metadata),
        }
