"""
Cart Aggregate

A versioned cart is the unit of optimistic concurrency: every successful
mutation bumps its version by exactly one, and repositories compare that
version on save.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from checkout.models.base import CheckoutValidationError, EmptyIdentifierError
from checkout.models.sku import CATALOG_ORDER, SKU, validate_sku

DEFAULT_INITIAL_VERSION = 1


class InvalidQuantityError(CheckoutValidationError):
    """Quantity is not a positive integer."""

    def __init__(self, quantity: Any) -> None:
        self.quantity = quantity
        super().__init__(f"Quantity must be a positive integer, got {quantity!r}")


def validate_quantity(quantity: Any) -> int:
    # bool is an int subclass but never a quantity
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidQuantityError(quantity)
    return quantity


@dataclass(frozen=True)
class CartItem:
    """One (sku, quantity) row."""

    sku: SKU
    quantity: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "sku", validate_sku(self.sku))
        validate_quantity(self.quantity)

    def to_dict(self) -> dict[str, Any]:
        return {"sku": self.sku.value, "quantity": self.quantity}


@dataclass(frozen=True)
class CartSnapshot:
    """
    Point-in-time read projection of a cart.

    Two snapshots of an unchanged cart compare equal; the capture time is
    excluded from equality.
    """

    cart_id: str
    version: int
    items: tuple[CartItem, ...]
    captured_at: datetime = field(default_factory=lambda: datetime.now(UTC), compare=False)

    @property
    def skus(self) -> frozenset[SKU]:
        return frozenset(item.sku for item in self.items)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.cart_id,
            "version": self.version,
            "items": [item.to_dict() for item in self.items],
        }


class Cart:
    """
    Shopping cart with optimistic versioning.

    The item map is private; callers read it through snapshot(), items or
    get_item_quantity() and change it only through add_item().
    """

    def __init__(
        self,
        cart_id: str,
        version: int = DEFAULT_INITIAL_VERSION,
        items: Mapping[SKU, int] | None = None,
    ) -> None:
        if not isinstance(cart_id, str) or not cart_id.strip():
            raise EmptyIdentifierError("cart_id")
        if isinstance(version, bool) or not isinstance(version, int):
            raise TypeError(f"Cart version must be an integer, got {version!r}")

        self._id = cart_id
        self._version = version
        self._items: dict[SKU, int] = {}
        for sku, quantity in (items or {}).items():
            self._accumulate(validate_sku(sku), validate_quantity(quantity))

    @property
    def id(self) -> str:
        return self._id

    @property
    def version(self) -> int:
        return self._version

    @property
    def items(self) -> list[CartItem]:
        """Current rows in catalog order, as fresh values."""
        return [
            CartItem(sku=sku, quantity=quantity)
            for sku, quantity in sorted(self._items.items(), key=lambda kv: CATALOG_ORDER[kv[0]])
        ]

    def add_item(self, sku: Any, quantity: Any = 1) -> None:
        """
        Add units of a SKU and bump the version.

        Both inputs are validated before anything changes, so a rejected call
        leaves version and items untouched.

        Raises:
            InvalidQuantityError: If quantity is not a positive integer
            InvalidSKUError: If sku is not in the catalog
        """
        validated_quantity = validate_quantity(quantity)
        validated_sku = validate_sku(sku)

        self._accumulate(validated_sku, validated_quantity)
        self._version += 1

    def get_item_quantity(self, sku: Any) -> int:
        return self._items.get(validate_sku(sku), 0)

    def is_empty(self) -> bool:
        return not self._items

    def total_item_count(self) -> int:
        return sum(self._items.values())

    def snapshot(self) -> CartSnapshot:
        return CartSnapshot(
            cart_id=self._id,
            version=self._version,
            items=tuple(self.items),
        )

    @classmethod
    def from_snapshot(cls, snapshot: CartSnapshot) -> Cart:
        """Rebuild a cart, summing rows that repeat a SKU."""
        return cls(
            cart_id=snapshot.cart_id,
            version=snapshot.version,
            items=aggregate_items(snapshot.items),
        )

    def _accumulate(self, sku: SKU, quantity: int) -> None:
        self._items[sku] = self._items.get(sku, 0) + quantity

    def __repr__(self) -> str:
        return f"Cart(id={self._id!r}, version={self._version}, items={dict(self._items)!r})"


def aggregate_items(items: Iterable[CartItem]) -> dict[SKU, int]:
    """Sum quantities per SKU."""
    totals: dict[SKU, int] = {}
    for item in items:
        totals[item.sku] = totals.get(item.sku, 0) + item.quantity
    return totals
