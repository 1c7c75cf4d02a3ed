"""
Tests for the Cart aggregate.

Tests cover:
- Construction and identifier validation
- add_item versioning and accumulation
- Rejected mutations leaving state untouched
- Snapshots and reconstruction
"""

from datetime import UTC, datetime, timedelta

import pytest

from checkout.models.base import EmptyIdentifierError
from checkout.models.cart import Cart, CartItem, CartSnapshot, InvalidQuantityError
from checkout.models.sku import SKU, InvalidSKUError


class TestCartConstruction:
    """Tests for Cart creation."""

    def test_defaults(self):
        cart = Cart("cart-1")
        assert cart.id == "cart-1"
        assert cart.version == 1
        assert cart.is_empty()
        assert cart.items == []

    def test_custom_version(self):
        assert Cart("cart-1", version=7).version == 7

    @pytest.mark.parametrize("cart_id", ["", "   ", "\t\n"])
    def test_blank_id_rejected(self, cart_id):
        with pytest.raises(EmptyIdentifierError):
            Cart(cart_id)


class TestAddItem:
    """Tests for Cart.add_item."""

    def test_version_increments_once_per_add(self):
        cart = Cart("cart-1", version=3)
        scans = [(SKU.APE, 1), (SKU.PUNK, 2), ("meebit", 1), (SKU.APE, 4)]

        for sku, quantity in scans:
            cart.add_item(sku, quantity)

        assert cart.version == 3 + len(scans)

    def test_quantities_accumulate(self):
        cart = Cart("cart-1")
        cart.add_item(SKU.APE)
        cart.add_item(SKU.APE, 2)
        cart.add_item(SKU.PUNK)

        assert cart.get_item_quantity(SKU.APE) == 3
        assert cart.get_item_quantity("punk") == 1
        assert cart.get_item_quantity(SKU.MEEBIT) == 0
        assert cart.total_item_count() == 4

    def test_items_in_catalog_order(self):
        cart = Cart("cart-1")
        cart.add_item(SKU.MEEBIT)
        cart.add_item(SKU.APE)

        assert [item.sku for item in cart.items] == [SKU.APE, SKU.MEEBIT]

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, "2", True, None])
    def test_invalid_quantity_leaves_cart_unchanged(self, quantity):
        cart = Cart("cart-1")
        cart.add_item(SKU.APE)

        with pytest.raises(InvalidQuantityError):
            cart.add_item(SKU.PUNK, quantity)

        assert cart.version == 2
        assert cart.items == [CartItem(SKU.APE, 1)]

    def test_unknown_sku_leaves_cart_unchanged(self):
        cart = Cart("cart-1")
        cart.add_item(SKU.APE)

        with pytest.raises(InvalidSKUError):
            cart.add_item("DOGE", 1)

        assert cart.version == 2
        assert cart.items == [CartItem(SKU.APE, 1)]

    def test_quantity_checked_before_sku(self):
        cart = Cart("cart-1")
        with pytest.raises(InvalidQuantityError):
            cart.add_item("DOGE", 0)

    def test_items_are_copies(self):
        cart = Cart("cart-1")
        cart.add_item(SKU.APE)

        items = cart.items
        items.clear()

        assert cart.get_item_quantity(SKU.APE) == 1


class TestSnapshots:
    """Tests for snapshot() and from_snapshot()."""

    def test_snapshot_contents(self):
        cart = Cart("cart-1")
        cart.add_item(SKU.PUNK, 2)
        cart.add_item(SKU.APE)

        snapshot = cart.snapshot()

        assert snapshot.cart_id == "cart-1"
        assert snapshot.version == 3
        assert snapshot.items == (CartItem(SKU.APE, 1), CartItem(SKU.PUNK, 2))
        assert snapshot.skus == frozenset({SKU.APE, SKU.PUNK})

    def test_repeated_snapshots_equal(self):
        cart = Cart("cart-1")
        cart.add_item(SKU.APE)

        first = cart.snapshot()
        second = cart.snapshot()

        assert first == second

    def test_equality_ignores_capture_time(self):
        items = (CartItem(SKU.APE, 1),)
        now = datetime.now(UTC)
        earlier = CartSnapshot("cart-1", 2, items, captured_at=now - timedelta(minutes=5))
        later = CartSnapshot("cart-1", 2, items, captured_at=now)

        assert earlier == later

    def test_snapshot_not_affected_by_later_mutation(self):
        cart = Cart("cart-1")
        cart.add_item(SKU.APE)
        snapshot = cart.snapshot()

        cart.add_item(SKU.APE, 5)

        assert snapshot.version == 2
        assert snapshot.items == (CartItem(SKU.APE, 1),)

    def test_snapshot_is_immutable(self):
        snapshot = Cart("cart-1").snapshot()
        with pytest.raises(AttributeError):
            snapshot.version = 10  # type: ignore[misc]

    def test_from_snapshot_round_trip(self):
        cart = Cart("cart-1", version=4)
        cart.add_item(SKU.MEEBIT, 3)

        restored = Cart.from_snapshot(cart.snapshot())

        assert restored.id == "cart-1"
        assert restored.version == 5
        assert restored.get_item_quantity(SKU.MEEBIT) == 3

    def test_from_snapshot_reaggregates_duplicate_rows(self):
        snapshot = CartSnapshot(
            "cart-1",
            5,
            (CartItem(SKU.APE, 1), CartItem(SKU.PUNK, 1), CartItem(SKU.APE, 2)),
        )

        restored = Cart.from_snapshot(snapshot)
        restored.add_item(SKU.APE, 1)

        assert restored.get_item_quantity(SKU.APE) == 4
        assert restored.version == 6

    def test_to_dict(self):
        cart = Cart("cart-1")
        cart.add_item(SKU.APE, 2)

        assert cart.snapshot().to_dict() == {
            "id": "cart-1",
            "version": 2,
            "items": [{"sku": "APE", "quantity": 2}],
        }


class TestCartItem:
    """Tests for CartItem."""

    def test_normalizes_sku(self):
        assert CartItem("ape", 1).sku is SKU.APE

    def test_rejects_zero_quantity(self):
        with pytest.raises(InvalidQuantityError):
            CartItem(SKU.APE, 0)
