"""
In-Memory Cart Repository

Process-local cart storage. Carts are kept as immutable snapshots and
rebuilt on every read, so no caller ever holds the stored state.
"""

from __future__ import annotations

import itertools
from collections.abc import Callable

from checkout.models.cart import DEFAULT_INITIAL_VERSION, Cart, CartSnapshot
from checkout.repositories.base import (
    CartNotFoundError,
    CartRepository,
    CartVersionConflictError,
)


def sequential_ids(prefix: str = "cart") -> Callable[[], str]:
    """Id factory producing cart-1, cart-2, ..."""
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter)}"


class InMemoryCartRepository(CartRepository):
    """Cart repository backed by a dict of snapshots."""

    def __init__(
        self,
        initial_version: int = DEFAULT_INITIAL_VERSION,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        super().__init__()
        self._initial_version = initial_version
        self._id_factory = id_factory or sequential_ids()
        self._carts: dict[str, CartSnapshot] = {}

    async def create(self) -> Cart:
        cart_id = self._id_factory()
        while cart_id in self._carts:
            cart_id = self._id_factory()

        cart = Cart(cart_id, version=self._initial_version)
        self._carts[cart_id] = cart.snapshot()

        self.logger.info("cart_created", cart_id=cart_id, version=cart.version)
        return cart

    async def get(self, cart_id: str) -> Cart | None:
        stored = self._carts.get(cart_id)
        if stored is None:
            return None
        return Cart.from_snapshot(stored)

    async def save(self, cart: Cart, expected_version: int) -> None:
        stored = self._carts.get(cart.id)
        if stored is None:
            raise CartNotFoundError(cart.id)

        if stored.version != expected_version:
            self.logger.warning(
                "cart_version_conflict",
                cart_id=cart.id,
                expected_version=expected_version,
                actual_version=stored.version,
            )
            raise CartVersionConflictError(cart.id, expected_version, stored.version)

        self._carts[cart.id] = cart.snapshot()
        self.logger.debug(
            "cart_saved",
            cart_id=cart.id,
            previous_version=expected_version,
            version=cart.version,
        )

    def clear(self) -> None:
        """Drop every stored cart."""
        self._carts.clear()

    def __len__(self) -> int:
        return len(self._carts)
