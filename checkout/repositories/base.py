"""
Base Repository

Abstract cart repository with the compare-and-swap save contract that the
checkout service relies on for optimistic concurrency.
"""

from abc import ABC, abstractmethod

import structlog

from checkout.models.base import CheckoutError
from checkout.models.cart import Cart


class CartNotFoundError(CheckoutError, LookupError):
    """No cart is stored under the id."""

    def __init__(self, cart_id: str) -> None:
        self.cart_id = cart_id
        super().__init__(f"Cart not found: {cart_id}")


class CartVersionConflictError(CheckoutError):
    """Stored cart version differs from the version the writer read."""

    def __init__(self, cart_id: str, expected_version: int, actual_version: int) -> None:
        self.cart_id = cart_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Cart version conflict: expected version {expected_version}, "
            f"but cart is at version {actual_version}"
        )


class CartRepository(ABC):
    """
    Abstract cart repository.

    Implementations must hand out independent copies: mutating a Cart returned
    by get() or create() never changes stored state until save() succeeds.
    """

    def __init__(self) -> None:
        self.logger = structlog.get_logger(self.__class__.__name__)

    @abstractmethod
    async def create(self) -> Cart:
        """
        Create and persist an empty cart.

        Returns:
            The new cart at the configured start version
        """
        pass

    @abstractmethod
    async def get(self, cart_id: str) -> Cart | None:
        """
        Load a cart.

        Args:
            cart_id: Cart identifier

        Returns:
            An independent copy of the stored cart, or None if absent
        """
        pass

    @abstractmethod
    async def save(self, cart: Cart, expected_version: int) -> None:
        """
        Persist a cart if the stored version still equals expected_version.

        Args:
            cart: Cart carrying the new state and version
            expected_version: Version the caller read before mutating

        Raises:
            CartNotFoundError: If no cart is stored under cart.id
            CartVersionConflictError: If the stored version differs; nothing
                is written
        """
        pass
