"""
Checkout Repositories

Cart storage behind a compare-and-swap contract.
"""

from checkout.repositories.base import (
    CartNotFoundError,
    CartRepository,
    CartVersionConflictError,
)
from checkout.repositories.cart_repository import InMemoryCartRepository, sequential_ids

__all__ = [
    "CartRepository",
    "CartNotFoundError",
    "CartVersionConflictError",
    "InMemoryCartRepository",
    "sequential_ids",
]
