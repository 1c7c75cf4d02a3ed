"""
Checkout Services

Pricing engine, idempotency store, price providers and the checkout
orchestrator.
"""

from checkout.services.checkout import CheckoutService
from checkout.services.idempotency import (
    IdempotencyCheck,
    IdempotencyKeyConflictError,
    IdempotencyRecord,
    IdempotencyStore,
)
from checkout.services.price_provider import DEFAULT_PRICES, PriceProvider, StaticPriceProvider
from checkout.services.pricing_engine import PromotionsEngine

__all__ = [
    "CheckoutService",
    "IdempotencyCheck",
    "IdempotencyKeyConflictError",
    "IdempotencyRecord",
    "IdempotencyStore",
    "DEFAULT_PRICES",
    "PriceProvider",
    "StaticPriceProvider",
    "PromotionsEngine",
]
