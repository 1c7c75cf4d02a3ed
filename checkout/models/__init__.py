"""
Checkout Models

Value objects and the cart aggregate.
"""

from checkout.models.base import CheckoutError, CheckoutValidationError, EmptyIdentifierError
from checkout.models.cart import Cart, CartItem, CartSnapshot, InvalidQuantityError
from checkout.models.money import (
    InvalidAmountError,
    Money,
    NegativeAmountError,
    NegativeResultError,
)
from checkout.models.pricing import Adjustment, AdjustmentKind, LineItem, PricingBreakdown
from checkout.models.sku import SKU, VALID_SKUS, InvalidSKUError, is_valid_sku, validate_sku

__all__ = [
    "CheckoutError",
    "CheckoutValidationError",
    "EmptyIdentifierError",
    "Cart",
    "CartItem",
    "CartSnapshot",
    "InvalidQuantityError",
    "Money",
    "InvalidAmountError",
    "NegativeAmountError",
    "NegativeResultError",
    "Adjustment",
    "AdjustmentKind",
    "LineItem",
    "PricingBreakdown",
    "SKU",
    "VALID_SKUS",
    "InvalidSKUError",
    "is_valid_sku",
    "validate_sku",
]
