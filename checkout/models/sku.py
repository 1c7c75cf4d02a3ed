"""
SKU Catalog

Closed set of scannable item codes.
"""

from enum import Enum
from typing import Any

from checkout.models.base import CheckoutValidationError


class SKU(str, Enum):
    """Catalog item codes. Declaration order is catalog order."""

    APE = "APE"
    PUNK = "PUNK"
    MEEBIT = "MEEBIT"


VALID_SKUS: tuple[SKU, ...] = tuple(SKU)

CATALOG_ORDER: dict[SKU, int] = {sku: index for index, sku in enumerate(SKU)}


class InvalidSKUError(CheckoutValidationError):
    """Item code is not in the catalog."""

    def __init__(self, value: Any) -> None:
        self.value = value
        self.valid_skus = [sku.value for sku in VALID_SKUS]
        super().__init__(
            f"Invalid SKU: {value}. Must be one of: {', '.join(self.valid_skus)}"
        )


def is_valid_sku(value: Any) -> bool:
    """Check a raw code against the catalog without raising."""
    try:
        validate_sku(value)
    except InvalidSKUError:
        return False
    return True


def validate_sku(value: Any) -> SKU:
    """
    Normalize and validate an item code.

    Surrounding whitespace is stripped and the code upper-cased before lookup.

    Raises:
        InvalidSKUError: If the code is not in the catalog
    """
    if isinstance(value, SKU):
        return value
    if not isinstance(value, str):
        raise InvalidSKUError(value)
    try:
        return SKU(value.strip().upper())
    except ValueError:
        raise InvalidSKUError(value) from None
