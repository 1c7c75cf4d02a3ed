"""
Money Value Object

Non-negative currency amount held as an integer count of the smallest unit
(1e-18 of the display unit). All arithmetic stays in integers.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from checkout.models.base import CheckoutValidationError

DECIMALS = 18
SMALLEST_UNITS_PER_UNIT = 10**DECIMALS

_DECIMAL_PATTERN = re.compile(r"^(?P<whole>[0-9]+)(?:\.(?P<fraction>[0-9]+))?$")


class InvalidAmountError(CheckoutValidationError):
    """Amount string could not be parsed exactly."""

    pass


class NegativeAmountError(CheckoutValidationError):
    """Amount or factor below zero."""

    pass


class NegativeResultError(CheckoutValidationError):
    """Subtraction would drop below zero."""

    def __init__(self, minuend: Money, subtrahend: Money) -> None:
        self.minuend = minuend
        self.subtrahend = subtrahend
        super().__init__(
            f"Subtraction would be negative: {minuend.to_decimal_string()} - "
            f"{subtrahend.to_decimal_string()}"
        )


@dataclass(frozen=True, order=True)
class Money:
    """
    Immutable monetary amount.

    Use the factory classmethods rather than the constructor when the input
    comes from outside; the constructor still enforces the invariants.
    """

    amount: int

    def __post_init__(self) -> None:
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise InvalidAmountError(
                f"Money must be built from an integer smallest-unit count, got {self.amount!r}"
            )
        if self.amount < 0:
            raise NegativeAmountError(f"Money cannot be negative: {self.amount}")

    # =========================================================================
    # Factories
    # =========================================================================

    @classmethod
    def from_smallest_unit(cls, value: int) -> Money:
        return cls(value)

    @classmethod
    def from_decimal_string(cls, value: str) -> Money:
        """
        Parse an exact decimal amount such as "75", "0.1" or "1.000000000000000001".

        Raises:
            NegativeAmountError: If the value is negative
            InvalidAmountError: If the value is malformed or has more than
                18 fractional digits
        """
        if not isinstance(value, str):
            raise InvalidAmountError(f"Amount must be a string, got {type(value).__name__}")

        text = value.strip()
        if text.startswith("-"):
            raise NegativeAmountError(f"Money cannot be negative: {value}")

        match = _DECIMAL_PATTERN.match(text)
        if match is None:
            raise InvalidAmountError(f"Invalid amount: {value!r}")

        fraction = match.group("fraction") or ""
        if len(fraction) > DECIMALS:
            raise InvalidAmountError(
                f"Amount {value!r} has {len(fraction)} fractional digits; at most {DECIMALS} allowed"
            )

        whole = int(match.group("whole"))
        fractional_units = int(fraction.ljust(DECIMALS, "0")) if fraction else 0
        return cls(whole * SMALLEST_UNITS_PER_UNIT + fractional_units)

    @classmethod
    def zero(cls) -> Money:
        return cls(0)

    # =========================================================================
    # Conversion
    # =========================================================================

    def to_smallest_unit(self) -> int:
        return self.amount

    def to_decimal_string(self) -> str:
        """Render with trailing fractional zeros trimmed ("75", "0.1")."""
        whole, fraction = divmod(self.amount, SMALLEST_UNITS_PER_UNIT)
        if fraction == 0:
            return str(whole)
        digits = str(fraction).rjust(DECIMALS, "0").rstrip("0")
        return f"{whole}.{digits}"

    def to_fixed_string(self) -> str:
        """Render with all 18 fractional digits ("75.000000000000000000")."""
        whole, fraction = divmod(self.amount, SMALLEST_UNITS_PER_UNIT)
        return f"{whole}.{str(fraction).rjust(DECIMALS, '0')}"

    # =========================================================================
    # Arithmetic
    # =========================================================================

    def add(self, other: Money) -> Money:
        return Money(self.amount + other.amount)

    def subtract(self, other: Money) -> Money:
        if other.amount > self.amount:
            raise NegativeResultError(self, other)
        return Money(self.amount - other.amount)

    def multiply(self, factor: int) -> Money:
        if isinstance(factor, bool) or not isinstance(factor, int):
            raise TypeError(f"Money can only be multiplied by an integer, got {factor!r}")
        if factor < 0:
            raise NegativeAmountError(f"Multiplier cannot be negative: {factor}")
        return Money(self.amount * factor)

    def compare(self, other: Money) -> int:
        """Return -1, 0 or 1."""
        return (self.amount > other.amount) - (self.amount < other.amount)

    def equals(self, other: Money) -> bool:
        return self.amount == other.amount

    def is_zero(self) -> bool:
        return self.amount == 0

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return self.subtract(other)

    def __mul__(self, factor: int) -> Money:
        return self.multiply(factor)

    __rmul__ = __mul__

    def __str__(self) -> str:
        return self.to_decimal_string()

    def __repr__(self) -> str:
        return f"Money('{self.to_decimal_string()}')"
