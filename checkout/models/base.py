"""
Base Errors

Root of the checkout exception hierarchy. Every failure the core raises is a
CheckoutError so the HTTP layer can map the whole family in one place.
"""


class CheckoutError(Exception):
    """Base exception for checkout errors."""

    pass


class CheckoutValidationError(CheckoutError, ValueError):
    """Input rejected before any state was touched."""

    pass


class EmptyIdentifierError(CheckoutValidationError):
    """An identifier was empty or whitespace-only."""

    def __init__(self, field_name: str = "id") -> None:
        self.field_name = field_name
        super().__init__(f"{field_name} cannot be empty")
