"""
Bulk Percent-Off Promotion

Flat percentage off every unit once a minimum quantity is reached. The
percentage is held in basis points so the discount is integer arithmetic.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from checkout.models.money import Money
from checkout.models.sku import SKU
from checkout.promotions.base import Promotion, PromotionConfigError

BASIS_POINTS_DENOMINATOR = 10_000


class BulkPercentPromotion(Promotion):
    """Percent off each unit of one SKU at or above `min_quantity`."""

    def __init__(
        self,
        promo_id: str,
        sku: SKU | str,
        min_quantity: int,
        percent_off: Decimal | str,
        priority: int = 0,
    ) -> None:
        super().__init__(promo_id, sku, priority)
        if isinstance(min_quantity, bool) or not isinstance(min_quantity, int) or min_quantity <= 0:
            raise PromotionConfigError(
                f"min_quantity must be a positive integer, got {min_quantity!r}"
            )

        try:
            percent = Decimal(str(percent_off))
        except InvalidOperation:
            raise PromotionConfigError(f"Invalid percent_off: {percent_off!r}") from None
        if not percent.is_finite() or not Decimal(0) < percent < Decimal(1):
            raise PromotionConfigError(
                f"percent_off must be between 0 and 1 exclusive, got {percent_off}"
            )

        basis_points = int(
            (percent * BASIS_POINTS_DENOMINATOR).quantize(Decimal(1), rounding=ROUND_HALF_UP)
        )
        if not 0 < basis_points < BASIS_POINTS_DENOMINATOR:
            raise PromotionConfigError(
                f"percent_off {percent_off} is finer than one basis point"
            )

        self.min_quantity = min_quantity
        self.percent_off = percent
        self.basis_points = basis_points

    def applies_to(self, sku: SKU, quantity: int) -> bool:
        return sku == self.sku and quantity >= self.min_quantity

    def calculate_discount(self, quantity: int, unit_price: Money) -> Money:
        subtotal = unit_price.multiply(quantity).to_smallest_unit()
        return Money.from_smallest_unit(subtotal * self.basis_points // BASIS_POINTS_DENOMINATOR)

    def describe(self, quantity: int) -> str:
        percent = Decimal(self.basis_points) / 100
        return f"{percent}% off each unit ({quantity} units)"
