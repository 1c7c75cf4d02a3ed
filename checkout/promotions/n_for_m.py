"""
N-for-M Promotion

Buy N units, pay for M. Units beyond the last full group are charged at
full price.
"""

from checkout.models.money import Money
from checkout.models.sku import SKU
from checkout.promotions.base import Promotion, PromotionConfigError


class NForMPromotion(Promotion):
    """Pay for `m` out of every `n` units of one SKU."""

    def __init__(self, promo_id: str, sku: SKU | str, n: int, m: int, priority: int = 0) -> None:
        super().__init__(promo_id, sku, priority)
        for name, value in (("n", n), ("m", m)):
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise PromotionConfigError(f"{name} must be a positive integer, got {value!r}")
        if m >= n:
            raise PromotionConfigError(f"m must be less than n, got n={n} m={m}")
        self.n = n
        self.m = m

    def applies_to(self, sku: SKU, quantity: int) -> bool:
        return sku == self.sku and quantity >= self.n

    def charged_units(self, quantity: int) -> int:
        groups, remainder = divmod(quantity, self.n)
        return groups * self.m + remainder

    def calculate_discount(self, quantity: int, unit_price: Money) -> Money:
        return unit_price.multiply(quantity - self.charged_units(quantity))

    def describe(self, quantity: int) -> str:
        return (
            f"{self.n} for {self.m}: pay {self.charged_units(quantity)} "
            f"when buying {quantity} {self.sku.value}"
        )
