"""
Checkout Promotions

Single-SKU discount rules and their declarative configuration.
"""

from checkout.promotions.base import Promotion, PromotionConfigError, PromotionResult
from checkout.promotions.bulk_discount import BulkPercentPromotion
from checkout.promotions.config import (
    DEFAULT_PROMOTIONS,
    BulkPercentConfig,
    NForMConfig,
    PromotionConfig,
    build_promotions,
    create_promotion,
    parse_promotion_configs,
)
from checkout.promotions.n_for_m import NForMPromotion

__all__ = [
    "Promotion",
    "PromotionConfigError",
    "PromotionResult",
    "NForMPromotion",
    "BulkPercentPromotion",
    "PromotionConfig",
    "NForMConfig",
    "BulkPercentConfig",
    "DEFAULT_PROMOTIONS",
    "build_promotions",
    "create_promotion",
    "parse_promotion_configs",
]
