"""
Promotion Configuration

Declarative promotion definitions validated with Pydantic and turned into
Promotion instances by build_promotions().
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from checkout.models.sku import SKU
from checkout.promotions.base import Promotion, PromotionConfigError
from checkout.promotions.bulk_discount import BulkPercentPromotion
from checkout.promotions.n_for_m import NForMPromotion


class PromotionConfigBase(BaseModel):
    """Fields shared by every promotion kind."""

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    id: str = Field(min_length=1, description="Unique promotion id")
    sku: SKU
    priority: int = Field(default=0, description="Higher is tried first")


class NForMConfig(PromotionConfigBase):
    kind: Literal["n_for_m"] = "n_for_m"
    n: int = Field(gt=0, description="Units in a group")
    m: int = Field(gt=0, description="Units charged per group")

    @model_validator(mode="after")
    def check_m_below_n(self) -> NForMConfig:
        if self.m >= self.n:
            raise ValueError(f"m must be less than n, got n={self.n} m={self.m}")
        return self


class BulkPercentConfig(PromotionConfigBase):
    kind: Literal["bulk_percent"] = "bulk_percent"
    min_quantity: int = Field(gt=0, description="Quantity at which the discount starts")
    percent_off: Decimal = Field(gt=0, lt=1, description="Fraction off, e.g. 0.2")


PromotionConfig = Annotated[Union[NForMConfig, BulkPercentConfig], Field(discriminator="kind")]

_config_list_adapter: TypeAdapter[list[PromotionConfig]] = TypeAdapter(list[PromotionConfig])


DEFAULT_PROMOTIONS: tuple[PromotionConfig, ...] = (
    NForMConfig(id="APE_2_FOR_1", sku=SKU.APE, n=2, m=1, priority=1),
    BulkPercentConfig(
        id="PUNK_BULK_20_OFF",
        sku=SKU.PUNK,
        min_quantity=3,
        percent_off=Decimal("0.2"),
        priority=1,
    ),
)


def create_promotion(config: PromotionConfig) -> Promotion:
    """Build one promotion from its config."""
    if isinstance(config, NForMConfig):
        return NForMPromotion(
            promo_id=config.id,
            sku=config.sku,
            n=config.n,
            m=config.m,
            priority=config.priority,
        )
    if isinstance(config, BulkPercentConfig):
        return BulkPercentPromotion(
            promo_id=config.id,
            sku=config.sku,
            min_quantity=config.min_quantity,
            percent_off=config.percent_off,
            priority=config.priority,
        )
    raise PromotionConfigError(f"Unsupported promotion config: {type(config).__name__}")


def parse_promotion_configs(raw: Iterable[Mapping[str, Any]]) -> list[PromotionConfig]:
    """Validate raw mappings (e.g. loaded from JSON) into typed configs."""
    return _config_list_adapter.validate_python(list(raw))


def build_promotions(
    configs: Iterable[PromotionConfig | Mapping[str, Any]] = DEFAULT_PROMOTIONS,
) -> list[Promotion]:
    """
    Build promotions from configs or raw mappings.

    Raises:
        PromotionConfigError: If two configs share an id or a rule is invalid
        pydantic.ValidationError: If a raw mapping is malformed
    """
    typed: list[PromotionConfig] = []
    for config in configs:
        if isinstance(config, (NForMConfig, BulkPercentConfig)):
            typed.append(config)
        else:
            typed.extend(parse_promotion_configs([config]))

    seen: set[str] = set()
    for config in typed:
        if config.id in seen:
            raise PromotionConfigError(f"Duplicate promotion id: {config.id}")
        seen.add(config.id)

    return [create_promotion(config) for config in typed]
