"""Tests for declarative promotion configuration."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from checkout.models.sku import SKU
from checkout.promotions import (
    DEFAULT_PROMOTIONS,
    BulkPercentConfig,
    BulkPercentPromotion,
    NForMConfig,
    NForMPromotion,
    PromotionConfigError,
    build_promotions,
    parse_promotion_configs,
)


class TestDefaultPromotions:
    """Tests for the default rule set."""

    def test_defaults(self):
        promotions = {promo.id: promo for promo in build_promotions()}

        ape = promotions["APE_2_FOR_1"]
        assert isinstance(ape, NForMPromotion)
        assert (ape.sku, ape.n, ape.m, ape.priority) == (SKU.APE, 2, 1, 1)

        punk = promotions["PUNK_BULK_20_OFF"]
        assert isinstance(punk, BulkPercentPromotion)
        assert (punk.sku, punk.min_quantity, punk.basis_points, punk.priority) == (
            SKU.PUNK,
            3,
            2000,
            1,
        )

    def test_default_count(self):
        assert len(DEFAULT_PROMOTIONS) == 2


class TestBuildPromotions:
    """Tests for build_promotions()."""

    def test_from_raw_mappings(self):
        promotions = build_promotions(
            [
                {"kind": "n_for_m", "id": "MEEBIT_3_FOR_2", "sku": "MEEBIT", "n": 3, "m": 2},
                {
                    "kind": "bulk_percent",
                    "id": "APE_BULK",
                    "sku": "APE",
                    "min_quantity": 5,
                    "percent_off": "0.15",
                    "priority": 2,
                },
            ]
        )

        assert [type(p) for p in promotions] == [NForMPromotion, BulkPercentPromotion]
        assert promotions[1].percent_off == Decimal("0.15")

    def test_duplicate_ids_rejected(self):
        configs = [
            NForMConfig(id="SAME", sku=SKU.APE, n=2, m=1),
            BulkPercentConfig(id="SAME", sku=SKU.PUNK, min_quantity=3, percent_off=Decimal("0.2")),
        ]
        with pytest.raises(PromotionConfigError):
            build_promotions(configs)

    @pytest.mark.parametrize("n,m", [(2, 2), (2, 3)])
    def test_m_not_below_n_rejected_by_schema(self, n, m):
        with pytest.raises(ValidationError, match="m must be less than n"):
            NForMConfig(id="BAD", sku=SKU.APE, n=n, m=m)

    def test_m_not_below_n_rejected_from_mapping(self):
        with pytest.raises(ValidationError):
            build_promotions([{"kind": "n_for_m", "id": "BAD", "sku": "APE", "n": 2, "m": 2}])

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError):
            parse_promotion_configs([{"kind": "bogo", "id": "X", "sku": "APE"}])

    def test_percent_bounds_enforced_by_schema(self):
        with pytest.raises(ValidationError):
            BulkPercentConfig(id="X", sku=SKU.PUNK, min_quantity=1, percent_off=Decimal("1.5"))

    def test_unknown_sku_rejected(self):
        with pytest.raises(ValidationError):
            parse_promotion_configs([{"kind": "n_for_m", "id": "X", "sku": "DOGE", "n": 2, "m": 1}])
