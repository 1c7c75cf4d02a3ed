"""Tests for the SKU catalog."""

import pytest

from checkout.models.sku import SKU, VALID_SKUS, InvalidSKUError, is_valid_sku, validate_sku


class TestSKU:
    """Tests for SKU enum and validation."""

    def test_catalog(self):
        assert [sku.value for sku in VALID_SKUS] == ["APE", "PUNK", "MEEBIT"]

    def test_sku_is_string_enum(self):
        assert isinstance(SKU.APE, str)
        assert SKU.APE == "APE"

    @pytest.mark.parametrize("raw", ["APE", "ape", "  Punk ", "meebit"])
    def test_normalizes(self, raw):
        assert validate_sku(raw).value == raw.strip().upper()

    def test_enum_passes_through(self):
        assert validate_sku(SKU.PUNK) is SKU.PUNK

    def test_unknown_lists_valid_set(self):
        with pytest.raises(InvalidSKUError) as exc_info:
            validate_sku("DOGE")

        assert str(exc_info.value) == "Invalid SKU: DOGE. Must be one of: APE, PUNK, MEEBIT"
        assert exc_info.value.valid_skus == ["APE", "PUNK", "MEEBIT"]

    @pytest.mark.parametrize("raw", ["", "   ", None, 3])
    def test_non_codes_rejected(self, raw):
        with pytest.raises(InvalidSKUError):
            validate_sku(raw)

    def test_invalid_sku_is_value_error(self):
        with pytest.raises(ValueError):
            validate_sku("DOGE")

    def test_is_valid_sku(self):
        assert is_valid_sku("ape")
        assert not is_valid_sku("DOGE")
