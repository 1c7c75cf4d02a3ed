"""Tests for checkout.config."""

import pytest
from pydantic import ValidationError

from checkout.config import Settings, get_settings


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("APP_ENV", raising=False)
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        settings = Settings(_env_file=None)

        assert settings.app_env == "development"
        assert settings.cart_initial_version == 1
        assert settings.scan_conflict_retries == 1
        assert settings.require_idempotency_key is True
        assert settings.price_feed_prices == {}

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("SCAN_CONFLICT_RETRIES", "3")
        monkeypatch.setenv("PRICE_FEED_PRICES", '{"ape": "70.25"}')

        settings = Settings(_env_file=None)

        assert settings.scan_conflict_retries == 3
        assert settings.price_feed_prices == {"APE": "70.25"}

    def test_price_override_from_json_string(self):
        settings = Settings(_env_file=None, price_feed_prices='{"PUNK": "61"}')
        assert settings.price_feed_prices == {"PUNK": "61"}

    @pytest.mark.parametrize(
        "overrides",
        [{"DOGE": "1"}, {"APE": "-1"}, {"APE": "1.0000000000000000001"}],
    )
    def test_invalid_price_overrides(self, overrides):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, price_feed_prices=overrides)

    def test_initial_version_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, cart_initial_version=0)

    def test_json_logs_follow_environment(self):
        assert Settings(_env_file=None, app_env="production").json_logs is True
        assert Settings(_env_file=None, app_env="development").json_logs is False
        assert Settings(_env_file=None, app_env="development", log_json=True).json_logs is True

    def test_get_settings_cached(self):
        assert get_settings() is get_settings()
