"""
Checkout - Test Fixtures

Shared pytest fixtures for all test modules.
"""

from __future__ import annotations

import os

import pytest

# =============================================================================
# TEST ENVIRONMENT SETUP
# =============================================================================

os.environ["APP_ENV"] = "testing"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from checkout.config import Settings  # noqa: E402
from checkout.models.money import Money  # noqa: E402
from checkout.models.sku import SKU  # noqa: E402
from checkout.promotions import build_promotions  # noqa: E402
from checkout.repositories import InMemoryCartRepository  # noqa: E402
from checkout.services import (  # noqa: E402
    CheckoutService,
    IdempotencyStore,
    PromotionsEngine,
    StaticPriceProvider,
)


# =============================================================================
# Settings
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Settings for tests, independent of the process environment."""
    return Settings(
        _env_file=None,
        app_env="testing",
        log_level="WARNING",
        log_json=False,
        cart_initial_version=1,
        scan_conflict_retries=1,
        require_idempotency_key=True,
    )


# =============================================================================
# Core Components
# =============================================================================


@pytest.fixture
def repository() -> InMemoryCartRepository:
    return InMemoryCartRepository()


@pytest.fixture
def price_provider() -> StaticPriceProvider:
    """Feed at APE=75, PUNK=60, MEEBIT=4."""
    return StaticPriceProvider()


@pytest.fixture
def engine() -> PromotionsEngine:
    """Engine with APE 2-for-1 and PUNK 20% off at three or more."""
    return PromotionsEngine(build_promotions())


@pytest.fixture
def idempotency_store() -> IdempotencyStore:
    return IdempotencyStore()


@pytest.fixture
def checkout_service(
    repository: InMemoryCartRepository,
    price_provider: StaticPriceProvider,
    engine: PromotionsEngine,
    idempotency_store: IdempotencyStore,
) -> CheckoutService:
    return CheckoutService(
        repository=repository,
        price_provider=price_provider,
        engine=engine,
        idempotency_store=idempotency_store,
    )


# =============================================================================
# Helpers
# =============================================================================


def money(value: str) -> Money:
    """Shorthand for Money.from_decimal_string."""
    return Money.from_decimal_string(value)


@pytest.fixture
def default_prices() -> dict[SKU, Money]:
    return {SKU.APE: money("75"), SKU.PUNK: money("60"), SKU.MEEBIT: money("4")}
