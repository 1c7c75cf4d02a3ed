"""
Checkout API - FastAPI Dependencies
Dependency injection for API routes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

from fastapi import Depends, HTTPException, Request, status

from checkout.config import Settings, get_settings
from checkout.services.checkout import CheckoutService

if TYPE_CHECKING:
    from checkout.api.app import CheckoutApp


# =============================================================================
# Settings
# =============================================================================

def get_app_settings(request: Request) -> Settings:
    """Settings the running app was built with."""
    checkout_app = getattr(request.app.state, "checkout", None)
    if checkout_app is not None:
        return checkout_app.settings
    return get_settings()


SettingsDep = Annotated[Settings, Depends(get_app_settings)]


# =============================================================================
# Checkout App Access
# =============================================================================

def get_checkout_app(request: Request) -> CheckoutApp:
    """Get the CheckoutApp instance from request state."""
    if not hasattr(request.app.state, "checkout"):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Checkout application not initialized",
        )
    checkout_app: CheckoutApp = request.app.state.checkout
    return checkout_app


def get_checkout_service(request: Request) -> CheckoutService:
    """Get the checkout service."""
    return get_checkout_app(request).service


CheckoutServiceDep = Annotated[CheckoutService, Depends(get_checkout_service)]
