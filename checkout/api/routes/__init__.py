"""
Checkout API Routes
"""

from checkout.api.routes.carts import router as carts_router

__all__ = ["carts_router"]
