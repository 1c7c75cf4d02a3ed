"""
Checkout API - FastAPI Application Factory
Main entry point for the checkout API.

This creates and configures the FastAPI application with:
- Cart routes
- Middleware (correlation ID, request logging)
- Error handlers mapping checkout errors to HTTP responses
"""

from __future__ import annotations

import asyncio
import weakref
from collections.abc import AsyncGenerator, Iterable
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from checkout import __version__
from checkout.api.middleware import CorrelationIdMiddleware, RequestLoggingMiddleware
from checkout.api.routes import carts_router
from checkout.config import Settings, get_settings
from checkout.models.base import CheckoutError
from checkout.monitoring import configure_logging
from checkout.promotions import Promotion, build_promotions
from checkout.repositories import (
    CartNotFoundError,
    CartRepository,
    CartVersionConflictError,
    InMemoryCartRepository,
)
from checkout.services import (
    CheckoutService,
    IdempotencyKeyConflictError,
    IdempotencyStore,
    PriceProvider,
    PromotionsEngine,
    StaticPriceProvider,
)
from checkout.services.price_provider import DEFAULT_PRICES

logger = structlog.get_logger(__name__)

API_PREFIX = "/api/v1"


class CheckoutApp:
    """
    Checkout application container.

    Holds references to the components behind the routes for dependency
    injection. Anything not supplied is built from settings.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        repository: CartRepository | None = None,
        price_provider: PriceProvider | None = None,
        promotions: Iterable[Promotion] | None = None,
        idempotency_store: IdempotencyStore | None = None,
    ) -> None:
        self.settings = settings or get_settings()

        self.repository = repository or InMemoryCartRepository(
            initial_version=self.settings.cart_initial_version,
        )
        self.price_provider = price_provider or StaticPriceProvider(
            prices={**DEFAULT_PRICES, **self.settings.price_feed_prices},
            latency_ms=self.settings.price_feed_latency_ms,
        )
        self.engine = PromotionsEngine(build_promotions() if promotions is None else promotions)
        self.idempotency_store = idempotency_store or IdempotencyStore()
        self.service = CheckoutService(
            repository=self.repository,
            price_provider=self.price_provider,
            engine=self.engine,
            idempotency_store=self.idempotency_store,
        )

        self.started_at: datetime | None = None
        self._scan_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def scan_lock(self, idempotency_key: str) -> asyncio.Lock:
        """
        Lock serializing scans that share an idempotency key.

        Locks are dropped once no request holds a reference, so the registry
        only tracks keys with scans in flight.
        """
        lock = self._scan_locks.get(idempotency_key)
        if lock is None:
            lock = asyncio.Lock()
            self._scan_locks[idempotency_key] = lock
        return lock

    def status(self) -> dict[str, Any]:
        return {
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "promotions": [promotion.id for promotion in self.engine.promotions],
            "idempotency": self.idempotency_store.get_stats(),
        }


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    checkout_app: CheckoutApp = app.state.checkout
    checkout_app.started_at = datetime.now(UTC)
    logger.info(
        "checkout_started",
        environment=checkout_app.settings.app_env,
        promotions=[promotion.id for promotion in checkout_app.engine.promotions],
    )
    try:
        yield
    finally:
        logger.info("checkout_stopped")


def _error_response(
    request: Request,
    status_code: int,
    error: str,
    message: str,
    **extra: Any,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "message": message,
            **extra,
            "path": str(request.url.path),
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Map checkout errors to HTTP responses."""

    @app.exception_handler(CartVersionConflictError)
    async def version_conflict_handler(
        request: Request, exc: CartVersionConflictError
    ) -> JSONResponse:
        logger.warning(
            "cart_version_conflict_response",
            path=str(request.url.path),
            cart_id=exc.cart_id,
            expected_version=exc.expected_version,
            actual_version=exc.actual_version,
        )
        return _error_response(
            request,
            409,
            "VERSION_CONFLICT",
            str(exc),
            cart_id=exc.cart_id,
            expected_version=exc.expected_version,
            actual_version=exc.actual_version,
        )

    @app.exception_handler(IdempotencyKeyConflictError)
    async def idempotency_conflict_handler(
        request: Request, exc: IdempotencyKeyConflictError
    ) -> JSONResponse:
        logger.warning(
            "idempotency_key_conflict_response",
            path=str(request.url.path),
            idempotency_key=exc.idempotency_key,
        )
        return _error_response(
            request,
            409,
            "IDEMPOTENCY_KEY_CONFLICT",
            str(exc),
            idempotency_key=exc.idempotency_key,
            expected_fingerprint=exc.expected_fingerprint,
            received_fingerprint=exc.received_fingerprint,
        )

    @app.exception_handler(CartNotFoundError)
    async def not_found_handler(request: Request, exc: CartNotFoundError) -> JSONResponse:
        return _error_response(
            request,
            404,
            "RESOURCE_NOT_FOUND",
            str(exc),
            cart_id=exc.cart_id,
        )

    @app.exception_handler(CheckoutError)
    async def checkout_error_handler(request: Request, exc: CheckoutError) -> JSONResponse:
        logger.warning(
            "checkout_request_rejected",
            path=str(request.url.path),
            error_type=type(exc).__name__,
            error=str(exc),
        )
        return _error_response(request, 400, "INVALID_REQUEST", str(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.detail,
                "status_code": exc.status_code,
                "path": str(request.url.path),
            },
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        # Submitted values are left out of the response
        sanitized_errors = [
            {
                "loc": list(error.get("loc", [])),
                "type": error.get("type", "unknown"),
                "msg": error.get("msg", "Validation failed"),
            }
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=422,
            content={
                "error": "VALIDATION_ERROR",
                "details": sanitized_errors,
                "path": str(request.url.path),
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "unhandled_exception",
            path=str(request.url.path),
            error=str(exc),
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "path": str(request.url.path),
            },
        )


def create_app(
    settings: Settings | None = None,
    checkout_app: CheckoutApp | None = None,
    title: str = "Scan Checkout",
    description: str = "Cart scanning and promotion pricing",
    version: str = __version__,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings override (defaults to environment settings)
        checkout_app: Pre-built component container, e.g. for tests
        title: API title
        description: API description
        version: API version

    Returns:
        Configured FastAPI application
    """
    settings = settings or (checkout_app.settings if checkout_app else get_settings())
    configure_logging(
        level=settings.log_level,
        json_output=settings.json_logs,
        include_timestamps=True,
        include_service_info=True,
        sanitize_logs=True,
    )

    docs_url: str | None = "/docs"
    redoc_url: str | None = "/redoc"
    if settings.is_production:
        docs_url = None
        redoc_url = None

    app = FastAPI(
        title=title,
        description=description,
        version=version,
        docs_url=docs_url,
        redoc_url=redoc_url,
        debug=settings.debug,
        lifespan=lifespan,
        openapi_tags=[
            {"name": "Carts", "description": "Cart scanning and pricing"},
            {"name": "system", "description": "Health"},
        ],
    )
    app.state.checkout = checkout_app or CheckoutApp(settings=settings)

    # Middleware runs in reverse order of registration
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

    register_exception_handlers(app)

    app.include_router(carts_router, prefix=API_PREFIX)

    @app.get("/health", tags=["system"])
    async def health() -> dict[str, Any]:
        checkout: CheckoutApp = app.state.checkout
        return {"status": "healthy", "version": version, **checkout.status()}

    return app


def run_server(
    host: str | None = None,
    port: int | None = None,
    reload: bool = False,
    workers: int = 1,
) -> None:
    """
    Run the checkout server.

    For development use:
        python -m checkout.api.app

    For production use:
        uvicorn checkout.api.app:app --host 0.0.0.0 --port 8000
    """
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "checkout.api.app:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        workers=workers,
        log_level=settings.log_level.lower(),
    )


app = create_app()


if __name__ == "__main__":
    run_server(reload=True)
