"""
Cart API Routes

Endpoints for creating carts, scanning items and reading priced totals.
Money is rendered as a decimal string with 18 fractional digits.
"""

from contextlib import AbstractAsyncContextManager, nullcontext
from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Header, HTTPException, Request, status
from pydantic import BaseModel, Field

from checkout.api.dependencies import CheckoutServiceDep, SettingsDep, get_checkout_app
from checkout.repositories.base import CartVersionConflictError
from checkout.services.checkout import CheckoutService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/carts", tags=["Carts"])


# ============================================================================
# Request/Response Models
# ============================================================================

class CreateCartResponse(BaseModel):
    cart_id: str


class ScanItemRequest(BaseModel):
    """Request to scan an item into a cart."""
    sku: str = Field(min_length=1, max_length=32)
    quantity: int = Field(default=1, ge=1)


class ScanItemResponse(BaseModel):
    cart_id: str
    version: int


class LineItemResponse(BaseModel):
    sku: str
    quantity: int
    unit_price: str
    subtotal_before_promotion: str
    subtotal_after_promotion: str


class AdjustmentResponse(BaseModel):
    promo_id: str
    sku: str
    kind: str
    amount: str
    description: str


class CartTotalResponse(BaseModel):
    """Priced cart."""
    cart_id: str
    version: int
    line_items: list[LineItemResponse]
    adjustments: list[AdjustmentResponse]
    subtotal: str
    total_discount: str
    total: str
    price_timestamp: str
    metadata: dict[str, Any] = Field(default_factory=dict)


# ============================================================================
# Endpoints
# ============================================================================

@router.post("", response_model=CreateCartResponse, status_code=status.HTTP_201_CREATED)
async def create_cart(svc: CheckoutServiceDep) -> CreateCartResponse:
    """Create an empty cart."""
    cart_id = await svc.create_cart()
    return CreateCartResponse(cart_id=cart_id)


@router.post(
    "/{cart_id}/items",
    response_model=ScanItemResponse,
    status_code=status.HTTP_201_CREATED,
)
async def scan_item(
    cart_id: str,
    request: ScanItemRequest,
    http_request: Request,
    svc: CheckoutServiceDep,
    settings: SettingsDep,
    idempotency_key: Annotated[str | None, Header(alias="Idempotency-Key")] = None,
) -> ScanItemResponse:
    """
    Scan an item into a cart.

    Requests sharing an Idempotency-Key run one at a time, so a concurrent
    duplicate waits and then replays the first request's version. A version
    conflict is retried with a fresh read up to the configured number of
    times before it is returned to the client.
    """
    if idempotency_key is not None and not idempotency_key.strip():
        idempotency_key = None
    if idempotency_key is None and settings.require_idempotency_key:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Idempotency-Key header is required",
        )

    key_lock: AbstractAsyncContextManager[Any] = nullcontext()
    if idempotency_key is not None:
        key_lock = get_checkout_app(http_request).scan_lock(idempotency_key)

    async with key_lock:
        version = await _scan_with_retries(
            svc,
            cart_id,
            request,
            idempotency_key,
            settings.scan_conflict_retries,
        )

    return ScanItemResponse(cart_id=cart_id, version=version)


async def _scan_with_retries(
    svc: CheckoutService,
    cart_id: str,
    request: ScanItemRequest,
    idempotency_key: str | None,
    retries: int,
) -> int:
    attempt = 0
    while True:
        try:
            return await svc.scan(
                cart_id,
                request.sku,
                request.quantity,
                idempotency_key=idempotency_key,
            )
        except CartVersionConflictError as e:
            if attempt >= retries:
                raise
            attempt += 1
            logger.info(
                "scan_retry_after_conflict",
                cart_id=cart_id,
                attempt=attempt,
                expected_version=e.expected_version,
                actual_version=e.actual_version,
            )


@router.get("/{cart_id}/total", response_model=CartTotalResponse)
async def get_cart_total(cart_id: str, svc: CheckoutServiceDep) -> CartTotalResponse:
    """Price a cart with current prices and promotions."""
    breakdown = await svc.get_total(cart_id)
    payload = breakdown.to_dict()
    return CartTotalResponse(
        cart_id=cart_id,
        version=breakdown.metadata.get("cart_version", 0),
        line_items=[LineItemResponse(**line) for line in payload["line_items"]],
        adjustments=[AdjustmentResponse(**adj) for adj in payload["adjustments"]],
        subtotal=payload["subtotal"],
        total_discount=payload["total_discount"],
        total=payload["total"],
        price_timestamp=payload["price_timestamp"],
        metadata=payload["metadata"],
    )
