"""Merchant cart API routes called by PayPal agentic checkout"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ..deps import get_cart_service
from ..models.cart import Cart, CartRequest, CheckoutResponse
from ..security.paypal_auth import verify_paypal_token
from ..services.cart_service import (
    CartCompletedError,
    CartNotFoundError,
    CartService,
    EmptyCartError,
)
from ..services.paypal import PayPalClientError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/paypal/v1", tags=["Merchant Cart"])


@router.post(
    "/merchant-cart",
    response_model=Cart,
    status_code=status.HTTP_201_CREATED,
)
async def create_cart(
    request: CartRequest,
    response: Response,
    service: CartService = Depends(get_cart_service),
    token: Optional[dict[str, Any]] = Depends(verify_paypal_token),
):
    """
    Create a cart and its backing PayPal order.

    Returns 201 for a clean cart and 200 when the cart was created
    with validation issues.
    """
    try:
        cart = await service.create_cart(request)
    except EmptyCartError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PayPalClientError as e:
        logger.error(f"[POST /merchant-cart] {e}")
        raise HTTPException(status_code=500, detail=f"Failed to create cart: {e}")

    if cart.validation_issues:
        response.status_code = status.HTTP_200_OK
    return cart


@router.get("/merchant-cart/{cart_id}", response_model=Cart)
async def get_cart(
    cart_id: str,
    service: CartService = Depends(get_cart_service),
    token: Optional[dict[str, Any]] = Depends(verify_paypal_token),
):
    """Get cart by ID"""
    try:
        return service.get_cart(cart_id)
    except CartNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/merchant-cart/{cart_id}", response_model=Cart)
async def update_cart(
    cart_id: str,
    request: CartRequest,
    service: CartService = Depends(get_cart_service),
    token: Optional[dict[str, Any]] = Depends(verify_paypal_token),
):
    """Replace cart items and sync the new totals to PayPal"""
    try:
        return await service.update_cart(cart_id, request)
    except CartNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (CartCompletedError, EmptyCartError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PayPalClientError as e:
        logger.error(f"[PUT /merchant-cart/{cart_id}] {e}")
        raise HTTPException(status_code=500, detail=f"Failed to update cart: {e}")


@router.post("/merchant-cart/{cart_id}/checkout", response_model=CheckoutResponse)
async def checkout(
    cart_id: str,
    service: CartService = Depends(get_cart_service),
    token: Optional[dict[str, Any]] = Depends(verify_paypal_token),
):
    """
    Complete checkout by capturing the PayPal order.

    A cart that is not yet valid comes back unchanged with an
    `error` field rather than an HTTP error.
    """
    try:
        cart, error = await service.checkout(cart_id)
    except CartNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except CartCompletedError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PayPalClientError as e:
        logger.error(f"[POST /merchant-cart/{cart_id}/checkout] {e}")
        raise HTTPException(status_code=500, detail=f"Checkout failed: {e}")

    return CheckoutResponse(**cart.model_dump(), error=error)
