"""
Cart lifecycle for the PayPal merchant cart API.

Carts move INCOMPLETE <-> CREATED through updates and end in COMPLETED
after a successful capture. A completed cart is never modified again.
"""

import asyncio
import logging
import uuid
from collections import defaultdict
from datetime import datetime, timezone
from typing import Optional

from ..database.carts import CartStore
from ..models.cart import (
    Cart,
    CartRequest,
    CartStatus,
    PaymentConfirmation,
    PaymentMethod,
    ValidationStatus,
)
from .paypal import PayPalClient
from .pricing import ProductLookup, compute_totals, derive_cart_state, validate_and_price

logger = logging.getLogger(__name__)

UNRESOLVED_ISSUES_MESSAGE = "Cart has unresolved validation issues and cannot be checked out"

# Optional request fields merged over the stored cart on update
MERGEABLE_FIELDS = ("customer", "shipping_address", "checkout_fields")


class CartServiceError(Exception):
    """Base exception for cart lifecycle errors"""
    pass


class CartNotFoundError(CartServiceError):
    def __init__(self, cart_id: str):
        super().__init__(f"Cart {cart_id} not found")
        self.cart_id = cart_id


class CartCompletedError(CartServiceError):
    """Raised when a completed cart would be modified"""
    pass


class EmptyCartError(CartServiceError):
    def __init__(self):
        super().__init__("items array is required and must not be empty")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _short_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8].upper()}"


class CartService:
    """Applies create, update and checkout transitions to stored carts"""

    def __init__(
        self,
        catalog: ProductLookup,
        carts: CartStore,
        gateway: PayPalClient,
        store_url: str,
    ):
        self.catalog = catalog
        self.carts = carts
        self.gateway = gateway
        self.store_url = store_url.rstrip("/")
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def get_cart(self, cart_id: str) -> Cart:
        cart = self.carts.get(cart_id)
        if cart is None:
            raise CartNotFoundError(cart_id)
        return cart

    def _get_mutable_cart(self, cart_id: str, message: str) -> Cart:
        cart = self.get_cart(cart_id)
        if cart.status == CartStatus.COMPLETED:
            raise CartCompletedError(message)
        return cart

    async def create_cart(self, request: CartRequest) -> Cart:
        """
        Price the requested items, open a PayPal order and store a new cart.

        Raises:
            EmptyCartError: If no items were requested
            PayPalClientError: If the order cannot be created
        """
        if not request.items:
            raise EmptyCartError()

        items, issues = validate_and_price(request.items, self.catalog)
        totals = compute_totals(items)
        status, validation_status = derive_cart_state(
            issues, request.shipping_address is not None
        )

        order = await self.gateway.create_order(items, totals, request.shipping_address)

        cart = Cart(
            id=_short_id("CART"),
            status=status,
            validation_status=validation_status,
            validation_issues=issues,
            items=items,
            totals=totals,
            customer=request.customer,
            shipping_address=request.shipping_address,
            checkout_fields=request.checkout_fields or [],
            payment_method=PaymentMethod(type="PAYPAL", token=order.id),
            paypal_order_id=order.id,
            created_at=_now(),
        )
        self.carts.put(cart)

        logger.info(
            f"Cart {cart.id} created: {status.value}/{validation_status.value}, "
            f"{len(items)} items, total {totals.total.value}, order {order.id}"
        )
        return cart

    async def update_cart(self, cart_id: str, request: CartRequest) -> Cart:
        """
        Re-price a cart and sync the new amount to its PayPal order.

        Optional fields left out of the request keep their stored values;
        fields sent as null are cleared.

        Raises:
            CartNotFoundError: If the cart does not exist
            CartCompletedError: If the cart is already completed
            EmptyCartError: If no items were requested
            PayPalClientError: If the order amount cannot be updated
        """
        async with self._locks[cart_id]:
            existing = self._get_mutable_cart(cart_id, "Cannot update a completed cart")

            if not request.items:
                raise EmptyCartError()

            merged = {
                field: getattr(request, field) if request.is_supplied(field) else getattr(existing, field)
                for field in MERGEABLE_FIELDS
            }

            items, issues = validate_and_price(request.items, self.catalog)
            totals = compute_totals(items)
            status, validation_status = derive_cart_state(
                issues, merged["shipping_address"] is not None
            )

            await self.gateway.patch_order(existing.paypal_order_id, totals)

            # Stored record may have been completed while the patch was in flight
            self._get_mutable_cart(cart_id, "Cannot update a completed cart")

            updated = existing.model_copy(
                update={
                    "status": status,
                    "validation_status": validation_status,
                    "validation_issues": issues,
                    "items": items,
                    "totals": totals,
                    **merged,
                    "updated_at": _now(),
                }
            )
            self.carts.put(updated)

            logger.info(
                f"Cart {cart_id} updated: {status.value}/{validation_status.value}, "
                f"total {totals.total.value}"
            )
            return updated

    async def checkout(self, cart_id: str) -> tuple[Cart, Optional[str]]:
        """
        Capture payment for a valid cart and mark it completed.

        A cart with unresolved validation issues is returned unchanged
        together with an explanation instead of raising.

        Returns:
            Tuple of (cart, error message or None)

        Raises:
            CartNotFoundError: If the cart does not exist
            CartCompletedError: If the cart is already completed
            PayPalClientError: If the capture fails
        """
        async with self._locks[cart_id]:
            cart = self._get_mutable_cart(cart_id, "Cart is already completed")

            if cart.validation_status != ValidationStatus.VALID:
                logger.info(f"Checkout refused for cart {cart_id}: {cart.validation_status.value}")
                return cart, UNRESOLVED_ISSUES_MESSAGE

            capture = await self.gateway.capture_order(cart.paypal_order_id)

            order_number = _short_id("ORDER")
            completed = cart.model_copy(
                update={
                    "status": CartStatus.COMPLETED,
                    "validation_status": ValidationStatus.VALID,
                    "validation_issues": [],
                    "payment_confirmation": PaymentConfirmation(
                        merchant_order_number=order_number,
                        paypal_order_id=capture.id,
                        paypal_status=capture.status,
                        order_review_page=f"{self.store_url}/orders/{order_number}",
                    ),
                    "completed_at": _now(),
                }
            )
            self.carts.put(completed)

            logger.info(
                f"Cart {cart_id} completed as {order_number}: "
                f"${completed.totals.total.value} captured ({capture.status})"
            )
            return completed, None
