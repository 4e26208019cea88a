"""Shared dependencies for the API routes"""

from functools import lru_cache

from .core.config import get_settings
from .database.carts import cart_db
from .database.products import product_db
from .services.cart_service import CartService
from .services.paypal import PayPalClient


@lru_cache()
def get_paypal_client() -> PayPalClient:
    """Process-wide PayPal client, so the access token cache is shared"""
    return PayPalClient.from_settings(get_settings())


@lru_cache()
def get_cart_service() -> CartService:
    """Process-wide cart service, so per-cart locks are shared across requests"""
    return CartService(
        catalog=product_db,
        carts=cart_db,
        gateway=get_paypal_client(),
        store_url=get_settings().store_url,
    )
