# Merchant services

from .paypal import AuthenticationError, PayPalClient, PayPalClientError, PayPalOrder
from .cart_service import (
    CartCompletedError,
    CartNotFoundError,
    CartService,
    CartServiceError,
    EmptyCartError,
)

__all__ = [
    "AuthenticationError",
    "PayPalClient",
    "PayPalClientError",
    "PayPalOrder",
    "CartCompletedError",
    "CartNotFoundError",
    "CartService",
    "CartServiceError",
    "EmptyCartError",
]
