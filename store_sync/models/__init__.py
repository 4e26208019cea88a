# Merchant Models

from .product import Availability, Product
from .cart import (
    CURRENCY_CODE,
    Cart,
    CartLineItem,
    CartRequest,
    CartStatus,
    CheckoutResponse,
    IssueType,
    Money,
    PaymentConfirmation,
    PaymentMethod,
    RequestedItem,
    ResolutionOption,
    ShippingAddress,
    Totals,
    ValidationIssue,
    ValidationStatus,
)

__all__ = [
    "Availability",
    "Product",
    "CURRENCY_CODE",
    "Cart",
    "CartLineItem",
    "CartRequest",
    "CartStatus",
    "CheckoutResponse",
    "IssueType",
    "Money",
    "PaymentConfirmation",
    "PaymentMethod",
    "RequestedItem",
    "ResolutionOption",
    "ShippingAddress",
    "Totals",
    "ValidationIssue",
    "ValidationStatus",
]
