"""Cart models for the PayPal merchant cart API"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

CURRENCY_CODE = "USD"


class CartStatus(str, Enum):
    INCOMPLETE = "INCOMPLETE"
    CREATED = "CREATED"
    COMPLETED = "COMPLETED"


class ValidationStatus(str, Enum):
    VALID = "VALID"
    INVALID = "INVALID"
    REQUIRES_ADDITIONAL_INFORMATION = "REQUIRES_ADDITIONAL_INFORMATION"


class IssueType(str, Enum):
    INVALID_DATA = "INVALID_DATA"
    BUSINESS_RULE = "BUSINESS_RULE"


class Money(BaseModel):
    """Currency-tagged decimal string"""
    currency_code: str = CURRENCY_CODE
    value: str


class RequestedItem(BaseModel):
    """Line item as sent by the checkout orchestrator"""
    variant_id: str
    quantity: int = Field(gt=0)
    name: Optional[str] = None


class CartLineItem(BaseModel):
    """Priced item in a cart"""
    variant_id: str
    quantity: int = Field(gt=0)
    name: str
    unit_amount: Money
    item_total: Money


class ResolutionOption(BaseModel):
    action: str
    label: str


class ValidationIssue(BaseModel):
    """Problem found while validating requested items"""
    code: str
    type: IssueType
    message: str
    user_message: Optional[str] = None
    variant_id: Optional[str] = None
    context: dict[str, Any] = {}
    resolution_options: Optional[list[ResolutionOption]] = None


class Totals(BaseModel):
    subtotal: Money
    shipping: Money
    tax: Money
    total: Money


class ShippingAddress(BaseModel):
    """Shipping address in PayPal address notation"""
    address_line_1: Optional[str] = None
    address_line_2: Optional[str] = None
    admin_area_2: Optional[str] = None  # city
    admin_area_1: Optional[str] = None  # state
    postal_code: Optional[str] = None
    country_code: Optional[str] = None


class PaymentMethod(BaseModel):
    type: str = "PAYPAL"
    token: Optional[str] = None


class PaymentConfirmation(BaseModel):
    """Details stamped on a cart once payment is captured"""
    merchant_order_number: str
    paypal_order_id: str
    paypal_status: Optional[str] = None
    order_review_page: str


class Cart(BaseModel):
    """Merchant cart backed by a PayPal order"""
    id: str
    status: CartStatus
    validation_status: ValidationStatus
    validation_issues: list[ValidationIssue] = []
    items: list[CartLineItem] = []
    totals: Totals
    customer: Optional[dict[str, Any]] = None
    shipping_address: Optional[ShippingAddress] = None
    checkout_fields: Optional[list[dict[str, Any]]] = []
    payment_method: PaymentMethod
    paypal_order_id: str
    payment_confirmation: Optional[PaymentConfirmation] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class CartRequest(BaseModel):
    """Body of create and update cart requests"""
    items: list[RequestedItem] = []
    shipping_address: Optional[ShippingAddress] = None
    customer: Optional[dict[str, Any]] = None
    payment_method: Optional[dict[str, Any]] = None
    checkout_fields: Optional[list[dict[str, Any]]] = None

    def is_supplied(self, field_name: str) -> bool:
        """True when the field was present in the request body, even as null"""
        return field_name in self.model_fields_set


class CheckoutResponse(Cart):
    """Cart returned from checkout, with an error when it cannot complete"""
    error: Optional[str] = None
