"""
Pricing and validation for cart items.

Resolves requested items against the catalog, reports inventory problems
and computes cart totals. Only the four output figures are rounded;
intermediate sums keep full precision.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Protocol

from ..models.cart import (
    CURRENCY_CODE,
    CartLineItem,
    CartStatus,
    IssueType,
    Money,
    RequestedItem,
    ResolutionOption,
    Totals,
    ValidationIssue,
    ValidationStatus,
)
from ..models.product import Product

logger = logging.getLogger(__name__)

FREE_SHIPPING_THRESHOLD = Decimal("50.00")
FLAT_SHIPPING_FEE = Decimal("5.99")
TAX_RATE = Decimal("0.08")

INVENTORY_ISSUE = "INVENTORY_ISSUE"

_CENTS = Decimal("0.01")


class ProductLookup(Protocol):
    def get_product(self, variant_id: str) -> Optional[Product]: ...


def round_usd(amount: Decimal) -> str:
    """Round to cents and format as a decimal string"""
    return str(amount.quantize(_CENTS, rounding=ROUND_HALF_UP))


def usd(amount: Decimal) -> Money:
    return Money(currency_code=CURRENCY_CODE, value=round_usd(amount))


def _not_found_issue(item: RequestedItem) -> ValidationIssue:
    return ValidationIssue(
        code=INVENTORY_ISSUE,
        type=IssueType.INVALID_DATA,
        message=f"Product variant {item.variant_id} not found in catalog",
        variant_id=item.variant_id,
        context={"specific_issue": "ITEM_NOT_FOUND"},
    )


def _out_of_stock_issue(item: RequestedItem, product: Product) -> ValidationIssue:
    return ValidationIssue(
        code=INVENTORY_ISSUE,
        type=IssueType.BUSINESS_RULE,
        message=f"{product.title} is currently out of stock",
        user_message=f"{product.title} is out of stock. Would you like to try a similar item?",
        variant_id=item.variant_id,
        context={
            "specific_issue": "ITEM_OUT_OF_STOCK",
            "available_quantity": 0,
            "requested_quantity": item.quantity,
        },
        resolution_options=[ResolutionOption(action="REMOVE_ITEM", label="Remove from cart")],
    )


def validate_and_price(
    items: Iterable[RequestedItem],
    catalog: ProductLookup,
) -> tuple[list[CartLineItem], list[ValidationIssue]]:
    """
    Resolve requested items against the catalog, in input order.

    Unknown variants are reported and left out of the priced items.
    Out-of-stock variants are reported but still priced, so the
    orchestrator can offer to remove them. Unit prices are rounded to
    cents so line totals agree with what PayPal recomputes from them.

    Returns:
        Tuple of (priced line items, validation issues)
    """
    line_items: list[CartLineItem] = []
    issues: list[ValidationIssue] = []

    for item in items:
        product = catalog.get_product(item.variant_id)

        if product is None:
            logger.info(f"Requested variant {item.variant_id} not in catalog")
            issues.append(_not_found_issue(item))
            continue

        if product.is_out_of_stock:
            logger.info(f"Requested variant {item.variant_id} is out of stock")
            issues.append(_out_of_stock_issue(item, product))

        unit_price = Decimal(product.price).quantize(_CENTS, rounding=ROUND_HALF_UP)
        line_items.append(
            CartLineItem(
                variant_id=item.variant_id,
                quantity=item.quantity,
                name=item.name or product.title,
                unit_amount=usd(unit_price),
                item_total=usd(unit_price * item.quantity),
            )
        )

    return line_items, issues


def compute_totals(line_items: Iterable[CartLineItem]) -> Totals:
    """Compute subtotal, shipping, tax and total for priced items"""
    subtotal = sum(
        (Decimal(item.unit_amount.value) * item.quantity for item in line_items),
        Decimal("0"),
    )
    shipping = Decimal("0") if subtotal >= FREE_SHIPPING_THRESHOLD else FLAT_SHIPPING_FEE
    tax = subtotal * TAX_RATE
    total = subtotal + shipping + tax

    return Totals(
        subtotal=usd(subtotal),
        shipping=usd(shipping),
        tax=usd(tax),
        total=usd(total),
    )


def derive_cart_state(
    issues: list[ValidationIssue],
    has_shipping_address: bool,
) -> tuple[CartStatus, ValidationStatus]:
    """
    Map validation results onto cart status.

    Business-rule issues make a cart INVALID; data issues or a missing
    shipping address only ask for more information.
    """
    if issues:
        if any(issue.type == IssueType.BUSINESS_RULE for issue in issues):
            return CartStatus.INCOMPLETE, ValidationStatus.INVALID
        return CartStatus.INCOMPLETE, ValidationStatus.REQUIRES_ADDITIONAL_INFORMATION

    if not has_shipping_address:
        return CartStatus.INCOMPLETE, ValidationStatus.REQUIRES_ADDITIONAL_INFORMATION

    return CartStatus.CREATED, ValidationStatus.VALID
