"""
PayPal Orders Client

Wraps the PayPal Orders v2 calls the merchant cart needs:
order creation, amount updates and capture. Handles OAuth
client-credential exchange and access token caching.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from ..core.config import Settings
from ..models.cart import CURRENCY_CODE, CartLineItem, ShippingAddress, Totals

logger = logging.getLogger(__name__)

REFERENCE_ID = "default"
TOKEN_EXPIRY_MARGIN_SECONDS = 60


class PayPalClientError(Exception):
    """Base exception for PayPal client errors"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(PayPalClientError):
    """Authentication-related errors"""
    pass


@dataclass
class PayPalOrder:
    """Order identifier and status returned by PayPal"""
    id: str
    status: Optional[str] = None

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> "PayPalOrder":
        return cls(id=data["id"], status=data.get("status"))


def _money(value: str) -> dict[str, str]:
    return {"currency_code": CURRENCY_CODE, "value": value}


def build_amount(totals: Totals) -> dict[str, Any]:
    """Purchase unit amount with its breakdown"""
    return {
        **_money(totals.total.value),
        "breakdown": {
            "item_total": _money(totals.subtotal.value),
            "shipping": _money(totals.shipping.value),
            "tax_total": _money(totals.tax.value),
        },
    }


def build_purchase_unit(
    items: list[CartLineItem],
    totals: Totals,
    shipping_address: Optional[ShippingAddress] = None,
) -> dict[str, Any]:
    """Translate priced cart contents into a PayPal purchase unit"""
    unit: dict[str, Any] = {
        "reference_id": REFERENCE_ID,
        "amount": build_amount(totals),
        "items": [
            {
                "name": item.name,
                "unit_amount": _money(item.unit_amount.value),
                "quantity": str(item.quantity),
                "sku": item.variant_id,
            }
            for item in items
        ],
    }

    if shipping_address:
        unit["shipping"] = {
            "address": {
                "address_line_1": shipping_address.address_line_1,
                "admin_area_2": shipping_address.admin_area_2,
                "admin_area_1": shipping_address.admin_area_1,
                "postal_code": shipping_address.postal_code,
                "country_code": shipping_address.country_code or "US",
            }
        }

    return unit


class PayPalClient:
    """
    Client for the PayPal Orders v2 API.

    Usage:
        client = PayPalClient.from_settings(settings)
        order = await client.create_order(items, totals, shipping_address)
        await client.patch_order(order.id, new_totals)
        capture = await client.capture_order(order.id)
    """

    def __init__(
        self,
        base_url: str,
        client_id: Optional[str],
        client_secret: Optional[str],
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the PayPal client.

        Args:
            base_url: PayPal API host for the sandbox or live environment
            client_id: REST app client id
            client_secret: REST app secret
            transport: Optional httpx transport, used to stub the API in tests
        """
        self.base_url = base_url.rstrip("/")
        self._client_id = client_id
        self._client_secret = client_secret
        self._http_client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=30.0,
            transport=transport,
        )
        self._access_token: Optional[str] = None
        self._token_expires_at: float = 0.0
        self._token_lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "PayPalClient":
        """Create client from application settings"""
        return cls(
            base_url=settings.paypal_base_url,
            client_id=settings.paypal_client_id,
            client_secret=settings.paypal_client_secret,
        )

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    def _token_valid(self) -> bool:
        return bool(self._access_token) and time.monotonic() < self._token_expires_at

    async def get_access_token(self) -> str:
        """
        Return a cached access token, exchanging client credentials when expired.

        Raises:
            AuthenticationError: If credentials are missing or rejected
        """
        if self._token_valid():
            return self._access_token

        async with self._token_lock:
            # Another caller may have refreshed while we waited
            if self._token_valid():
                return self._access_token

            if not self._client_id or not self._client_secret:
                raise AuthenticationError(
                    "PAYPAL_CLIENT_ID and PAYPAL_CLIENT_SECRET must be set in environment"
                )

            try:
                response = await self._http_client.post(
                    "/v1/oauth2/token",
                    data={"grant_type": "client_credentials"},
                    auth=(self._client_id, self._client_secret),
                )
            except httpx.HTTPError as e:
                logger.error(f"PayPal token request failed: {e}")
                raise AuthenticationError(f"PayPal token request failed: {e}") from e

            if response.status_code != 200:
                logger.error(f"PayPal token request failed: {response.status_code} - {response.text}")
                raise AuthenticationError(
                    f"PayPal authentication failed: {response.status_code} - {response.text}",
                    status_code=response.status_code,
                )

            data = response.json()
            self._access_token = data["access_token"]
            self._token_expires_at = time.monotonic() + (
                int(data.get("expires_in", 0)) - TOKEN_EXPIRY_MARGIN_SECONDS
            )
            logger.info("Refreshed PayPal access token")
            return self._access_token

    async def _request(
        self,
        method: str,
        path: str,
        body: Any = None,
    ) -> Optional[dict[str, Any]]:
        """Make an authenticated request to the Orders API"""
        token = await self.get_access_token()
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

        try:
            response = await self._http_client.request(
                method=method,
                url=path,
                headers=headers,
                json=body,
            )
        except httpx.HTTPError as e:
            logger.error(f"PayPal {method} {path} failed: {e}")
            raise PayPalClientError(f"PayPal request failed: {e}") from e

        if response.status_code >= 400:
            logger.error(f"PayPal {method} {path} failed: {response.status_code} - {response.text}")
            raise PayPalClientError(
                f"PayPal {method} {path} failed: {response.status_code} - {response.text}",
                status_code=response.status_code,
            )

        if not response.content:
            return None
        return response.json()

    async def create_order(
        self,
        items: list[CartLineItem],
        totals: Totals,
        shipping_address: Optional[ShippingAddress] = None,
    ) -> PayPalOrder:
        """Create a capture-intent order for the cart contents"""
        body = {
            "intent": "CAPTURE",
            "purchase_units": [build_purchase_unit(items, totals, shipping_address)],
            "payment_source": {"paypal": {}},
        }
        data = await self._request("POST", "/v2/orders", body=body)
        order = PayPalOrder.from_response(data)
        logger.info(f"Created PayPal order {order.id} ({order.status}) for {totals.total.value}")
        return order

    async def patch_order(self, order_id: str, totals: Totals) -> None:
        """Replace the purchase unit amount to match updated totals"""
        body = [
            {
                "op": "replace",
                "path": f"/purchase_units/@reference_id=='{REFERENCE_ID}'/amount",
                "value": build_amount(totals),
            }
        ]
        await self._request("PATCH", f"/v2/orders/{order_id}", body=body)
        logger.info(f"Patched PayPal order {order_id} amount to {totals.total.value}")

    async def capture_order(self, order_id: str) -> PayPalOrder:
        """Capture payment for an approved order"""
        data = await self._request("POST", f"/v2/orders/{order_id}/capture", body={})
        capture = PayPalOrder.from_response(data)
        logger.info(f"Captured PayPal order {order_id}: {capture.status}")
        return capture
