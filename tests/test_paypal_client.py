"""
Tests for the PayPal Orders client.

The PayPal API is stubbed with httpx.MockTransport.
"""

import base64
import json
import time
from urllib.parse import parse_qs

import httpx
import pytest

from store_sync.core.config import Settings
from store_sync.models.cart import CartLineItem, Money, ShippingAddress, Totals
from store_sync.services.paypal import (
    AuthenticationError,
    PayPalClient,
    PayPalClientError,
    PayPalOrder,
    build_purchase_unit,
)

BASE_URL = "https://api-m.sandbox.paypal.com"


def _usd(value):
    return Money(currency_code="USD", value=value)


TOTALS = Totals(subtotal=_usd("20.00"), shipping=_usd("5.99"), tax=_usd("1.60"), total=_usd("27.59"))
ITEMS = [
    CartLineItem(
        variant_id="V1",
        quantity=2,
        name="Basic Tee",
        unit_amount=_usd("10.00"),
        item_total=_usd("20.00"),
    )
]


class FakePayPal:
    """Records requests and answers like the PayPal sandbox."""

    def __init__(self, responses=None, token_status=200):
        self.requests = []
        self.responses = responses or {}
        self.token_status = token_status

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/v1/oauth2/token":
            if self.token_status != 200:
                return httpx.Response(self.token_status, json={"error": "invalid_client"})
            return httpx.Response(200, json={"access_token": "A21AAtoken", "expires_in": 32400})
        key = (request.method, request.url.path)
        status, body = self.responses.get(key, (404, {"name": "RESOURCE_NOT_FOUND"}))
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    def api_requests(self):
        return [r for r in self.requests if r.url.path != "/v1/oauth2/token"]

    def token_requests(self):
        return [r for r in self.requests if r.url.path == "/v1/oauth2/token"]


def _client(fake, client_id="client-id", client_secret="client-secret"):
    return PayPalClient(
        base_url=BASE_URL,
        client_id=client_id,
        client_secret=client_secret,
        transport=httpx.MockTransport(fake),
    )


class TestAccessToken:
    """Test client-credential exchange and token caching."""

    @pytest.mark.asyncio
    async def test_exchanges_client_credentials(self):
        fake = FakePayPal()
        client = _client(fake)

        token = await client.get_access_token()

        assert token == "A21AAtoken"
        request = fake.token_requests()[0]
        assert request.method == "POST"
        assert parse_qs(request.content.decode()) == {"grant_type": ["client_credentials"]}
        expected = base64.b64encode(b"client-id:client-secret").decode()
        assert request.headers["Authorization"] == f"Basic {expected}"

    @pytest.mark.asyncio
    async def test_token_is_cached(self):
        fake = FakePayPal()
        client = _client(fake)

        await client.get_access_token()
        await client.get_access_token()

        assert len(fake.token_requests()) == 1

    @pytest.mark.asyncio
    async def test_expiry_is_shortened_by_safety_margin(self):
        client = _client(FakePayPal())

        before = time.monotonic()
        await client.get_access_token()

        assert client._token_expires_at <= time.monotonic() + 32400 - 60
        assert client._token_expires_at >= before + 32400 - 60

    @pytest.mark.asyncio
    async def test_expired_token_is_refreshed(self):
        fake = FakePayPal()
        client = _client(fake)

        await client.get_access_token()
        client._token_expires_at = 0.0
        await client.get_access_token()

        assert len(fake.token_requests()) == 2

    @pytest.mark.asyncio
    async def test_missing_credentials(self):
        fake = FakePayPal()
        client = _client(fake, client_id=None, client_secret=None)

        with pytest.raises(AuthenticationError):
            await client.get_access_token()
        assert fake.requests == []

    @pytest.mark.asyncio
    async def test_rejected_credentials(self):
        client = _client(FakePayPal(token_status=401))

        with pytest.raises(AuthenticationError) as exc_info:
            await client.get_access_token()
        assert exc_info.value.status_code == 401


class TestOrders:
    """Test order creation, amount patching and capture."""

    @pytest.mark.asyncio
    async def test_create_order(self):
        fake = FakePayPal({
            ("POST", "/v2/orders"): (200, {"id": "ORDER123", "status": "PAYER_ACTION_REQUIRED"}),
        })
        client = _client(fake)
        address = ShippingAddress(
            address_line_1="2211 N First Street",
            admin_area_2="San Jose",
            admin_area_1="CA",
            postal_code="95131",
        )

        order = await client.create_order(ITEMS, TOTALS, address)

        assert order == PayPalOrder(id="ORDER123", status="PAYER_ACTION_REQUIRED")
        request = fake.api_requests()[0]
        assert request.headers["Authorization"] == "Bearer A21AAtoken"
        body = json.loads(request.content)
        assert body["intent"] == "CAPTURE"
        assert body["payment_source"] == {"paypal": {}}
        unit = body["purchase_units"][0]
        assert unit["reference_id"] == "default"
        assert unit["amount"] == {
            "currency_code": "USD",
            "value": "27.59",
            "breakdown": {
                "item_total": {"currency_code": "USD", "value": "20.00"},
                "shipping": {"currency_code": "USD", "value": "5.99"},
                "tax_total": {"currency_code": "USD", "value": "1.60"},
            },
        }
        assert unit["items"] == [{
            "name": "Basic Tee",
            "unit_amount": {"currency_code": "USD", "value": "10.00"},
            "quantity": "2",
            "sku": "V1",
        }]
        assert unit["shipping"]["address"]["country_code"] == "US"
        assert unit["shipping"]["address"]["admin_area_2"] == "San Jose"

    def test_purchase_unit_without_shipping_address(self):
        unit = build_purchase_unit(ITEMS, TOTALS, None)
        assert "shipping" not in unit

    def test_purchase_unit_keeps_country_code(self):
        unit = build_purchase_unit(ITEMS, TOTALS, ShippingAddress(country_code="CA"))
        assert unit["shipping"]["address"]["country_code"] == "CA"

    @pytest.mark.asyncio
    async def test_patch_order(self):
        fake = FakePayPal({("PATCH", "/v2/orders/ORDER123"): (204, None)})
        client = _client(fake)

        result = await client.patch_order("ORDER123", TOTALS)

        assert result is None
        body = json.loads(fake.api_requests()[0].content)
        assert body == [{
            "op": "replace",
            "path": "/purchase_units/@reference_id=='default'/amount",
            "value": {
                "currency_code": "USD",
                "value": "27.59",
                "breakdown": {
                    "item_total": {"currency_code": "USD", "value": "20.00"},
                    "shipping": {"currency_code": "USD", "value": "5.99"},
                    "tax_total": {"currency_code": "USD", "value": "1.60"},
                },
            },
        }]

    @pytest.mark.asyncio
    async def test_capture_order(self):
        fake = FakePayPal({
            ("POST", "/v2/orders/ORDER123/capture"): (201, {"id": "ORDER123", "status": "COMPLETED"}),
        })
        client = _client(fake)

        capture = await client.capture_order("ORDER123")

        assert capture.id == "ORDER123"
        assert capture.status == "COMPLETED"

    @pytest.mark.asyncio
    async def test_provider_error_is_raised(self):
        fake = FakePayPal({
            ("POST", "/v2/orders/ORDER123/capture"): (422, {"name": "UNPROCESSABLE_ENTITY"}),
        })
        client = _client(fake)

        with pytest.raises(PayPalClientError) as exc_info:
            await client.capture_order("ORDER123")

        assert exc_info.value.status_code == 422
        assert "UNPROCESSABLE_ENTITY" in str(exc_info.value)
        assert len(fake.api_requests()) == 1

    @pytest.mark.asyncio
    async def test_transport_error_is_raised(self):
        def handler(request):
            if request.url.path == "/v1/oauth2/token":
                return httpx.Response(200, json={"access_token": "tok", "expires_in": 3600})
            raise httpx.ConnectError("connection refused", request=request)

        client = PayPalClient(BASE_URL, "id", "secret", transport=httpx.MockTransport(handler))

        with pytest.raises(PayPalClientError) as exc_info:
            await client.patch_order("ORDER123", TOTALS)
        assert "connection refused" in str(exc_info.value)


class TestFromSettings:
    """Test environment selection."""

    def test_sandbox(self):
        client = PayPalClient.from_settings(Settings(paypal_environment="SANDBOX"))
        assert client.base_url == "https://api-m.sandbox.paypal.com"

    def test_production(self):
        client = PayPalClient.from_settings(Settings(paypal_environment="PRODUCTION"))
        assert client.base_url == "https://api-m.paypal.com"
