"""Shared fixtures for the merchant service tests."""

from unittest.mock import AsyncMock

import pytest

from store_sync.database.carts import InMemoryCartStore
from store_sync.database.products import CatalogStore
from store_sync.services.cart_service import CartService
from store_sync.services.paypal import PayPalClient, PayPalOrder

STORE_URL = "https://shop.example.com"
PAYPAL_ORDER_ID = "5O190127TN364715T"

CATALOG_CSV = """id,item_group_id,title,description,link,image_link,price,availability
V1,G1,Basic Tee,Plain cotton tee,https://shop.example.com/p/v1,https://shop.example.com/i/v1.jpg,10.00 USD,in_stock
V2,G2,Sold Out Hoodie,Fleece hoodie,https://shop.example.com/p/v2,https://shop.example.com/i/v2.jpg,30.00 USD,out_of_stock
V3,G3,"Mug, Large","Stoneware mug, 16oz",https://shop.example.com/p/v3,https://shop.example.com/i/v3.jpg,12.50 USD,in_stock
V4,G4,Sticker,Vinyl sticker,https://shop.example.com/p/v4,https://shop.example.com/i/v4.jpg,0.335 USD,preorder

,G5,No Id,Row without an id,,,5.00 USD,in_stock
V6,G6,Broken Price,Unparseable price,,,abc USD,in_stock
"""


@pytest.fixture
def catalog_path(tmp_path):
    path = tmp_path / "product_catalog.csv"
    path.write_text(CATALOG_CSV, encoding="utf-8")
    return str(path)


@pytest.fixture
def catalog(catalog_path):
    store = CatalogStore(catalog_path)
    store.load()
    return store


@pytest.fixture
def gateway():
    """PayPal client stand-in with canned order responses."""
    mock = AsyncMock(spec=PayPalClient)
    mock.create_order.return_value = PayPalOrder(id=PAYPAL_ORDER_ID, status="PAYER_ACTION_REQUIRED")
    mock.patch_order.return_value = None
    mock.capture_order.return_value = PayPalOrder(id=PAYPAL_ORDER_ID, status="COMPLETED")
    return mock


@pytest.fixture
def cart_store():
    return InMemoryCartStore()


@pytest.fixture
def cart_service(catalog, cart_store, gateway):
    return CartService(
        catalog=catalog,
        carts=cart_store,
        gateway=gateway,
        store_url=STORE_URL,
    )


@pytest.fixture
def shipping_address():
    return {
        "address_line_1": "2211 N First Street",
        "admin_area_2": "San Jose",
        "admin_area_1": "CA",
        "postal_code": "95131",
        "country_code": "US",
    }
