"""
Store Sync Merchant Application

Merchant-side API for PayPal agentic checkout. Republishes the product
feed for PayPal Store Sync and exposes the merchant cart endpoints that
PayPal calls to create, update and check out carts.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .core.config import settings
from .database.products import product_db
from .deps import get_paypal_client
from .routes import cart_router, catalog_router
from .routes.catalog import FEED_FILENAME

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Store Sync merchant starting up...")
    logger.info(f"PayPal environment: {settings.paypal_environment}")
    logger.info(f"PayPal JWT verification: {'strict' if settings.paypal_jwt_strict else 'non-strict'}")
    if not settings.paypal_credentials_configured:
        logger.warning("PAYPAL_CLIENT_ID/PAYPAL_CLIENT_SECRET not set - order calls will fail")

    # Fails startup if the feed is unreadable
    product_db.load()

    yield

    logger.info("Store Sync merchant shutting down...")
    await get_paypal_client().close()


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Merchant cart and catalog API for PayPal agentic checkout",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(catalog_router)
app.include_router(cart_router)


@app.get("/")
async def home(request: Request):
    """Service metadata and endpoint discovery"""
    base = str(request.base_url).rstrip("/")
    return {
        "service": settings.app_name,
        "environment": settings.paypal_environment,
        "catalog_size": len(product_db.get_all_products()),
        "endpoints": {
            "catalog": f"{base}/catalog/{FEED_FILENAME}",
            "create_cart": f"POST {base}/api/paypal/v1/merchant-cart",
            "update_cart": f"PUT  {base}/api/paypal/v1/merchant-cart/:id",
            "checkout": f"POST {base}/api/paypal/v1/merchant-cart/:id/checkout",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "store-sync-merchant"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "store_sync.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
