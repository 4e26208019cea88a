"""Product feed route polled by PayPal Store Sync"""

import os

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from ..database.products import product_db

router = APIRouter(prefix="/catalog", tags=["Catalog"])

FEED_FILENAME = "product_catalog.csv"


@router.get(f"/{FEED_FILENAME}")
async def product_feed():
    """Serve the product feed as CSV"""
    if not os.path.isfile(product_db.csv_path):
        raise HTTPException(status_code=404, detail="Product feed not found")

    return FileResponse(
        product_db.csv_path,
        media_type="text/csv",
        headers={"Cache-Control": "public, max-age=3600"},
    )
