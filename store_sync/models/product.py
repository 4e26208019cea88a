"""Product models for the merchant catalog"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Availability(str, Enum):
    """Availability values used by the product feed"""
    IN_STOCK = "in_stock"
    OUT_OF_STOCK = "out_of_stock"
    PREORDER = "preorder"
    BACKORDER = "backorder"


class Product(BaseModel):
    """Product variant from the catalog feed"""
    model_config = ConfigDict(frozen=True)

    id: str
    item_group_id: Optional[str] = None
    title: str = ""
    description: str = ""
    link: Optional[str] = None
    image_link: Optional[str] = None
    price: str = "0.00"
    # Feeds may carry values beyond the known set, so this stays a plain string
    availability: str = Availability.IN_STOCK.value

    @property
    def is_out_of_stock(self) -> bool:
        return self.availability == Availability.OUT_OF_STOCK
