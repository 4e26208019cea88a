# Storage modules

from .products import product_db, CatalogStore, CatalogLoadError
from .carts import cart_db, CartStore, InMemoryCartStore

__all__ = [
    "product_db",
    "CatalogStore",
    "CatalogLoadError",
    "cart_db",
    "CartStore",
    "InMemoryCartStore",
]
