"""Cart storage for the merchant service"""

from abc import ABC, abstractmethod
from typing import Optional

from ..models.cart import Cart


class CartStore(ABC):
    """Storage interface for cart records"""

    @abstractmethod
    def get(self, cart_id: str) -> Optional[Cart]:
        """Get a cart by ID"""

    @abstractmethod
    def put(self, cart: Cart) -> Cart:
        """Insert or replace a cart"""

    @abstractmethod
    def list(self) -> list[Cart]:
        """List all stored carts"""


class InMemoryCartStore(CartStore):
    """In-memory cart storage, lost on restart"""

    def __init__(self):
        self.carts: dict[str, Cart] = {}

    def get(self, cart_id: str) -> Optional[Cart]:
        return self.carts.get(cart_id)

    def put(self, cart: Cart) -> Cart:
        self.carts[cart.id] = cart
        return cart

    def list(self) -> list[Cart]:
        carts = list(self.carts.values())
        carts.sort(key=lambda c: c.created_at, reverse=True)
        return carts


# Singleton instance
cart_db = InMemoryCartStore()
