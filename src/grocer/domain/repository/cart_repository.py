"""Abstract repository for shopping carts."""

from __future__ import annotations

from abc import ABC, abstractmethod

from grocer.domain.model.catalog import Cart, CartItem


class CartRepository(ABC):

    @abstractmethod
    def get_for_user(self, user_id: str) -> Cart | None:
        """Return the user's cart with its items, or None."""

    @abstractmethod
    def create(self, user_id: str, store_id: str) -> Cart:
        """Create an empty cart bound to ``store_id``."""

    @abstractmethod
    def set_store(self, cart_id: str, store_id: str) -> None: ...

    @abstractmethod
    def save_item(self, cart_id: str, item: CartItem) -> None:
        """Insert the line, or overwrite quantity and price of an existing one."""

    @abstractmethod
    def remove_items(self, cart_id: str, items: list[CartItem]) -> int:
        """Delete the given lines, matching variant and quantity.

        Returns the number of lines deleted. Lines changed or removed since
        ``items`` was read are left alone and not counted.
        """
