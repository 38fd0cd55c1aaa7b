"""Catalog collaborators: stores, product variants, addresses and carts.

These are owned by the catalog, address book and cart modules of the
platform. The inventory core only reads them (and clears carts after a
successful checkout), so they are kept as plain records here.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from grocer.domain.model.value_objects import Money


@dataclass
class Store:
    id: str
    name: str
    city: str = ""
    is_active: bool = True


@dataclass
class ProductVariant:
    """A purchasable SKU of a product, e.g. *Fresh Milk / 1 L*."""

    id: str
    product_name: str
    name: str
    sku: str
    price: Money
    is_active: bool = True


@dataclass
class Address:
    id: str
    user_id: str
    label: str
    city: str = ""


@dataclass
class CartItem:
    variant_id: str
    quantity: int
    price_at_add: Money

    @property
    def line_total(self) -> Money:
        return self.price_at_add * self.quantity


@dataclass
class Cart:
    """A customer's cart. All items come from the single store ``store_id``."""

    id: str
    user_id: str
    store_id: str | None
    items: list[CartItem] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def find_item(self, variant_id: str) -> CartItem | None:
        for item in self.items:
            if item.variant_id == variant_id:
                return item
        return None
