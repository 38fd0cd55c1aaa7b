"""Application service: Seed Catalog use case.

Loads stores, product variants, addresses and optional opening stock
from a JSON-like document, e.g.::

    {
      "stores":    [{"id": "S1", "name": "Central", "city": "Jakarta"}],
      "variants":  [{"id": "V1", "product_name": "Fresh Milk", "name": "1 L",
                     "sku": "MILK-1L", "price": 15000}],
      "addresses": [{"id": "A1", "user_id": "u1", "label": "Home"}],
      "stock":     [{"store_id": "S1", "variant_id": "V1", "quantity": 10}]
    }

Every seeded variant gets an inventory row in every active store.
Opening stock is booked as a regular stock IN so the ledger explains it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from grocer.application.transaction import run_in_transaction
from grocer.domain.exceptions import ValidationError
from grocer.domain.model.catalog import Address, ProductVariant, Store
from grocer.domain.model.clock import Clock, utc_now
from grocer.domain.model.value_objects import Money
from grocer.domain.repository.unit_of_work import UnitOfWork, UnitOfWorkFactory
from grocer.domain.service.inventory_reservation_service import (
    InventoryReservationService,
)
from grocer.domain.service.stock_mutation_service import StockMutationService

SEED_ACTOR = "SYSTEM"
SEED_REFERENCE = "SEED"
SEED_REASON = "Opening stock"


@dataclass(frozen=True)
class SeedResult:
    stores: int
    variants: int
    addresses: int
    stock_entries: int


class SeedCatalogHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory, clock: Clock = utc_now) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def handle(self, document: dict[str, Any]) -> SeedResult:
        try:
            stores = [
                Store(
                    id=str(s["id"]),
                    name=s["name"],
                    city=s.get("city", ""),
                    is_active=s.get("is_active", True),
                )
                for s in document.get("stores", [])
            ]
            variants = [
                ProductVariant(
                    id=str(v["id"]),
                    product_name=v["product_name"],
                    name=v["name"],
                    sku=v["sku"],
                    price=Money.of(v["price"]),
                    is_active=v.get("is_active", True),
                )
                for v in document.get("variants", [])
            ]
            addresses = [
                Address(
                    id=str(a["id"]),
                    user_id=str(a["user_id"]),
                    label=a.get("label", ""),
                    city=a.get("city", ""),
                )
                for a in document.get("addresses", [])
            ]
            stock = [
                (str(row["store_id"]), str(row["variant_id"]), int(row["quantity"]))
                for row in document.get("stock", [])
            ]
        except (KeyError, TypeError, ValueError) as exc:
            raise ValidationError(f"Malformed seed document: {exc}") from exc

        def work(uow: UnitOfWork) -> SeedResult:
            for store in stores:
                uow.catalog.save_store(store)
            for variant in variants:
                uow.catalog.save_variant(variant)
            for address in addresses:
                uow.catalog.save_address(address)

            reservations = InventoryReservationService(uow)
            for variant in variants:
                reservations.initialize_inventory_for_variant(variant.id)

            mutations = StockMutationService(uow, self._clock)
            for store_id, variant_id, quantity in stock:
                mutations.record_stock_in(
                    store_id, variant_id, quantity, SEED_REFERENCE, SEED_REASON, SEED_ACTOR
                )

            return SeedResult(
                stores=len(stores),
                variants=len(variants),
                addresses=len(addresses),
                stock_entries=len(stock),
            )

        return run_in_transaction(self._uow_factory, work, attempts=1)
