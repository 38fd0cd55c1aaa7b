"""Application service: Show Inventory use case (query)."""

from __future__ import annotations

from grocer.application.dto import (
    InventoryDTO,
    Page,
    Pagination,
    VariantStockDTO,
    require_paging,
)
from grocer.domain.exceptions import NotFoundError
from grocer.domain.model.actor import STOCK_MANAGER_ROLES, Actor, ActorRole
from grocer.domain.repository.unit_of_work import UnitOfWorkFactory


class ShowInventoryHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def for_store(
        self,
        actor: Actor,
        store_id: str,
        page: int = 1,
        limit: int = 10,
        search: str | None = None,
    ) -> Page[InventoryDTO]:
        actor.ensure_store_access(store_id)
        require_paging(page, limit)

        with self._uow_factory() as uow:
            records, total = uow.inventory.list_for_store(
                store_id, page, limit, (search or "").strip() or None
            )

        return Page(
            items=[InventoryDTO.from_record(r) for r in records],
            pagination=Pagination.build(page, limit, total),
        )

    def for_variant(self, actor: Actor, variant_id: str) -> VariantStockDTO:
        """Stock of one variant across stores.

        Store admins only see the row of their own store.
        """
        actor.require_role(*STOCK_MANAGER_ROLES)

        with self._uow_factory() as uow:
            if uow.catalog.get_variant(variant_id) is None:
                raise NotFoundError(f"Product variant '{variant_id}' not found")
            records = uow.inventory.list_for_variant(variant_id)

        if actor.role == ActorRole.STORE_ADMIN:
            records = [r for r in records if r.store_id == actor.store_id]

        return VariantStockDTO(
            variant_id=variant_id,
            inventories=[InventoryDTO.from_record(r) for r in records],
            total_quantity=sum(r.quantity for r in records),
            total_reserved=sum(r.reserved for r in records),
            total_available=sum(r.available for r in records),
            store_count=len(records),
        )

    def detail(self, actor: Actor, store_id: str, variant_id: str) -> InventoryDTO:
        actor.ensure_store_access(store_id)

        with self._uow_factory() as uow:
            record = uow.inventory.get(store_id, variant_id)

        if record is None:
            raise NotFoundError("Inventory not found")
        return InventoryDTO.from_record(record)
