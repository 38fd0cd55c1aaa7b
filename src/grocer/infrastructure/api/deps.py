"""FastAPI dependencies: the acting user, paging and wiring from app state."""

from __future__ import annotations

from fastapi import Depends, Header, HTTPException, Query, Request, status

from grocer.domain.exceptions import ValidationError
from grocer.domain.model.actor import STOCK_MANAGER_ROLES, Actor, ActorRole
from grocer.domain.model.clock import Clock
from grocer.domain.repository.unit_of_work import UnitOfWorkFactory
from grocer.infrastructure.config import Settings
from grocer.infrastructure.logging import bind_request_context


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_uow_factory(request: Request) -> UnitOfWorkFactory:
    return request.app.state.uow_factory


def get_clock(request: Request) -> Clock:
    return request.app.state.clock


def current_actor(
    user_id: str | None = Header(None, alias="X-User-Id"),
    role: str | None = Header(None, alias="X-User-Role"),
    assigned_store: str | None = Header(None, alias="X-Store-Id"),
) -> Actor:
    """Identity handed over by the gateway that authenticated the caller."""
    if not user_id or not user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User authentication required",
        )
    try:
        actor_role = ActorRole((role or ActorRole.CUSTOMER.value).strip().upper())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden: unknown role",
        ) from None

    actor = Actor(user_id=user_id.strip(), role=actor_role, store_id=assigned_store or None)
    bind_request_context(user_id=actor.user_id, role=actor.role.value)
    return actor


def stock_manager(actor: Actor = Depends(current_actor)) -> Actor:
    actor.require_role(*STOCK_MANAGER_ROLES)
    return actor


def super_admin(actor: Actor = Depends(current_actor)) -> Actor:
    actor.require_role(ActorRole.SUPER_ADMIN)
    return actor


class Paging:
    """``page`` and ``limit`` query parameters, limit capped by settings."""

    def __init__(
        self,
        request: Request,
        page: int = Query(1),
        limit: int = Query(10),
    ) -> None:
        if page < 1:
            raise ValidationError("Page must be at least 1")
        if limit < 1:
            raise ValidationError("Limit must be at least 1")
        self.page = page
        self.limit = min(limit, get_settings(request).page_limit_max)
