"""The acting user behind a request.

Authentication itself happens outside this service; callers hand over the
already-verified identity, role and (for store admins) the assigned store.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from grocer.domain.exceptions import ForbiddenError, ValidationError


class ActorRole(Enum):
    SUPER_ADMIN = "SUPER_ADMIN"
    STORE_ADMIN = "STORE_ADMIN"
    CUSTOMER = "CUSTOMER"


STOCK_MANAGER_ROLES = (ActorRole.SUPER_ADMIN, ActorRole.STORE_ADMIN)


@dataclass(frozen=True)
class Actor:
    user_id: str
    role: ActorRole
    store_id: str | None = None

    def __post_init__(self) -> None:
        if not self.user_id or not self.user_id.strip():
            raise ValidationError("Actor user id is required")

    def require_role(self, *roles: ActorRole) -> None:
        if self.role not in roles:
            raise ForbiddenError("Forbidden: insufficient access")

    def ensure_store_access(self, store_id: str) -> None:
        """Store admins may only work with the store they are assigned to."""
        self.require_role(*STOCK_MANAGER_ROLES)
        if self.role == ActorRole.STORE_ADMIN and self.store_id != store_id:
            raise ForbiddenError(
                f"Store admin is not assigned to store '{store_id}'"
            )
