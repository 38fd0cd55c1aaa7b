"""Offset pagination for select statements."""

from __future__ import annotations

from typing import Any

import sqlalchemy as sa
from sqlalchemy.orm import Session


def paginate(session: Session, stmt: sa.Select, page: int, limit: int) -> tuple[list[Any], int]:
    """Run one page of ``stmt`` and count every row it would return."""
    total = session.execute(
        sa.select(sa.func.count()).select_from(stmt.order_by(None).subquery())
    ).scalar_one()
    rows = session.execute(stmt.offset((page - 1) * limit).limit(limit)).all()
    return list(rows), total
