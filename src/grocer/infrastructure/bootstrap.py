"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from functools import lru_cache

from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from grocer.infrastructure.config import Settings
from grocer.infrastructure.persistence.database import (
    build_engine,
    build_session_factory,
    create_schema,
)
from grocer.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork


@lru_cache(maxsize=1)
def settings() -> Settings:
    return Settings.from_env()


@lru_cache(maxsize=1)
def engine() -> Engine:
    current = settings()
    return build_engine(current.database_url, echo=current.db_echo)


@lru_cache(maxsize=1)
def session_factory() -> sessionmaker[Session]:
    return build_session_factory(engine())


def unit_of_work() -> SqlAlchemyUnitOfWork:
    return SqlAlchemyUnitOfWork(session_factory())


def init_db() -> None:
    create_schema(engine())


def reset() -> None:
    """Forget cached settings and connections (tests, config reloads)."""
    if engine.cache_info().currsize:
        engine().dispose()
    session_factory.cache_clear()
    engine.cache_clear()
    settings.cache_clear()
