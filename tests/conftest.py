"""Shared fixtures: a fresh in-memory database per test."""

import pytest

from grocer.infrastructure.persistence.database import (
    build_engine,
    build_session_factory,
    create_schema,
)
from grocer.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork
from tests.fakes import FixedClock, seed_catalog


@pytest.fixture()
def engine():
    engine = build_engine("sqlite://")
    create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def clock():
    return FixedClock()


@pytest.fixture()
def uow_factory(engine, clock):
    session_factory = build_session_factory(engine)
    return lambda: SqlAlchemyUnitOfWork(session_factory, clock)


@pytest.fixture()
def catalog(uow_factory):
    """The seeded catalog of ``tests.fakes`` without any stock."""
    seed_catalog(uow_factory)
    return uow_factory
