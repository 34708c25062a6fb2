"""Service test fixtures - async in-memory DB, SqlRecordStore and a seeded tree.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - Every test gets its own InMemoryCache (no cross-test cache hits)
    - seed_tree builds A(root) -> {B, C}, B -> {D} through the service itself

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for nested-set queries
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)

from treestore.core.domain_types import RequestScope
from treestore.core.nested_set_options import NestedSetOptions
from treestore.db.base import Base
from treestore.infrastructure.memory_cache import InMemoryCache
from treestore.infrastructure.sql_record_store import SqlRecordStore
from treestore.models.tree_node import TreeNode  # noqa: F401
from treestore.services.nested_set_service import NestedSetService


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def scope():
    return RequestScope()


@pytest.fixture
def store(test_db):
    return SqlRecordStore(test_db)


@pytest.fixture
def cache():
    return InMemoryCache(max_entries=100)


@pytest.fixture
def options():
    return NestedSetOptions(cache_seed="test-seed")


@pytest.fixture
def service(store, cache, options):
    return NestedSetService(store, cache, options)


@pytest.fixture
async def seed_tree(service, scope):
    """A(root) -> {B, C}, B -> {D}. Returns name -> record."""
    a = await service.create(scope, {"name": "A"})
    b = await service.create(scope, {"name": "B", "parent_id": a["id"]})
    c = await service.create(scope, {"name": "C", "parent_id": a["id"]})
    d = await service.create(scope, {"name": "D", "parent_id": b["id"]})
    return {"A": a, "B": b, "C": c, "D": d}
