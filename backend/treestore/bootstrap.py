"""Runtime Wiring - builds the process-level objects and hands out request-scoped services.

Invariants:
    - One DatabaseSessionManager, one InMemoryCache and one NestedSetOptions per runtime
    - Each service() context owns exactly one AsyncSession, closed on exit
    - The cache is shared across services of the same runtime; invalidate_cache()
      drops every entry after structural mutations

Design Decisions:
    - Runtime object instead of module-level singletons: tests build as many as they need
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncGenerator

from treestore.config import Settings, get_settings
from treestore.core.nested_set_options import NestedSetOptions
from treestore.infrastructure.database import DatabaseSessionManager
from treestore.infrastructure.memory_cache import InMemoryCache
from treestore.infrastructure.observability import setup_logging
from treestore.infrastructure.sql_record_store import SqlRecordStore
from treestore.services.nested_set_service import NestedSetService

logger = logging.getLogger(__name__)


def build_options(settings: Settings) -> NestedSetOptions:
    """NestedSetOptions from settings; a missing seed gets a random one."""
    kwargs = {
        "root_left": settings.tree_root_left,
        "indexed_build": settings.tree_indexed_build,
    }
    if settings.tree_cache_seed:
        kwargs["cache_seed"] = settings.tree_cache_seed
    return NestedSetOptions(**kwargs)


@dataclass
class TreeStoreRuntime:
    db_manager: DatabaseSessionManager
    cache: InMemoryCache
    options: NestedSetOptions

    @asynccontextmanager
    async def service(self) -> AsyncGenerator[NestedSetService, None]:
        """NestedSetService bound to a fresh database session."""
        async with self.db_manager.session() as db:
            yield NestedSetService(SqlRecordStore(db), self.cache, self.options)

    def invalidate_cache(self) -> None:
        """Drop every cached get_self_and_descendants result.

        Entries go stale after create, move, copy, remove, rebuild_tree and any
        store.update of a cached node (use_counter included). Call this after those
        writes when later reads go through get_self_and_descendants. remove does not
        depend on it: its usage check reads the store directly.
        """
        self.cache.clear()

    async def health_check(self) -> bool:
        return await self.db_manager.health_check()

    async def close(self) -> None:
        await self.db_manager.dispose()
        logger.info("Tree store shut down")


def init_tree_store(settings: Settings | None = None) -> TreeStoreRuntime:
    """Configure logging, connect the database and build the shared cache."""
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_format)
    runtime = TreeStoreRuntime(
        db_manager=DatabaseSessionManager(
            settings.database_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
        ),
        cache=InMemoryCache(settings.cache_max_entries),
        options=build_options(settings),
    )
    logger.info("Tree store started")
    return runtime
