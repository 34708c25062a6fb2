"""Nested Set Service - single entry point composing reader, guard and writer.

Invariants:
    - All three parts share one RecordStore, one CacheBackend and one NestedSetOptions
    - The service never invalidates the cache itself; callers that mutate and then
      read subtrees through get_self_and_descendants clear it (see TreeStoreRuntime)

Design Decisions:
    - Explicit delegation over inheritance: every public operation visible in one place
"""

from typing import Sequence

from treestore.core.domain_types import NodeRecord, RequestScope
from treestore.core.nested_set_options import NestedSetOptions
from treestore.core.repository_protocols import CacheBackend, RecordStore
from treestore.services.tree_guard import MutationGuard
from treestore.services.tree_reader import TreeReader
from treestore.services.tree_writer import TreeWriter


class NestedSetService:
    """Hierarchical storage over a flat node collection (nested set model)."""

    def __init__(
        self,
        store: RecordStore,
        cache: CacheBackend,
        options: NestedSetOptions | None = None,
    ):
        self.options = options or NestedSetOptions()
        self.reader = TreeReader(store, cache, self.options)
        self.guard = MutationGuard(store)
        self.writer = TreeWriter(store, self.reader, self.guard)

    # ─── Reads ────────────────────────────────────────────────────

    def build_tree(self, root: NodeRecord, records: list[NodeRecord]) -> NodeRecord:
        return self.reader.build(root, records)

    async def get_tree(
        self, scope: RequestScope, node_id: object | None = None,
        fields: Sequence[str] | None = None,
    ) -> NodeRecord | None:
        return await self.reader.get_tree(scope, node_id, fields)

    async def get_self_and_descendants(
        self, scope: RequestScope, node_id: object,
    ) -> list[NodeRecord]:
        return await self.reader.get_self_and_descendants(scope, node_id)

    async def find_by_id(
        self, scope: RequestScope, node_id: object,
        fields: Sequence[str] | None = None,
    ) -> NodeRecord | None:
        return await self.reader.find_by_id(scope, node_id, fields)

    async def rebuild_tree(self, scope: RequestScope) -> None:
        await self.reader.rebuild_tree(scope)

    # ─── Writes ───────────────────────────────────────────────────

    async def create(self, scope: RequestScope, doc: NodeRecord) -> NodeRecord | None:
        return await self.writer.create(scope, doc)

    async def move(
        self, scope: RequestScope, node: NodeRecord, parent_id: object,
    ) -> NodeRecord | None:
        return await self.writer.move(scope, node, parent_id)

    async def copy(
        self, scope: RequestScope, node: NodeRecord, parent_id: object | None = None,
    ) -> NodeRecord | None:
        return await self.writer.copy(scope, node, parent_id)

    async def remove(self, scope: RequestScope, node_or_id: object) -> None:
        await self.writer.remove(scope, node_or_id)
