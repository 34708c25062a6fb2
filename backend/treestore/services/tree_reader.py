"""Tree Reader - subtree and full-tree queries over nested-set intervals.

Invariants:
    - get_tree returns None for an empty tree and for an unknown start id
    - get_tree raises RootNodeNotFoundError when the start node is outside its own range
    - get_self_and_descendants never invalidates the cache; a cache write failure
      never fails the read
    - load_subtree always hits the store; mutation guards read through it
    - Cache keys combine the options' cache_seed, organization and node id

Design Decisions:
    - Results are dict records; build_tree mutates the start record in place
"""

import logging
from typing import Sequence

from treestore.core.domain_types import (
    ID_FIELD, LEFT_FIELD, PARENT_FIELD, RIGHT_FIELD, NodeRecord, RequestScope,
)
from treestore.core.errors import (
    ErrorContext, ResourceNotFoundError, RootNodeNotFoundError,
)
from treestore.core.nested_set_options import NestedSetOptions
from treestore.core.query_conditions import eq, is_absent, within_interval
from treestore.core.repository_protocols import CacheBackend, RecordStore
from treestore.core.tree_builder import build_tree, build_tree_indexed

logger = logging.getLogger(__name__)


class TreeReader:
    """Reads subtrees and rebuilds intervals through the store."""

    def __init__(
        self, store: RecordStore, cache: CacheBackend, options: NestedSetOptions,
    ):
        self.store = store
        self.cache = cache
        self.options = options

    def build(self, root: NodeRecord, records: list[NodeRecord]) -> NodeRecord:
        builder = build_tree_indexed if self.options.indexed_build else build_tree
        return builder(root, records, self.options.children_field)

    def cache_key(self, scope: RequestScope, node_id: object) -> str:
        parts = [self.options.cache_seed, scope.organization_id, node_id]
        return "_".join(str(p) for p in parts if p)

    async def find_by_id(
        self, scope: RequestScope, node_id: object,
        fields: Sequence[str] | None = None,
    ) -> NodeRecord | None:
        return await self.store.find_one(
            scope, [eq(ID_FIELD, node_id)], fields or self.options.default_fields,
        )

    async def get_tree(
        self, scope: RequestScope, node_id: object | None = None,
        fields: Sequence[str] | None = None,
    ) -> NodeRecord | None:
        """Materialize the subtree under node_id, or the whole tree from the root."""
        fields = tuple(fields or self.options.default_fields)
        start = await self.store.find_one(
            scope,
            [eq(ID_FIELD, node_id)] if node_id else [is_absent(PARENT_FIELD)],
            NestedSetOptions.with_intervals(fields),
        )
        if not start:
            logger.debug(
                "No start node for tree read",
                extra={"node_id": node_id, "organization_id": scope.organization_id},
            )
            return None

        records = await self.store.find(
            scope, within_interval(start[LEFT_FIELD], start[RIGHT_FIELD]), fields,
        )
        top = next((r for r in records if r[ID_FIELD] == start[ID_FIELD]), None)
        if top is None:
            logger.error(
                "Start node missing from its interval range",
                extra={"node_id": start[ID_FIELD], "error_code": "ROOT_NODE_NOT_FOUND"},
            )
            raise RootNodeNotFoundError(start[ID_FIELD], ErrorContext(
                organization_id=scope.organization_id,
                node_id=str(start[ID_FIELD]), operation="get_tree",
            ))
        return self.build(top, records)

    async def load_subtree(
        self, scope: RequestScope, node_id: object,
    ) -> list[NodeRecord]:
        """Node plus everything inside its interval, straight from the store."""
        node = await self.store.find_one(
            scope, [eq(ID_FIELD, node_id)], self.options.interval_fields,
        )
        if not node:
            raise ResourceNotFoundError("TreeNode", node_id, ErrorContext(
                organization_id=scope.organization_id, node_id=str(node_id),
                operation="load_subtree",
            ))
        return await self.store.find(
            scope, within_interval(node[LEFT_FIELD], node[RIGHT_FIELD]),
        )

    async def get_self_and_descendants(
        self, scope: RequestScope, node_id: object,
    ) -> list[NodeRecord]:
        """Cached load_subtree; entries go stale after any write to the tree."""
        key = self.cache_key(scope, node_id)
        cached = await self.cache.get(key)
        if cached is not None:
            logger.debug("Subtree cache hit", extra={"node_id": node_id})
            return cached

        records = await self.load_subtree(scope, node_id)
        try:
            await self.cache.set(key, records)
        except Exception as e:
            logger.warning(
                f"Subtree cache write failed: {e}",
                extra={"node_id": node_id, "operation": "cache_set"},
            )
        return records

    async def rebuild_tree(self, scope: RequestScope) -> None:
        """Renumber the whole scope from its root; no root means nothing to do."""
        root = await self.store.find_one(scope, [is_absent(PARENT_FIELD)])
        await self.store.rebuild_intervals(scope, root, self.options.root_left)
