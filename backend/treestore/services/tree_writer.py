"""Tree Writer - create, move, copy and remove under the nested-set invariant.

Invariants:
    - Guard checks run before the first write of every operation
    - Every completed structural change ends with one interval rebuild
    - remove skips the rebuild only when the removed node was the root (tree now empty)
    - copy gives every clone a fresh id and remaps parent_id inside the batch
    - remove checks usage on a fresh store read of the subtree, never on cached records

Design Decisions:
    - copy persists clones one by one on the shared session and never rolls back:
      a failure mid-batch leaves the earlier clones in place (logged at ERROR)
    - move performs no cycle detection
"""

import logging
from collections.abc import Mapping
from uuid import uuid4

from treestore.core.domain_types import (
    ID_FIELD, INTERVAL_FIELDS, LEFT_FIELD, PARENT_FIELD, RIGHT_FIELD,
    NodeRecord, RequestScope, to_node_id,
)
from treestore.core.errors import (
    ErrorContext, NoIdProvidedError, ResourceNotFoundError,
)
from treestore.core.query_conditions import eq, in_, within_interval
from treestore.core.repository_protocols import RecordStore
from treestore.services.tree_guard import MutationGuard
from treestore.services.tree_reader import TreeReader

logger = logging.getLogger(__name__)


def clone_subtree(
    records: list[NodeRecord], new_parent_id: object,
) -> tuple[dict, list[NodeRecord]]:
    """Clone records with fresh ids; returns (old id -> clone, clones in input order).

    A clone whose old parent is not in the batch is the top of the copy and is
    re-parented under new_parent_id.
    """
    clones: dict = {}
    for record in records:
        clone = {
            k: v for k, v in record.items()
            if k != ID_FIELD and k not in INTERVAL_FIELDS
        }
        clone[ID_FIELD] = uuid4()
        clones[record[ID_FIELD]] = clone

    for clone in clones.values():
        old_parent = clone.get(PARENT_FIELD)
        if old_parent is not None and old_parent in clones:
            clone[PARENT_FIELD] = clones[old_parent][ID_FIELD]
        else:
            clone[PARENT_FIELD] = new_parent_id
    return clones, list(clones.values())


class TreeWriter:
    """Structural mutations; each one ends with a rebuild."""

    def __init__(
        self, store: RecordStore, reader: TreeReader, guard: MutationGuard,
    ):
        self.store = store
        self.reader = reader
        self.guard = guard

    async def create(self, scope: RequestScope, doc: NodeRecord) -> NodeRecord | None:
        """Insert a node, renumber, return it with default fields."""
        await self.guard.check_root_available(scope, doc)
        parent_id = doc.get(PARENT_FIELD)
        if parent_id:
            await self.guard.check_parent_exists(scope, parent_id, "create")

        created = await self.store.create(scope, doc)
        await self.reader.rebuild_tree(scope)
        logger.info(
            "Tree node created",
            extra={
                "node_id": created[ID_FIELD], "parent_id": parent_id,
                "organization_id": scope.organization_id, "operation": "create",
            },
        )
        return await self.reader.find_by_id(scope, created[ID_FIELD])

    async def move(
        self, scope: RequestScope, node: NodeRecord, parent_id: object,
    ) -> NodeRecord | None:
        if not parent_id or not node.get(ID_FIELD):
            raise NoIdProvidedError(ErrorContext(
                organization_id=scope.organization_id, operation="move",
            ))
        await self.guard.check_parent_exists(scope, parent_id, "move")

        updated = await self.store.update(
            scope, [eq(ID_FIELD, node[ID_FIELD])], {PARENT_FIELD: parent_id},
        )
        if not updated:
            raise ResourceNotFoundError("TreeNode", node[ID_FIELD], ErrorContext(
                organization_id=scope.organization_id,
                node_id=str(node[ID_FIELD]), operation="move",
            ))
        await self.reader.rebuild_tree(scope)
        logger.info(
            "Tree node moved",
            extra={
                "node_id": node[ID_FIELD], "parent_id": parent_id,
                "organization_id": scope.organization_id, "operation": "move",
            },
        )
        return await self.reader.find_by_id(scope, node[ID_FIELD])

    async def copy(
        self, scope: RequestScope, node: NodeRecord, parent_id: object | None = None,
    ) -> NodeRecord | None:
        """Duplicate node and its descendants under parent_id (default: same parent)."""
        parent_id = parent_id or node.get(PARENT_FIELD)
        if not parent_id:
            raise NoIdProvidedError(ErrorContext(
                organization_id=scope.organization_id, operation="copy",
            ))
        await self.guard.check_parent_exists(scope, parent_id, "copy")

        try:
            source = await self.store.find_one(
                scope, [eq(ID_FIELD, node[ID_FIELD])],
                self.reader.options.interval_fields,
            )
            if not source:
                raise ResourceNotFoundError("TreeNode", node[ID_FIELD], ErrorContext(
                    organization_id=scope.organization_id,
                    node_id=str(node[ID_FIELD]), operation="copy",
                ))
            records = await self.store.find(
                scope, within_interval(source[LEFT_FIELD], source[RIGHT_FIELD]),
                self.reader.options.interval_fields,
            )

            clones, batch = clone_subtree(records, parent_id)
            for clone in batch:
                await self.store.create(scope, clone)
            await self.reader.rebuild_tree(scope)
        except Exception as e:
            logger.error(
                f"Tree copy failed: {e}",
                extra={
                    "node_id": node.get(ID_FIELD), "parent_id": parent_id,
                    "organization_id": scope.organization_id, "operation": "copy",
                },
                exc_info=True,
            )
            raise

        top = clones[source[ID_FIELD]]
        logger.info(
            f"Copied {len(batch)} node(s)",
            extra={
                "node_id": top[ID_FIELD], "parent_id": parent_id,
                "node_count": len(batch), "operation": "copy",
            },
        )
        return await self.reader.get_tree(scope, top[ID_FIELD])

    async def remove(self, scope: RequestScope, node_or_id: object) -> None:
        """Delete a node and all its descendants unless any of them is in use."""
        node_id = (
            node_or_id.get(ID_FIELD) if isinstance(node_or_id, Mapping) else node_or_id
        )
        if not node_id:
            raise NoIdProvidedError(ErrorContext(
                organization_id=scope.organization_id, operation="remove",
            ))
        node_id = to_node_id(node_id)

        records = await self.reader.load_subtree(scope, node_id)
        item = self.guard.check_removable(node_id, records)

        ids = [r[ID_FIELD] for r in records]
        await self.store.remove(scope, [in_(ID_FIELD, ids)])
        logger.info(
            f"Removed {len(ids)} node(s)",
            extra={
                "node_id": node_id, "node_count": len(ids),
                "organization_id": scope.organization_id, "operation": "remove",
            },
        )
        if item.get(PARENT_FIELD):
            await self.reader.rebuild_tree(scope)
