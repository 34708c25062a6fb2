"""Mutation Guard - pre-write validation for structural tree mutations.

Invariants:
    - Checks run before any write lands; a failing check leaves the store untouched
    - Removal is all-or-nothing: one in-use node anywhere in the subtree blocks it

Design Decisions:
    - Check-then-act without locking: two concurrent root creates can both pass
      check_root_available. Callers needing strict single-root must serialize
      structural mutations per tree
"""

import logging

from treestore.core.domain_types import (
    ID_FIELD, PARENT_FIELD, USAGE_FIELD, NodeRecord, RequestScope, to_node_id,
)
from treestore.core.errors import (
    ErrorContext, InvalidIdError, InvalidParentIdError, ItemInUseError,
    RootAlreadyExistsError,
)
from treestore.core.query_conditions import eq, is_absent
from treestore.core.repository_protocols import RecordStore

logger = logging.getLogger(__name__)


class MutationGuard:
    """Root uniqueness, parent existence and usage checks."""

    def __init__(self, store: RecordStore):
        self.store = store

    async def check_root_available(self, scope: RequestScope, doc: NodeRecord) -> None:
        """Only parentless creates are checked."""
        if doc.get(PARENT_FIELD):
            return
        root = await self.store.find_one(scope, [is_absent(PARENT_FIELD)])
        if root:
            raise RootAlreadyExistsError(ErrorContext(
                organization_id=scope.organization_id,
                node_id=str(root[ID_FIELD]), operation="create",
            ))

    async def check_parent_exists(
        self, scope: RequestScope, parent_id: object, operation: str,
    ) -> None:
        parent = await self.store.find_one(scope, [eq(ID_FIELD, parent_id)])
        if not parent:
            raise InvalidParentIdError(parent_id, ErrorContext(
                organization_id=scope.organization_id, operation=operation,
            ))

    def check_removable(self, node_id: object, records: list[NodeRecord]) -> NodeRecord:
        """Return the target record; raise if missing or anything is in use."""
        node_id = to_node_id(node_id)
        item = next((r for r in records if r[ID_FIELD] == node_id), None)
        if item is None:
            raise InvalidIdError(node_id, ErrorContext(operation="remove"))

        in_use = [r[ID_FIELD] for r in records if r.get(USAGE_FIELD)]
        if in_use:
            logger.info(
                f"Removal blocked: {len(in_use)} node(s) in use",
                extra={"node_id": node_id, "error_code": "ITEM_IN_USE"},
            )
            raise ItemInUseError(in_use, ErrorContext(
                node_id=str(node_id), operation="remove",
            ))
        return item
