"""Boundary Protocols - contracts between the tree core and its collaborators.

Invariants:
    - Core NEVER imports from infrastructure/models - dependency arrows point inward only
    - All IO goes through RecordStore and CacheBackend
    - Implementations provided by the shell via constructor injection

Design Decisions:
    - Protocol over ABC: structural subtyping, test doubles need no base class
    - Async in Protocol: implementations do IO
"""

from typing import Any, Protocol, Sequence

from treestore.core.domain_types import NodeRecord, RequestScope
from treestore.core.query_conditions import Condition


class RecordStore(Protocol):
    """Record persistence for tree nodes, including interval renumbering."""

    async def find_one(
        self, scope: RequestScope, conditions: Sequence[Condition],
        fields: Sequence[str] | None = None,
    ) -> NodeRecord | None: ...

    async def find(
        self, scope: RequestScope, conditions: Sequence[Condition],
        fields: Sequence[str] | None = None,
    ) -> list[NodeRecord]: ...

    async def create(self, scope: RequestScope, doc: NodeRecord) -> NodeRecord: ...

    async def update(
        self, scope: RequestScope, conditions: Sequence[Condition], patch: dict,
    ) -> NodeRecord | None: ...

    async def remove(
        self, scope: RequestScope, conditions: Sequence[Condition],
    ) -> None: ...

    async def rebuild_intervals(
        self, scope: RequestScope, root: NodeRecord | None, start: int,
    ) -> None:
        """Recompute lft/rgt for the whole scope from `root`, root.lft = start."""
        ...


class CacheBackend(Protocol):
    """Best-effort key/value cache."""
    async def get(self, key: str) -> Any | None: ...
    async def set(self, key: str, value: Any) -> None: ...
