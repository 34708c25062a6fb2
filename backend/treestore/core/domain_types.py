"""Domain Types - identity types, record aliases and the request scope.

Invariants:
    - NodeId wraps UUID; records cross the core boundary as plain dicts
    - RequestScope is immutable and hashable (safe as part of a cache key)
    - to_node_id accepts UUIDs and UUID strings only; anything else is a FieldValidationError

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - Records as dicts: the store projects fields, the core only reads known keys
"""

from dataclasses import dataclass
from typing import Any, NewType
from uuid import UUID

from treestore.core.errors import FieldValidationError


# ─── Identity Types ──────────────────────────────────────────────

NodeId = NewType("NodeId", UUID)
OrganizationId = NewType("OrganizationId", str)

NodeRecord = dict[str, Any]


# ─── Record Field Names ──────────────────────────────────────────

ID_FIELD = "id"
PARENT_FIELD = "parent_id"
LEFT_FIELD = "lft"
RIGHT_FIELD = "rgt"
USAGE_FIELD = "use_counter"
INTERVAL_FIELDS: tuple[str, ...] = (LEFT_FIELD, RIGHT_FIELD)


@dataclass(frozen=True)
class RequestScope:
    """Per-request scope passed to every store and cache call."""
    organization_id: OrganizationId | None = None


def to_node_id(value: object, field: str = ID_FIELD) -> UUID:
    """UUID for an id given as UUID or string; FieldValidationError otherwise."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise FieldValidationError(f"Invalid node id for '{field}': {value!r}", field)
