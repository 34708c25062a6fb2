"""Nested Set Options - per-service-instance configuration value.

Invariants:
    - cache_seed is fixed for the lifetime of one options instance
    - Two options instances built without an explicit seed never share cache keys
"""

import secrets
from dataclasses import dataclass, field

from treestore.core.domain_types import INTERVAL_FIELDS

DEFAULT_FIELDS: tuple[str, ...] = (
    "name", "description", "parent_id", "use_counter", "organization_id",
)


def _new_cache_seed() -> str:
    return secrets.token_hex(8)


@dataclass(frozen=True)
class NestedSetOptions:
    """Projection, naming and cache-seed settings for one NestedSetService."""
    default_fields: tuple[str, ...] = DEFAULT_FIELDS
    children_field: str = "children"
    root_left: int = 1
    cache_seed: str = field(default_factory=_new_cache_seed)
    indexed_build: bool = False

    @property
    def interval_fields(self) -> tuple[str, ...]:
        """Default projection plus lft/rgt."""
        return self.with_intervals(self.default_fields)

    @staticmethod
    def with_intervals(fields: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(fields) + tuple(f for f in INTERVAL_FIELDS if f not in fields)
