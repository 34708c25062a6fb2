"""Query Conditions - store-neutral predicates the core hands to a RecordStore.

Invariants:
    - Only five predicates exist: equals, is-absent, >=, <=, in-set
    - Conditions are immutable; a condition list is an implicit AND

Design Decisions:
    - Explicit Enum over free-form operator strings: stores translate a closed set
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

from treestore.core.domain_types import LEFT_FIELD, RIGHT_FIELD


class ConditionOp(str, Enum):
    EQ = "eq"
    IS_ABSENT = "is_absent"
    GTE = "gte"
    LTE = "lte"
    IN = "in"


@dataclass(frozen=True)
class Condition:
    field: str
    op: ConditionOp
    value: Any = None


def eq(field: str, value: Any) -> Condition:
    return Condition(field, ConditionOp.EQ, value)


def is_absent(field: str) -> Condition:
    return Condition(field, ConditionOp.IS_ABSENT)


def gte(field: str, value: Any) -> Condition:
    return Condition(field, ConditionOp.GTE, value)


def lte(field: str, value: Any) -> Condition:
    return Condition(field, ConditionOp.LTE, value)


def in_(field: str, values: Iterable[Any]) -> Condition:
    return Condition(field, ConditionOp.IN, tuple(values))


def within_interval(lft: int, rgt: int) -> list[Condition]:
    """Conditions selecting every node whose interval lies in [lft, rgt]."""
    return [gte(LEFT_FIELD, lft), lte(RIGHT_FIELD, rgt)]
