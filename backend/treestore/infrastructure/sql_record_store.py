"""SQL Record Store - RecordStore implementation over async SQLAlchemy and TreeNode.

Invariants:
    - Every query is filtered by the request scope's organization_id (NULL scope = NULL rows)
    - Every write commits immediately; no transaction spans two calls
    - Returned records are plain dicts; `id` is always present
    - Only TreeNode columns may appear in conditions and projections
    - id and parent_id condition values are parsed to UUID; malformed ids raise
      FieldValidationError before any SQL runs

Design Decisions:
    - Payload validation via pydantic schemas (schemas/node.py) at this boundary
    - Default sort name, id: children come back alphabetically in materialized trees
    - rebuild_intervals numbers children in insertion order (created_at, id)
"""

import logging
from typing import Sequence

from pydantic import ValidationError
from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from treestore.core.domain_types import (
    ID_FIELD, PARENT_FIELD, NodeRecord, RequestScope, to_node_id,
)
from treestore.core.errors import FieldValidationError
from treestore.core.query_conditions import Condition, ConditionOp
from treestore.infrastructure.interval_rebuild import compute_intervals
from treestore.models.tree_node import TreeNode
from treestore.schemas.node import NodeCreate, NodeUpdate

logger = logging.getLogger(__name__)

_COLUMNS: tuple[str, ...] = tuple(c.key for c in TreeNode.__table__.columns)


def _column(field: str):
    if field not in _COLUMNS:
        raise FieldValidationError(f"Unknown node field '{field}'", field)
    return getattr(TreeNode, field)


_ID_COLUMNS = frozenset((ID_FIELD, PARENT_FIELD))


def _bind_value(cond: Condition):
    """UUID-typed columns get UUID values; str ids from callers are parsed here."""
    if cond.field not in _ID_COLUMNS or cond.op is ConditionOp.IS_ABSENT:
        return cond.value
    if cond.op is ConditionOp.IN:
        return tuple(to_node_id(v, cond.field) for v in cond.value)
    return to_node_id(cond.value, cond.field)


def _to_clause(cond: Condition):
    col = _column(cond.field)
    value = _bind_value(cond)
    if cond.op is ConditionOp.EQ:
        return col == value
    if cond.op is ConditionOp.IS_ABSENT:
        return col.is_(None)
    if cond.op is ConditionOp.GTE:
        return col >= value
    if cond.op is ConditionOp.LTE:
        return col <= value
    if cond.op is ConditionOp.IN:
        return col.in_(value)
    raise FieldValidationError(f"Unsupported operator '{cond.op}'", cond.field)


def _to_record(node: TreeNode, fields: Sequence[str] | None) -> NodeRecord:
    names = _COLUMNS if fields is None else (ID_FIELD, *fields)
    record: NodeRecord = {}
    for name in names:
        if name not in record:
            record[name] = getattr(node, name) if name in _COLUMNS else None
    return record


def _validation_error(e: ValidationError) -> FieldValidationError:
    first = e.errors()[0]
    field = ".".join(str(loc) for loc in first["loc"])
    return FieldValidationError(f"Invalid node field '{field}': {first['msg']}", field)


class SqlRecordStore:
    """TreeNode persistence bound to one AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _where(self, scope: RequestScope, conditions: Sequence[Condition]) -> list:
        clauses = [
            TreeNode.organization_id.is_(None)
            if scope.organization_id is None
            else TreeNode.organization_id == scope.organization_id
        ]
        clauses.extend(_to_clause(cond) for cond in conditions)
        return clauses

    async def find_one(
        self, scope: RequestScope, conditions: Sequence[Condition],
        fields: Sequence[str] | None = None,
    ) -> NodeRecord | None:
        for f in fields or ():
            _column(f)
        result = await self.db.execute(
            select(TreeNode).where(*self._where(scope, conditions))
            .order_by(TreeNode.name, TreeNode.id).limit(1),
        )
        node = result.scalar_one_or_none()
        return _to_record(node, fields) if node else None

    async def find(
        self, scope: RequestScope, conditions: Sequence[Condition],
        fields: Sequence[str] | None = None,
    ) -> list[NodeRecord]:
        for f in fields or ():
            _column(f)
        result = await self.db.execute(
            select(TreeNode).where(*self._where(scope, conditions))
            .order_by(TreeNode.name, TreeNode.id),
        )
        return [_to_record(n, fields) for n in result.scalars().all()]

    async def create(self, scope: RequestScope, doc: NodeRecord) -> NodeRecord:
        try:
            payload = NodeCreate.model_validate(doc)
        except ValidationError as e:
            raise _validation_error(e)

        values = payload.model_dump()
        if values["id"] is None:
            values.pop("id")
        node = TreeNode(organization_id=scope.organization_id, **values)
        self.db.add(node)
        await self.db.commit()
        await self.db.refresh(node)
        return _to_record(node, None)

    async def update(
        self, scope: RequestScope, conditions: Sequence[Condition], patch: dict,
    ) -> NodeRecord | None:
        try:
            values = NodeUpdate.model_validate(patch).model_dump(exclude_unset=True)
        except ValidationError as e:
            raise _validation_error(e)

        result = await self.db.execute(
            select(TreeNode).where(*self._where(scope, conditions))
            .order_by(TreeNode.id).limit(1),
        )
        node = result.scalar_one_or_none()
        if not node:
            return None
        for key, value in values.items():
            setattr(node, key, value)
        await self.db.commit()
        await self.db.refresh(node)
        return _to_record(node, None)

    async def remove(
        self, scope: RequestScope, conditions: Sequence[Condition],
    ) -> None:
        result = await self.db.execute(
            delete(TreeNode).where(*self._where(scope, conditions)),
        )
        await self.db.commit()
        logger.debug(
            f"Removed {result.rowcount} node(s)",
            extra={"organization_id": scope.organization_id, "node_count": result.rowcount},
        )

    async def rebuild_intervals(
        self, scope: RequestScope, root: NodeRecord | None, start: int,
    ) -> None:
        if root is None:
            return
        result = await self.db.execute(
            select(TreeNode.id, TreeNode.parent_id)
            .where(*self._where(scope, ()))
            .order_by(TreeNode.created_at, TreeNode.id),
        )
        intervals = compute_intervals(root[ID_FIELD], result.all(), start)
        if intervals:
            await self.db.execute(
                update(TreeNode),
                [
                    {"id": node_id, "lft": lft, "rgt": rgt}
                    for node_id, (lft, rgt) in intervals.items()
                ],
            )
        await self.db.commit()
        # bulk update bypasses the identity map; force reload on next select
        self.db.expire_all()
        logger.debug(
            "Rebuilt tree intervals",
            extra={
                "organization_id": scope.organization_id,
                "node_id": root[ID_FIELD], "node_count": len(intervals),
            },
        )
