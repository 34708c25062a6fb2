"""TreeNode ORM - one row per node of a nested-set tree.

Invariants:
    - parent_id NULL marks the root (one per organization scope)
    - lft/rgt written only by SqlRecordStore.rebuild_intervals
    - use_counter > 0 blocks removal of the node and of any ancestor

Design Decisions:
    - parent_id is not a ForeignKey: copy inserts clones in any order and remove deletes a
      whole subtree in one statement
    - organization_id nullable: single-tenant deployments leave it empty
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, Integer, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from treestore.db.base import Base


class TreeNode(Base):
    """Nested-set node."""
    __tablename__ = "tree_nodes"
    __table_args__ = (
        Index("ix_tree_nodes_org_interval", "organization_id", "lft", "rgt"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    organization_id: Mapped[str | None] = mapped_column(
        String(100), nullable=True, index=True,
    )
    parent_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), nullable=True, index=True,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    use_counter: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )

    # Nested-set interval
    lft: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rgt: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
