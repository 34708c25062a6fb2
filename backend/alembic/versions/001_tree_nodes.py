"""Tree nodes - nested-set node table.

Revision ID: 001_tree_nodes
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_tree_nodes"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "tree_nodes",
        sa.Column("id", UUID(as_uuid=True), nullable=False),
        sa.Column("organization_id", sa.String(100), nullable=True),
        sa.Column("parent_id", UUID(as_uuid=True), nullable=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("use_counter", sa.Integer, nullable=False, server_default="0"),
        sa.Column("lft", sa.Integer, nullable=False, server_default="0"),
        sa.Column("rgt", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_tree_nodes"),
    )
    op.create_index("ix_tree_nodes_organization_id", "tree_nodes", ["organization_id"])
    op.create_index("ix_tree_nodes_parent_id", "tree_nodes", ["parent_id"])
    op.create_index(
        "ix_tree_nodes_org_interval", "tree_nodes", ["organization_id", "lft", "rgt"],
    )


def downgrade() -> None:
    op.drop_index("ix_tree_nodes_org_interval", table_name="tree_nodes")
    op.drop_index("ix_tree_nodes_parent_id", table_name="tree_nodes")
    op.drop_index("ix_tree_nodes_organization_id", table_name="tree_nodes")
    op.drop_table("tree_nodes")
