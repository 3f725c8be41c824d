"""create edge_config_objects table

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:30:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "edge_config_objects",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("bucket", sa.String(length=255), nullable=False),
        sa.Column("object_key", sa.String(length=1024), nullable=False),
        sa.Column("content_type", sa.String(length=100), nullable=False),
        sa.Column("body", sa.LargeBinary(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_edge_config_objects"),
        sa.UniqueConstraint("bucket", "object_key", name="uq_edge_config_objects_bucket_object_key"),
    )
    op.create_index("ix_edge_config_objects_bucket", "edge_config_objects", ["bucket"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_edge_config_objects_bucket", table_name="edge_config_objects")
    op.drop_table("edge_config_objects")
