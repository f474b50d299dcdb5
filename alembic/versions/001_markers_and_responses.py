"""Initial migration: markers and responses tables.

Tables created earlier by the store's own bootstrap are left as they are.

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    inspector = sa.inspect(op.get_bind())

    if not inspector.has_table("markers"):
        op.create_table(
            "markers",
            sa.Column("id", sa.Integer, primary_key=True, autoincrement=False),
            sa.Column("url", sa.String(2000), nullable=False),
            sa.Column("address", sa.Text, nullable=False),
            sa.Column("category", sa.String(255), nullable=False),
            sa.Column("created_at", sa.DateTime, nullable=False),
            sa.Column("editable", sa.Boolean, nullable=False),
            sa.Column("lat", sa.String(50), nullable=False),
            sa.Column("lng", sa.String(50), nullable=False),
            sa.Column("user", sa.String(255), nullable=False),
        )

    if not inspector.has_table("responses"):
        op.create_table(
            "responses",
            sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
            sa.Column("marker_id", sa.Integer, sa.ForeignKey("markers.id"), nullable=False),
            sa.Column("mode", sa.String(100), nullable=False),
            sa.Column("question_type", sa.String(100), nullable=False),
            sa.Column("question", sa.Text, nullable=False),
            sa.Column("answer", sa.LargeBinary, nullable=False),
        )
        op.create_index("ix_responses_marker_id", "responses", ["marker_id"])


def downgrade() -> None:
    op.drop_index("ix_responses_marker_id", table_name="responses")
    op.drop_table("responses")
    op.drop_table("markers")
