"""Create store discovery tables

Revision ID: 3f1c9a7b2e10
Revises:
Create Date: 2026-10-17 12:05:41.318204

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "3f1c9a7b2e10"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, index=True),
        sa.Column("name", sa.String, nullable=False),
        sa.Column("chat_id", sa.Integer, unique=True, nullable=True),
        sa.Column("created", sa.DateTime, nullable=False),
    )

    op.create_table(
        "stores",
        sa.Column("id", sa.Integer, primary_key=True, index=True),
        sa.Column("name", sa.String, nullable=False),
        sa.Column("slug", sa.String, nullable=False, unique=True, index=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("location_type", sa.String, nullable=False, server_default="Point"),
        sa.Column("lng", sa.Float, nullable=False),
        sa.Column("lat", sa.Float, nullable=False),
        sa.Column("address", sa.String, nullable=True),
        sa.Column("photo", sa.String, nullable=True),
        sa.Column("author_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created", sa.DateTime, nullable=False),
    )
    op.create_index("ix_stores_lat_lng", "stores", ["lat", "lng"])
    op.create_index("ix_stores_created", "stores", ["created"])

    op.create_table(
        "store_tags",
        sa.Column(
            "store_id",
            sa.Integer,
            sa.ForeignKey("stores.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("name", sa.String, primary_key=True, index=True),
    )

    op.create_table(
        "reviews",
        sa.Column("id", sa.Integer, primary_key=True, index=True),
        sa.Column("created", sa.DateTime, nullable=False),
        sa.Column("author_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "store_id", sa.Integer, sa.ForeignKey("stores.id"), nullable=False, index=True
        ),
        sa.Column("text", sa.Text, nullable=False),
        sa.Column("rating", sa.Integer, nullable=False),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name="ck_review_rating_range"),
    )

    op.create_table(
        "hearts",
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), primary_key=True),
        sa.Column("store_id", sa.Integer, sa.ForeignKey("stores.id"), primary_key=True),
    )


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_table("hearts")
    op.drop_table("reviews")
    op.drop_table("store_tags")
    op.drop_index("ix_stores_created", "stores")
    op.drop_index("ix_stores_lat_lng", "stores")
    op.drop_table("stores")
    op.drop_table("users")
