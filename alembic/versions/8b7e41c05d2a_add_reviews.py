"""Add reviews

Revision ID: 8b7e41c05d2a
Revises: 3f1c2a9d7b40
Create Date: 2026-10-19 14:37:52.906113

"""

import sqlalchemy as sa

from alembic import op  # type: ignore[attr-defined]

# revision identifiers, used by Alembic.
revision = "8b7e41c05d2a"
down_revision = "3f1c2a9d7b40"
branch_labels = None
depends_on = None

SCHEMA = "rentals"


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "reviews",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("listing_id", sa.Integer(), nullable=False),
        sa.Column("reservation_id", sa.Integer(), nullable=False),
        sa.Column("rating", sa.SmallInteger(), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("helpful_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating_range"),
        sa.ForeignKeyConstraint(["user_id"], [f"{SCHEMA}.users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["listing_id"], [f"{SCHEMA}.listings.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["reservation_id"], [f"{SCHEMA}.reservations.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "reservation_id", name="uq_reviews_user_reservation"),
        schema=SCHEMA,
    )
    op.create_index("ix_rentals_reviews_listing_id", "reviews", ["listing_id"], schema=SCHEMA)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_rentals_reviews_listing_id", table_name="reviews", schema=SCHEMA)
    op.drop_table("reviews", schema=SCHEMA)
