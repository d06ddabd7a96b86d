"""add offer pool, exposures and feedback

Revision ID: 0001
Revises:
Create Date: 2026-10-17
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "offer_pool",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("merchant_name", sa.String(length=160), nullable=False),
        sa.Column("offer_text", sa.Text(), nullable=False),
        sa.Column("coupon_code", sa.String(length=80), nullable=True),
        sa.Column("tracking_link", sa.String(length=500), nullable=False),
        sa.Column("discount", sa.String(length=32), nullable=False),
        sa.Column("discount_type", sa.String(length=10), nullable=False, server_default="percentage"),
        sa.Column("category", sa.String(length=40), nullable=False),
        sa.Column("country_code", sa.String(length=2), nullable=False, server_default="IN"),
        sa.Column("currency_code", sa.String(length=3), nullable=True),
        sa.Column("currency_symbol", sa.String(length=8), nullable=True),
        sa.Column("logo_url", sa.String(length=500), nullable=True),
        sa.Column("terms_and_conditions", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("thumbs_up", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("thumbs_down", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("times_shown", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_validated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            onupdate=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_offer_pool_category", "offer_pool", ["category"])
    op.create_index("ix_offer_pool_country_code", "offer_pool", ["country_code"])
    op.create_index("ix_offer_pool_expires_at", "offer_pool", ["expires_at"])
    op.create_index("ix_offer_pool_category_country", "offer_pool", ["category", "country_code"])

    op.create_table(
        "offer_exposures",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column(
            "offer_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("offer_pool.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("shown_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_offer_exposures_user_id", "offer_exposures", ["user_id"])
    op.create_index("ix_offer_exposures_offer_id", "offer_exposures", ["offer_id"])
    op.create_index("ix_offer_exposures_user_shown_at", "offer_exposures", ["user_id", "shown_at"])

    op.create_table(
        "offer_feedback",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column(
            "offer_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("offer_pool.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("is_helpful", sa.Boolean(), nullable=False),
        sa.Column("reason", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("user_id", "offer_id", name="uq_offer_feedback_user_offer"),
    )
    op.create_index("ix_offer_feedback_user_id", "offer_feedback", ["user_id"])
    op.create_index("ix_offer_feedback_offer_id", "offer_feedback", ["offer_id"])


def downgrade() -> None:
    op.drop_index("ix_offer_feedback_offer_id", table_name="offer_feedback")
    op.drop_index("ix_offer_feedback_user_id", table_name="offer_feedback")
    op.drop_table("offer_feedback")
    op.drop_index("ix_offer_exposures_user_shown_at", table_name="offer_exposures")
    op.drop_index("ix_offer_exposures_offer_id", table_name="offer_exposures")
    op.drop_index("ix_offer_exposures_user_id", table_name="offer_exposures")
    op.drop_table("offer_exposures")
    op.drop_index("ix_offer_pool_category_country", table_name="offer_pool")
    op.drop_index("ix_offer_pool_expires_at", table_name="offer_pool")
    op.drop_index("ix_offer_pool_country_code", table_name="offer_pool")
    op.drop_index("ix_offer_pool_category", table_name="offer_pool")
    op.drop_table("offer_pool")
