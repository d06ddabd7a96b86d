import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Index, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from offerpool.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DiscountKind(str, enum.Enum):
    percentage = "percentage"
    flat = "flat"


class Offer(Base):
    __tablename__ = "offer_pool"
    __table_args__ = (Index("ix_offer_pool_category_country", "category", "country_code"),)

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    merchant_name: Mapped[str] = mapped_column(String(160), nullable=False)
    offer_text: Mapped[str] = mapped_column(Text, nullable=False)
    coupon_code: Mapped[str | None] = mapped_column(String(80), nullable=True)
    tracking_link: Mapped[str] = mapped_column(String(500), nullable=False)
    discount: Mapped[str] = mapped_column(String(32), nullable=False)
    discount_type: Mapped[DiscountKind] = mapped_column(
        Enum(DiscountKind, native_enum=False),
        nullable=False,
        default=DiscountKind.percentage,
    )
    category: Mapped[str] = mapped_column(String(40), nullable=False, index=True)
    country_code: Mapped[str] = mapped_column(String(2), nullable=False, default="IN", index=True)
    currency_code: Mapped[str | None] = mapped_column(String(3), nullable=True)
    currency_symbol: Mapped[str | None] = mapped_column(String(8), nullable=True)
    logo_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    terms_and_conditions: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    thumbs_up: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    thumbs_down: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    times_shown: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_validated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class ExposureRecord(Base):
    __tablename__ = "offer_exposures"
    __table_args__ = (Index("ix_offer_exposures_user_shown_at", "user_id", "shown_at"),)

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    offer_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("offer_pool.id", ondelete="CASCADE"), nullable=False, index=True
    )
    shown_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


class OfferFeedback(Base):
    __tablename__ = "offer_feedback"
    __table_args__ = (UniqueConstraint("user_id", "offer_id", name="uq_offer_feedback_user_offer"),)

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    offer_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("offer_pool.id", ondelete="CASCADE"), nullable=False, index=True
    )
    is_helpful: Mapped[bool] = mapped_column(Boolean, nullable=False)
    reason: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
