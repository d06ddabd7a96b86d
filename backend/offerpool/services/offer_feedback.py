from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from offerpool.core import metrics
from offerpool.models.offers import Offer, OfferFeedback
from offerpool.schemas.offers import OfferFeedbackCreate, OfferFeedbackResult


class OfferNotFoundError(LookupError):
    pass


class DuplicateFeedbackError(Exception):
    pass


async def submit_feedback(session: AsyncSession, offer_id: UUID, payload: OfferFeedbackCreate) -> OfferFeedbackResult:
    """Store one vote per (user, offer) and bump the matching tally in the same transaction."""
    offer = await session.get(Offer, offer_id)
    if offer is None:
        raise OfferNotFoundError(str(offer_id))

    user_id = payload.user_id.strip()
    reason = (payload.reason or "").strip() or None
    tally = Offer.thumbs_up if payload.is_helpful else Offer.thumbs_down
    try:
        session.add(OfferFeedback(user_id=user_id, offer_id=offer_id, is_helpful=payload.is_helpful, reason=reason))
        await session.flush()
        await session.execute(
            update(Offer)
            .where(Offer.id == offer_id)
            .values({tally.key: tally + 1, Offer.updated_at.key: datetime.now(timezone.utc)})
            .execution_options(synchronize_session=False)
        )
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise DuplicateFeedbackError(user_id) from exc

    await session.refresh(offer)
    metrics.record_offer_feedback()
    return OfferFeedbackResult(
        offer_id=offer.id,
        is_helpful=payload.is_helpful,
        thumbs_up=offer.thumbs_up,
        thumbs_down=offer.thumbs_down,
    )
