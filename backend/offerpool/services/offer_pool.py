"""Pool Store access: the eligibility predicate as SQL and the geographic tier cascade."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TypeVar
from uuid import UUID

from sqlalchemy import Select, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from offerpool.core.config import settings
from offerpool.models.offers import Offer

logger = logging.getLogger(__name__)

T = TypeVar("T")

TIER_EXACT = "exact"
TIER_REFERENCE = "reference"
TIER_ANY = "any"
TIER_NONE = "none"


def _now() -> datetime:
    return datetime.now(timezone.utc)


async def with_store_timeout(awaitable: Awaitable[T]) -> T:
    """Bound a single store round-trip; raises ``asyncio.TimeoutError`` when it runs long."""
    return await asyncio.wait_for(awaitable, timeout=settings.offer_query_timeout_seconds)


def eligible_offers_query(category: str, *, now: datetime, country_code: str | None = None) -> Select[tuple[Offer]]:
    expiry_floor = now + timedelta(minutes=settings.offer_expiry_margin_minutes)
    stmt = select(Offer).where(
        Offer.is_active.is_(True),
        Offer.category == category,
        Offer.expires_at > expiry_floor,
        Offer.thumbs_down < settings.offer_rejection_threshold,
    )
    if country_code is not None:
        stmt = stmt.where(Offer.country_code == country_code)
    return stmt.order_by(
        Offer.is_verified.desc(),
        Offer.thumbs_up.desc(),
        Offer.times_shown.asc(),
        Offer.created_at.asc(),
    ).limit(settings.offer_candidate_limit)


async def fetch_eligible(
    session: AsyncSession, category: str, *, now: datetime, country_code: str | None = None
) -> list[Offer]:
    result = await with_store_timeout(
        session.execute(eligible_offers_query(category, now=now, country_code=country_code))
    )
    return list(result.scalars().all())


@dataclass(frozen=True)
class TierResolver:
    """One step of the fallback cascade; ``country_code=None`` means any country."""

    name: str
    country_code: str | None

    async def candidates(self, session: AsyncSession, category: str, *, now: datetime) -> list[Offer]:
        return await fetch_eligible(session, category, now=now, country_code=self.country_code)


def build_tiers(country_code: str, *, reference_country: str | None = None) -> list[TierResolver]:
    reference = (reference_country or settings.offer_reference_country).strip().upper()
    tiers = [TierResolver(TIER_EXACT, country_code)]
    if reference and reference != country_code:
        tiers.append(TierResolver(TIER_REFERENCE, reference))
    tiers.append(TierResolver(TIER_ANY, None))
    return tiers


async def resolve_candidates(
    session: AsyncSession,
    category: str,
    *,
    country_code: str,
    now: datetime,
    tiers: Sequence[TierResolver] | None = None,
) -> tuple[str, list[Offer]]:
    """Return the first non-empty tier's candidates unmodified; tiers are never mixed."""
    for tier in tiers if tiers is not None else build_tiers(country_code):
        offers = await tier.candidates(session, category, now=now)
        if offers:
            return tier.name, offers
        logger.info(
            "offer_tier_empty",
            extra={"tier": tier.name, "tier_country": tier.country_code, "category": category},
        )
    return TIER_NONE, []


async def get_offer(session: AsyncSession, offer_id: UUID) -> Offer | None:
    return await session.get(Offer, offer_id)


async def set_offer_active(session: AsyncSession, offer: Offer, *, is_active: bool) -> Offer:
    offer.is_active = is_active
    offer.updated_at = _now()
    session.add(offer)
    await session.commit()
    await session.refresh(offer)
    return offer


async def increment_times_shown(session: AsyncSession, offer_ids: Sequence[UUID], *, now: datetime) -> None:
    """Store-level ``times_shown = times_shown + 1``; no read-modify-write in Python."""
    if not offer_ids:
        return
    await session.execute(
        update(Offer)
        .where(Offer.id.in_(list(offer_ids)))
        .values(times_shown=Offer.times_shown + 1, updated_at=now)
        .execution_options(synchronize_session=False)
    )
