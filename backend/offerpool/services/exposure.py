from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from offerpool.core import metrics
from offerpool.core.config import settings
from offerpool.db.session import session_factory_for
from offerpool.models.offers import ExposureRecord
from offerpool.services import offer_pool

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_offer_id(raw: object) -> UUID | None:
    if isinstance(raw, UUID):
        return raw
    try:
        return UUID(str(raw).strip())
    except (TypeError, ValueError):
        return None


async def recently_shown_offer_ids(session: AsyncSession, user_id: str, *, now: datetime) -> set[UUID]:
    since = now - timedelta(days=settings.offer_cooldown_days)
    result = await offer_pool.with_store_timeout(
        session.execute(
            select(ExposureRecord.offer_id)
            .where(ExposureRecord.user_id == user_id, ExposureRecord.shown_at >= since)
            .distinct()
        )
    )
    return set(result.scalars().all())


def build_exclusion_set(recent_ids: Iterable[UUID], exclude_ids: Iterable[object] | None) -> set[UUID]:
    """Cooldown ids plus caller-supplied ids; malformed caller ids are ignored."""
    excluded = set(recent_ids)
    limit = settings.offer_max_exclude_ids
    for idx, raw in enumerate(exclude_ids or ()):
        if idx >= limit:
            break
        parsed = _parse_offer_id(raw)
        if parsed is not None:
            excluded.add(parsed)
    return excluded


async def record_exposures(
    session: AsyncSession, user_id: str, offer_ids: Sequence[UUID], *, now: datetime | None = None
) -> None:
    if not offer_ids:
        return
    now = now or _now()
    await offer_pool.increment_times_shown(session, offer_ids, now=now)
    session.add_all([ExposureRecord(user_id=user_id, offer_id=offer_id, shown_at=now) for offer_id in offer_ids])
    await session.commit()


async def record_exposures_safely(engine: AsyncEngine, user_id: str, offer_ids: Sequence[UUID]) -> None:
    """Background-task entry point: failures are logged and dropped, never retried."""
    if not offer_ids:
        return
    session_local = session_factory_for(engine)
    try:
        async with session_local() as session:
            await record_exposures(session, user_id, offer_ids)
    except Exception as exc:
        metrics.record_exposure_write_failure()
        logger.warning(
            "offer_exposure_record_failed",
            extra={"user_id": user_id, "offer_count": len(offer_ids), "error": str(exc)},
        )
