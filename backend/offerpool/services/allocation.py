from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from offerpool.core import metrics
from offerpool.core.config import settings
from offerpool.models.offers import DiscountKind, Offer
from offerpool.schemas.offers import (
    AllocationRequest,
    AllocationResponse,
    CurrencyRead,
    DegradedAllocationResponse,
    OfferRead,
)
from offerpool.services import exposure, offer_pool
from offerpool.services.countries import Currency, currency_for, normalize_category, resolve_country_code
from offerpool.services.logos import merchant_logo
from offerpool.services.selection import select_batch

logger = logging.getLogger(__name__)

STORE_ERRORS: tuple[type[BaseException], ...] = (SQLAlchemyError, OSError, asyncio.TimeoutError)

NO_ELIGIBLE_OFFERS = "No eligible offers available"
STORE_TIMEOUT = "Offer store timed out"
STORE_UNAVAILABLE = "Offer store unavailable"
PLACEHOLDER_VALIDITY = timedelta(days=7)


class MissingUserError(ValueError):
    pass


@dataclass(frozen=True)
class _Placeholder:
    id: str
    code: str
    merchant_name: str
    offer_text: str
    discount: str
    category: str


PLACEHOLDER_OFFERS: tuple[_Placeholder, ...] = (
    _Placeholder("fallback-1", "SAVE15", "Shopping Deal", "Get 15% off on your purchase", "15", "fashion"),
    _Placeholder("fallback-2", "WELCOME10", "Everyday Savings", "Get 10% off on your next order", "10", "food"),
)


@dataclass
class AllocationOutcome:
    response: AllocationResponse | DegradedAllocationResponse
    user_id: str
    tier: str
    offer_ids: list[UUID] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return isinstance(self.response, DegradedAllocationResponse)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def placeholder_offers(*, now: datetime | None = None) -> list[OfferRead]:
    expires_at = (now or _now()) + PLACEHOLDER_VALIDITY
    default_country = settings.offer_default_country
    currency = currency_for(default_country)
    return [
        OfferRead(
            id=item.id,
            pool_id=item.id,
            code=item.code,
            merchant_name=item.merchant_name,
            offer_text=item.offer_text,
            tracking_link="https://www.example.com",
            discount=item.discount,
            discount_type=DiscountKind.percentage,
            logo_url="",
            category=item.category,
            currency_code=currency.code,
            currency_symbol=currency.symbol,
            expires_at=expires_at,
            terms_and_conditions="Terms and conditions apply.",
            country_code=default_country,
        )
        for item in PLACEHOLDER_OFFERS
    ]


def offer_to_read(offer: Offer, *, country_code: str, currency: Currency) -> OfferRead:
    return OfferRead(
        id=str(offer.id),
        pool_id=str(offer.id),
        code=offer.coupon_code or "",
        merchant_name=offer.merchant_name,
        offer_text=offer.offer_text,
        tracking_link=offer.tracking_link,
        discount=offer.discount,
        discount_type=offer.discount_type or DiscountKind.percentage,
        logo_url=merchant_logo(offer.merchant_name, offer.logo_url),
        category=offer.category,
        currency_code=offer.currency_code or currency.code,
        currency_symbol=offer.currency_symbol or currency.symbol,
        expires_at=offer.expires_at,
        terms_and_conditions=offer.terms_and_conditions or "",
        is_verified=bool(offer.is_verified),
        thumbs_up=offer.thumbs_up or 0,
        thumbs_down=offer.thumbs_down or 0,
        country_code=offer.country_code or country_code,
    )


def _degraded(user_id: str, *, error: str, now: datetime) -> AllocationOutcome:
    metrics.record_allocation_degraded()
    return AllocationOutcome(
        response=DegradedAllocationResponse(coupons=placeholder_offers(now=now), error=error),
        user_id=user_id,
        tier=offer_pool.TIER_NONE,
    )


def _store_error_message(exc: BaseException) -> str:
    # Driver text (SQL, parameters, hosts) is logged, never returned.
    if isinstance(exc, asyncio.TimeoutError):
        return STORE_TIMEOUT
    return STORE_UNAVAILABLE


async def allocate_offers(
    session: AsyncSession,
    request: AllocationRequest,
    *,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> AllocationOutcome:
    """Pick up to ``offer_batch_size`` offers for one user.

    Never raises for store trouble: outages, timeouts and an empty pool all come
    back as a degraded outcome carrying the placeholder set. Only a missing user
    identity raises, before any store access.
    """
    user_id = (request.user_id or "").strip()
    if not user_id:
        raise MissingUserError("User ID is required")

    now = now or _now()
    country_code = resolve_country_code(request.country)
    currency = currency_for(country_code)
    category = normalize_category(request.category)
    metrics.record_allocation()

    try:
        tier, candidates = await offer_pool.resolve_candidates(
            session, category, country_code=country_code, now=now
        )
        if not candidates:
            logger.info("offer_pool_exhausted", extra={"category": category, "country": country_code})
            return _degraded(user_id, error=NO_ELIGIBLE_OFFERS, now=now)
        recent_ids = await exposure.recently_shown_offer_ids(session, user_id, now=now)
    except STORE_ERRORS as exc:
        logger.warning(
            "offer_allocation_degraded",
            extra={"user_id": user_id, "category": category, "country": country_code, "error": repr(exc)},
        )
        return _degraded(user_id, error=_store_error_message(exc), now=now)

    excluded = exposure.build_exclusion_set(recent_ids, request.exclude_ids)
    selection = select_batch(candidates, excluded, batch_size=settings.offer_batch_size, rng=rng)
    if selection.cooldown_relaxed:
        metrics.record_cooldown_relaxed()

    logger.info(
        "offer_allocation",
        extra={
            "user_id": user_id,
            "category": category,
            "country": country_code,
            "tier": tier,
            "candidate_count": len(candidates),
            "excluded_count": len(excluded),
            "offer_count": len(selection.offers),
            "cooldown_relaxed": selection.cooldown_relaxed,
        },
    )
    return AllocationOutcome(
        response=AllocationResponse(
            coupons=[offer_to_read(offer, country_code=country_code, currency=currency) for offer in selection.offers],
            category=category,
            country=country_code,
            currency=CurrencyRead(code=currency.code, symbol=currency.symbol),
        ),
        user_id=user_id,
        tier=tier,
        offer_ids=[offer.id for offer in selection.offers],
    )
