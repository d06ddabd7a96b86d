import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from offerpool.db.base import Base
from offerpool.models.offers import DiscountKind, Offer
from offerpool.services import offer_pool


async def _session_factory() -> async_sessionmaker:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    return async_sessionmaker(engine, expire_on_commit=False)


def _offer(now: datetime, **overrides: object) -> Offer:
    values: dict[str, object] = {
        "merchant_name": "Swiggy",
        "offer_text": "20% off on food orders",
        "coupon_code": "SWIGGY20",
        "tracking_link": "https://www.swiggy.com",
        "discount": "20",
        "discount_type": DiscountKind.percentage,
        "category": "food",
        "country_code": "IN",
        "expires_at": now + timedelta(days=30),
        "is_active": True,
    }
    values.update(overrides)
    return Offer(**values)


@pytest.mark.anyio("asyncio")
async def test_eligibility_filter_applies_every_predicate() -> None:
    now = datetime.now(timezone.utc)
    SessionLocal = await _session_factory()
    async with SessionLocal() as session:
        session.add_all(
            [
                _offer(now, coupon_code="OK"),
                _offer(now, coupon_code="TWO-HOURS", expires_at=now + timedelta(hours=2)),
                _offer(now, coupon_code="HALF-HOUR", expires_at=now + timedelta(minutes=30)),
                _offer(now, coupon_code="EXPIRED", expires_at=now - timedelta(days=1)),
                _offer(now, coupon_code="INACTIVE", is_active=False),
                _offer(now, coupon_code="REJECTED", thumbs_down=3),
                _offer(now, coupon_code="DISPUTED", thumbs_down=2),
                _offer(now, coupon_code="TRAVEL", category="travel"),
            ]
        )
        await session.commit()

        offers = await offer_pool.fetch_eligible(session, "food", now=now, country_code="IN")

    codes = {offer.coupon_code for offer in offers}
    assert codes == {"OK", "TWO-HOURS", "DISPUTED"}


@pytest.mark.anyio("asyncio")
async def test_rejection_threshold_follows_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    now = datetime.now(timezone.utc)
    SessionLocal = await _session_factory()
    async with SessionLocal() as session:
        session.add_all([_offer(now, coupon_code="ONE", thumbs_down=1), _offer(now, coupon_code="ZERO")])
        await session.commit()

        monkeypatch.setattr(offer_pool.settings, "offer_rejection_threshold", 1)
        offers = await offer_pool.fetch_eligible(session, "food", now=now)

    assert [offer.coupon_code for offer in offers] == ["ZERO"]


@pytest.mark.anyio("asyncio")
async def test_candidates_prefer_verified_liked_then_least_shown() -> None:
    now = datetime.now(timezone.utc)
    SessionLocal = await _session_factory()
    async with SessionLocal() as session:
        session.add_all(
            [
                _offer(now, coupon_code="SHOWN-5", times_shown=5),
                _offer(now, coupon_code="SHOWN-0", times_shown=0),
                _offer(now, coupon_code="SHOWN-2", times_shown=2),
                _offer(now, coupon_code="LIKED", thumbs_up=4, times_shown=50),
                _offer(now, coupon_code="VERIFIED", is_verified=True, times_shown=99),
            ]
        )
        await session.commit()

        offers = await offer_pool.fetch_eligible(session, "food", now=now)

    assert [offer.coupon_code for offer in offers] == ["VERIFIED", "LIKED", "SHOWN-0", "SHOWN-2", "SHOWN-5"]


@pytest.mark.anyio("asyncio")
async def test_candidate_limit_bounds_the_query(monkeypatch: pytest.MonkeyPatch) -> None:
    now = datetime.now(timezone.utc)
    SessionLocal = await _session_factory()
    async with SessionLocal() as session:
        session.add_all([_offer(now, coupon_code=f"C{idx}") for idx in range(6)])
        await session.commit()

        monkeypatch.setattr(offer_pool.settings, "offer_candidate_limit", 2)
        offers = await offer_pool.fetch_eligible(session, "food", now=now)

    assert len(offers) == 2


def test_build_tiers_order_and_reference_dedup() -> None:
    tiers = offer_pool.build_tiers("US")
    assert [(tier.name, tier.country_code) for tier in tiers] == [
        ("exact", "US"),
        ("reference", "IN"),
        ("any", None),
    ]
    assert [tier.name for tier in offer_pool.build_tiers("IN")] == ["exact", "any"]
    assert offer_pool.build_tiers("IN", reference_country="gb")[1].country_code == "GB"


@pytest.mark.anyio("asyncio")
async def test_fallback_uses_reference_tier_without_mixing() -> None:
    now = datetime.now(timezone.utc)
    SessionLocal = await _session_factory()
    async with SessionLocal() as session:
        session.add_all(
            [
                _offer(now, coupon_code="IN-1", country_code="IN"),
                _offer(now, coupon_code="IN-2", country_code="IN"),
                _offer(now, coupon_code="GB-1", country_code="GB"),
            ]
        )
        await session.commit()

        tier, offers = await offer_pool.resolve_candidates(session, "food", country_code="US", now=now)

    assert tier == "reference"
    assert {offer.country_code for offer in offers} == {"IN"}
    assert {offer.coupon_code for offer in offers} == {"IN-1", "IN-2"}


@pytest.mark.anyio("asyncio")
async def test_exact_tier_wins_when_present() -> None:
    now = datetime.now(timezone.utc)
    SessionLocal = await _session_factory()
    async with SessionLocal() as session:
        session.add_all([_offer(now, coupon_code="IN-1"), _offer(now, coupon_code="US-1", country_code="US")])
        await session.commit()

        tier, offers = await offer_pool.resolve_candidates(session, "food", country_code="US", now=now)

    assert tier == "exact"
    assert [offer.coupon_code for offer in offers] == ["US-1"]


@pytest.mark.anyio("asyncio")
async def test_any_country_tier_is_last_resort() -> None:
    now = datetime.now(timezone.utc)
    SessionLocal = await _session_factory()
    async with SessionLocal() as session:
        session.add(_offer(now, coupon_code="AE-1", country_code="AE"))
        await session.commit()

        tier, offers = await offer_pool.resolve_candidates(session, "food", country_code="US", now=now)
        none_tier, none_offers = await offer_pool.resolve_candidates(session, "ott", country_code="US", now=now)

    assert tier == "any"
    assert [offer.coupon_code for offer in offers] == ["AE-1"]
    assert none_tier == "none"
    assert none_offers == []


@pytest.mark.anyio("asyncio")
async def test_increment_times_shown_is_a_store_level_add() -> None:
    now = datetime.now(timezone.utc)
    SessionLocal = await _session_factory()
    async with SessionLocal() as session:
        first = _offer(now, coupon_code="A", times_shown=4)
        second = _offer(now, coupon_code="B")
        untouched = _offer(now, coupon_code="C", times_shown=1)
        session.add_all([first, second, untouched])
        await session.commit()

        await offer_pool.increment_times_shown(session, [first.id, second.id], now=now)
        await session.commit()
        for offer in (first, second, untouched):
            await session.refresh(offer)

    assert (first.times_shown, second.times_shown, untouched.times_shown) == (5, 1, 1)


@pytest.mark.anyio("asyncio")
async def test_store_timeout_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(offer_pool.settings, "offer_query_timeout_seconds", 0.01)
    with pytest.raises(asyncio.TimeoutError):
        await offer_pool.with_store_timeout(asyncio.sleep(1))
