"""Synthetic pool population.

Produces well-formed ``offer_pool`` rows from small per-category merchant
tables. Pool-level rows carry a far-future expiry sentinel; short expiries of
individual claims are tracked elsewhere.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from offerpool.models.offers import DiscountKind, Offer
from offerpool.services.countries import currency_for

logger = logging.getLogger(__name__)

POOL_EXPIRY_SENTINEL = datetime(2099, 12, 31, 23, 59, 59, tzinfo=timezone.utc)
INSERT_BATCH_SIZE = 100


@dataclass(frozen=True)
class MerchantSeed:
    name: str
    code: str


@dataclass(frozen=True)
class CategoryCatalog:
    category: str
    merchants: tuple[MerchantSeed, ...]
    discounts: tuple[int, ...]
    # Discounts at or below this value are percentages, above it flat amounts.
    max_percentage: int
    subjects: tuple[str, ...]
    percentage_template: str
    flat_template: str


CATALOGS: tuple[CategoryCatalog, ...] = (
    CategoryCatalog(
        category="ott",
        merchants=(
            MerchantSeed("Netflix India", "NETFLIX"),
            MerchantSeed("Amazon Prime Video", "PRIME"),
            MerchantSeed("Disney+ Hotstar", "HOTSTAR"),
            MerchantSeed("ZEE5", "ZEE5"),
            MerchantSeed("SonyLIV", "SONYLIV"),
            MerchantSeed("Voot", "VOOT"),
            MerchantSeed("MX Player", "MXPLAYER"),
            MerchantSeed("Jio Cinema", "JIOCINEMA"),
            MerchantSeed("ALTBalaji", "ALTBALAJI"),
            MerchantSeed("Eros Now", "EROSNOW"),
        ),
        discounts=(150, 200, 250, 300, 350, 400, 20, 25, 30, 35, 40, 50),
        max_percentage=50,
        subjects=("annual", "monthly", "quarterly"),
        percentage_template="Get {discount}% off on {subject} subscription",
        flat_template="Flat {symbol}{discount} off on premium plan",
    ),
    CategoryCatalog(
        category="movies",
        merchants=(
            MerchantSeed("BookMyShow", "BMS"),
            MerchantSeed("PVR Cinemas", "PVR"),
            MerchantSeed("INOX Movies", "INOX"),
            MerchantSeed("Cinepolis India", "CINEPOLIS"),
            MerchantSeed("Carnival Cinemas", "CARNIVAL"),
        ),
        discounts=(100, 150, 200, 250, 300, 15, 20, 25, 30, 40),
        max_percentage=40,
        subjects=("movie tickets",),
        percentage_template="{discount}% off on {subject}",
        flat_template="Flat {symbol}{discount} off on tickets booking",
    ),
    CategoryCatalog(
        category="electronics",
        merchants=(
            MerchantSeed("Flipkart", "FLIP"),
            MerchantSeed("Amazon India", "AMZN"),
            MerchantSeed("Croma", "CROMA"),
            MerchantSeed("Vijay Sales", "VIJAY"),
            MerchantSeed("Reliance Digital", "RELIANCE"),
            MerchantSeed("Tata CLiQ", "TATACLIQ"),
        ),
        discounts=(500, 1000, 1500, 2000, 3000, 5000, 10, 15, 20, 25, 30),
        max_percentage=30,
        subjects=("smartphones", "laptops", "tablets", "TVs", "accessories"),
        percentage_template="{discount}% off on {subject}",
        flat_template="Flat {symbol}{discount} off on electronics",
    ),
    CategoryCatalog(
        category="fashion",
        merchants=(
            MerchantSeed("Myntra", "MYNTRA"),
            MerchantSeed("Ajio", "AJIO"),
            MerchantSeed("Nykaa Fashion", "NYKAA"),
            MerchantSeed("Tata CLiQ Fashion", "TATACLIQ"),
            MerchantSeed("Lifestyle", "LIFESTYLE"),
        ),
        discounts=(300, 500, 700, 1000, 20, 25, 30, 40, 50, 60),
        max_percentage=60,
        subjects=("clothing", "footwear", "accessories", "ethnic wear"),
        percentage_template="{discount}% off on {subject}",
        flat_template="Flat {symbol}{discount} off on fashion",
    ),
    CategoryCatalog(
        category="food",
        merchants=(
            MerchantSeed("Swiggy", "SWIGGY"),
            MerchantSeed("Zomato", "ZOMATO"),
            MerchantSeed("Dominos", "DOMINOS"),
            MerchantSeed("Pizza Hut", "PIZZAHUT"),
            MerchantSeed("KFC", "KFC"),
        ),
        discounts=(100, 150, 200, 250, 300, 20, 30, 40, 50, 60),
        max_percentage=60,
        subjects=("food orders",),
        percentage_template="{discount}% off on {subject}",
        flat_template="Flat {symbol}{discount} off on orders",
    ),
    CategoryCatalog(
        category="travel",
        merchants=(
            MerchantSeed("MakeMyTrip", "MMT"),
            MerchantSeed("Goibibo", "GOIBIBO"),
            MerchantSeed("Cleartrip", "CLEAR"),
            MerchantSeed("Yatra", "YATRA"),
            MerchantSeed("EaseMyTrip", "EMT"),
        ),
        discounts=(500, 1000, 1500, 2000, 3000, 4000, 15, 20, 25, 30, 35),
        max_percentage=35,
        subjects=("flights", "hotels", "holidays", "trains"),
        percentage_template="{discount}% off on {subject}",
        flat_template="Flat {symbol}{discount} off on bookings",
    ),
)


def _catalog_entries(catalog: CategoryCatalog, *, per_category: int, country_code: str) -> list[dict[str, Any]]:
    currency = currency_for(country_code)
    entries: list[dict[str, Any]] = []
    for idx in range(per_category):
        merchant = catalog.merchants[idx % len(catalog.merchants)]
        discount = catalog.discounts[idx % len(catalog.discounts)]
        is_percentage = discount <= catalog.max_percentage
        subject = catalog.subjects[idx % len(catalog.subjects)]
        template = catalog.percentage_template if is_percentage else catalog.flat_template
        entries.append(
            {
                "merchant_name": merchant.name,
                "offer_text": template.format(discount=discount, subject=subject, symbol=currency.symbol),
                "tracking_link": f"https://www.{merchant.code.lower()}.com",
                "coupon_code": f"{merchant.code}{discount}{idx}",
                "discount": str(discount),
                "discount_type": DiscountKind.percentage if is_percentage else DiscountKind.flat,
                "logo_url": None,
                "category": catalog.category,
                "currency_code": currency.code,
                "currency_symbol": currency.symbol,
                "country_code": country_code,
                "expires_at": POOL_EXPIRY_SENTINEL,
                "is_active": True,
            }
        )
    return entries


def build_pool_entries(*, per_category: int, country_code: str = "IN") -> list[dict[str, Any]]:
    code = country_code.strip().upper()
    entries: list[dict[str, Any]] = []
    for catalog in CATALOGS:
        entries.extend(_catalog_entries(catalog, per_category=per_category, country_code=code))
    return entries


async def populate_pool(
    session: AsyncSession,
    *,
    per_category: int,
    country_code: str = "IN",
    replace_existing: bool = False,
) -> tuple[int, int]:
    """Insert generated rows; returns ``(inserted, removed)``."""
    code = country_code.strip().upper()
    removed = 0
    if replace_existing:
        removed = int(
            (await session.scalar(select(func.count()).select_from(Offer).where(Offer.country_code == code))) or 0
        )
        await session.execute(delete(Offer).where(Offer.country_code == code))

    entries = build_pool_entries(per_category=per_category, country_code=code)
    for start in range(0, len(entries), INSERT_BATCH_SIZE):
        batch = entries[start : start + INSERT_BATCH_SIZE]
        session.add_all([Offer(**entry) for entry in batch])
        await session.flush()
    await session.commit()

    logger.info(
        "offer_pool_populated",
        extra={"country": code, "inserted": len(entries), "removed": removed, "per_category": per_category},
    )
    return len(entries), removed
