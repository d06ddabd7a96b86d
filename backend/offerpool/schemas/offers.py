from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from offerpool.models.offers import DiscountKind


class AllocationRequest(BaseModel):
    user_id: str | None = Field(default=None, max_length=64)
    # Free-form; unrecognised countries fall back to the default country.
    country: str | None = Field(default=None, validation_alias=AliasChoices("country", "user_country"))
    category: str | None = None
    # Entries that are not offer ids are dropped when the exclusion set is built.
    exclude_ids: list[Any] | None = None


class CurrencyRead(BaseModel):
    code: str
    symbol: str


class OfferRead(BaseModel):
    id: str
    pool_id: str
    code: str
    merchant_name: str
    offer_text: str
    tracking_link: str
    discount: str
    discount_type: DiscountKind
    logo_url: str
    category: str
    currency_code: str
    currency_symbol: str
    expires_at: datetime
    terms_and_conditions: str = ""
    is_verified: bool = False
    thumbs_up: int = 0
    thumbs_down: int = 0
    country_code: str


class AllocationResponse(BaseModel):
    coupons: list[OfferRead]
    category: str
    country: str
    currency: CurrencyRead


class DegradedAllocationResponse(BaseModel):
    coupons: list[OfferRead]
    fallback: bool = True
    error: str


class OfferFeedbackCreate(BaseModel):
    user_id: str = Field(min_length=1, max_length=64)
    is_helpful: bool
    reason: str | None = Field(default=None, max_length=500)


class OfferFeedbackResult(BaseModel):
    offer_id: UUID
    is_helpful: bool
    thumbs_up: int
    thumbs_down: int


class PoolOfferRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    merchant_name: str
    offer_text: str
    coupon_code: str | None = None
    category: str
    country_code: str
    is_active: bool
    is_verified: bool
    expires_at: datetime
    thumbs_up: int
    thumbs_down: int
    times_shown: int
    updated_at: datetime


class OfferStatusUpdate(BaseModel):
    is_active: bool


class PoolPopulateRequest(BaseModel):
    per_category: int = Field(default=50, ge=1, le=500)
    country_code: str = Field(default="IN", min_length=2, max_length=2)
    replace_existing: bool = False


class PoolPopulateResult(BaseModel):
    inserted: int
    removed: int
    country_code: str
    categories: list[str]
