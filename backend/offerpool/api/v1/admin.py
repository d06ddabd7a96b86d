from __future__ import annotations

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from offerpool.core.dependencies import Principal, require_admin
from offerpool.db.session import get_session
from offerpool.schemas.offers import (
    OfferStatusUpdate,
    PoolOfferRead,
    PoolPopulateRequest,
    PoolPopulateResult,
)
from offerpool.services import offer_pool
from offerpool.services import pool_population
from offerpool.services.pool_population import CATALOGS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/offers", tags=["admin"])

SessionDep = Annotated[AsyncSession, Depends(get_session)]
AdminDep = Annotated[Principal, Depends(require_admin)]


@router.post("/pool/populate", status_code=status.HTTP_201_CREATED)
async def populate_offer_pool(payload: PoolPopulateRequest, session: SessionDep, admin: AdminDep) -> PoolPopulateResult:
    country_code = payload.country_code.strip().upper()
    inserted, removed = await pool_population.populate_pool(
        session,
        per_category=payload.per_category,
        country_code=country_code,
        replace_existing=payload.replace_existing,
    )
    logger.info("offer_pool_populated_by_admin", extra={"admin": admin.subject, "inserted": inserted})
    return PoolPopulateResult(
        inserted=inserted,
        removed=removed,
        country_code=country_code,
        categories=[catalog.category for catalog in CATALOGS],
    )


@router.patch("/{offer_id}/status")
async def update_offer_status(
    offer_id: UUID, payload: OfferStatusUpdate, session: SessionDep, admin: AdminDep
) -> PoolOfferRead:
    offer = await offer_pool.get_offer(session, offer_id)
    if offer is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Offer not found")
    offer = await offer_pool.set_offer_active(session, offer, is_active=payload.is_active)
    logger.info(
        "offer_status_changed",
        extra={"admin": admin.subject, "offer_id": str(offer_id), "is_active": payload.is_active},
    )
    return PoolOfferRead.model_validate(offer, from_attributes=True)
