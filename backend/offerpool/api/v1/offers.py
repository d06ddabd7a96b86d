from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from offerpool.db.session import get_session
from offerpool.schemas.offers import (
    AllocationRequest,
    AllocationResponse,
    DegradedAllocationResponse,
    OfferFeedbackCreate,
    OfferFeedbackResult,
)
from offerpool.services import allocation as allocation_service
from offerpool.services import exposure as exposure_service
from offerpool.services import offer_feedback as feedback_service

router = APIRouter(prefix="/offers", tags=["offers"])

SessionDep = Annotated[AsyncSession, Depends(get_session)]

_DETAIL_OFFER_NOT_FOUND = "Offer not found"
_DETAIL_DUPLICATE_FEEDBACK = "Feedback already submitted for this offer"


@router.post("/allocate", response_model=AllocationResponse | DegradedAllocationResponse)
async def allocate_offers(
    payload: AllocationRequest,
    background_tasks: BackgroundTasks,
    session: SessionDep,
) -> AllocationResponse | DegradedAllocationResponse:
    try:
        outcome = await allocation_service.allocate_offers(session, payload)
    except allocation_service.MissingUserError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    engine = session.bind
    # Release the read connection before the exposure write runs on its own session.
    await session.close()
    if outcome.offer_ids and engine is not None:
        background_tasks.add_task(
            exposure_service.record_exposures_safely, engine, outcome.user_id, list(outcome.offer_ids)
        )
    return outcome.response


@router.post("/{offer_id}/feedback", status_code=status.HTTP_201_CREATED)
async def submit_offer_feedback(
    offer_id: UUID,
    payload: OfferFeedbackCreate,
    session: SessionDep,
) -> OfferFeedbackResult:
    try:
        return await feedback_service.submit_feedback(session, offer_id, payload)
    except feedback_service.OfferNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_DETAIL_OFFER_NOT_FOUND) from exc
    except feedback_service.DuplicateFeedbackError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=_DETAIL_DUPLICATE_FEEDBACK) from exc
