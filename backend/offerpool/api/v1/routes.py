import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from offerpool.api.v1 import admin
from offerpool.api.v1 import offers
from offerpool.core.metrics import snapshot as metrics_snapshot
from offerpool.db.session import get_session
from offerpool.services.allocation import STORE_ERRORS, STORE_UNAVAILABLE
from offerpool.services.offer_pool import with_store_timeout

logger = logging.getLogger(__name__)

api_router = APIRouter()

api_router.include_router(offers.router)
api_router.include_router(admin.router)


@api_router.get("/health", tags=["health"])
def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@api_router.get("/health/ready", tags=["health"])
async def readiness(session: AsyncSession = Depends(get_session)) -> dict[str, str]:
    try:
        await with_store_timeout(session.execute(text("SELECT 1")))
    except STORE_ERRORS as exc:
        logger.warning("readiness_store_check_failed", extra={"error": repr(exc)})
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=STORE_UNAVAILABLE) from exc
    return {"status": "ready"}


@api_router.get("/metrics", tags=["metrics"])
def metrics() -> dict:
    return metrics_snapshot()
