from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from eventqr.core.database import get_db
from eventqr.schemas.stats import MessageResponse, StatsResponse
from eventqr.services.storage_service import storage_service

router = APIRouter()


@router.get("/stats", response_model=StatsResponse)
async def get_stats(db: AsyncSession = Depends(get_db)):
    """Dashboard counters"""
    return StatsResponse(**await storage_service.get_stats(db))


@router.post("/export", response_model=MessageResponse)
async def record_export():
    """
    Count one spreadsheet export.

    The file itself is built in the browser; the server only keeps an
    in-memory tally, which starts from zero after every restart.
    """
    storage_service.record_export()
    return MessageResponse(message="Export count incremented")
