from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventqr.core.database import get_db
from eventqr.core.exceptions import EventNotFoundError, QrSettingsNotFoundError
from eventqr.models.user import User
from eventqr.modules.auth.dependencies import require_auth
from eventqr.schemas.qr_settings import QrSettingsCreate, QrSettingsResponse, QrSettingsUpdate
from eventqr.services.storage_service import storage_service

router = APIRouter()


@router.post("", response_model=QrSettingsResponse, status_code=status.HTTP_201_CREATED)
async def create_qr_settings(
    settings_data: QrSettingsCreate,
    current_user: User = Depends(require_auth),
    db: AsyncSession = Depends(get_db)
):
    """Save QR designer settings for an event"""
    if await storage_service.get_event(db, settings_data.event_id) is None:
        raise EventNotFoundError(settings_data.event_id)
    return await storage_service.create_qr_settings(db, settings_data)


@router.get("/{event_id}", response_model=QrSettingsResponse)
async def get_qr_settings(
    event_id: str,
    current_user: User = Depends(require_auth),
    db: AsyncSession = Depends(get_db)
):
    """QR settings of an event (looked up by event id)"""
    qr_settings = await storage_service.get_qr_settings(db, event_id)
    if qr_settings is None:
        raise QrSettingsNotFoundError(event_id)
    return qr_settings


@router.patch("/{settings_id}", response_model=QrSettingsResponse)
async def update_qr_settings(
    settings_id: str,
    settings_data: QrSettingsUpdate,
    current_user: User = Depends(require_auth),
    db: AsyncSession = Depends(get_db)
):
    qr_settings = await storage_service.update_qr_settings(db, settings_id, settings_data)
    if qr_settings is None:
        raise QrSettingsNotFoundError(settings_id)
    return qr_settings


@router.delete("/{settings_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_qr_settings(
    settings_id: str,
    current_user: User = Depends(require_auth),
    db: AsyncSession = Depends(get_db)
):
    if not await storage_service.delete_qr_settings(db, settings_id):
        raise QrSettingsNotFoundError(settings_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
