from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from eventqr.core.database import get_db
from eventqr.core.exceptions import EventNotFoundError
from eventqr.core.logging_config import logger
from eventqr.models.user import User
from eventqr.modules.auth.dependencies import ensure_owner_or_admin, require_auth
from eventqr.schemas.event import EventCreate, EventResponse, EventUpdate
from eventqr.services.storage_service import storage_service

router = APIRouter()


@router.get("", response_model=List[EventResponse])
async def list_events(db: AsyncSession = Depends(get_db)):
    """All events, newest first"""
    return await storage_service.list_events(db)


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(event_id: str, db: AsyncSession = Depends(get_db)):
    """Public: the registration page loads its event through here"""
    event = await storage_service.get_event(db, event_id)
    if event is None:
        raise EventNotFoundError(event_id)
    return event


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    event_data: EventCreate,
    current_user: User = Depends(require_auth),
    db: AsyncSession = Depends(get_db)
):
    """Create an event owned by the current user"""
    event = await storage_service.create_event(db, event_data, user_id=current_user.id)
    logger.info(f"Event {event.id} created by {current_user.username}")
    return event


@router.patch("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: str,
    event_data: EventUpdate,
    current_user: User = Depends(require_auth),
    db: AsyncSession = Depends(get_db)
):
    """Owner or admin only"""
    event = await storage_service.get_event(db, event_id)
    if event is None:
        raise EventNotFoundError(event_id)
    ensure_owner_or_admin(current_user, event.user_id)

    updated = await storage_service.update_event(db, event_id, event_data)
    if updated is None:
        raise EventNotFoundError(event_id)
    return updated


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(
    event_id: str,
    current_user: User = Depends(require_auth),
    db: AsyncSession = Depends(get_db)
):
    """Owner or admin only. Registrations, QR settings and form schemas go with it."""
    event = await storage_service.get_event(db, event_id)
    if event is None:
        raise EventNotFoundError(event_id)
    ensure_owner_or_admin(current_user, event.user_id)

    if not await storage_service.delete_event(db, event_id):
        raise EventNotFoundError(event_id)

    logger.info(f"Event {event_id} deleted by {current_user.username}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
