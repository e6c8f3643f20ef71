from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from eventqr.core.database import get_db
from eventqr.core.exceptions import EventNotFoundError, RegistrationNotFoundError
from eventqr.schemas.registration import RegistrationCreate, RegistrationResponse, RegistrationUpdate
from eventqr.services.storage_service import storage_service

router = APIRouter()

# Attendees register without an account, so none of these routes are gated.


@router.get("", response_model=List[RegistrationResponse])
async def list_registrations(
    event_id: Optional[str] = Query(None, alias="eventId"),
    db: AsyncSession = Depends(get_db)
):
    """Registrations newest first, optionally for one event"""
    return await storage_service.list_registrations(db, event_id=event_id)


@router.get("/{registration_id}", response_model=RegistrationResponse)
async def get_registration(registration_id: str, db: AsyncSession = Depends(get_db)):
    registration = await storage_service.get_registration(db, registration_id)
    if registration is None:
        raise RegistrationNotFoundError(registration_id)
    return registration


@router.post("", response_model=RegistrationResponse, status_code=status.HTTP_201_CREATED)
async def create_registration(
    registration_data: RegistrationCreate,
    db: AsyncSession = Depends(get_db)
):
    """Submit an attendee registration for an existing event"""
    if await storage_service.get_event(db, registration_data.event_id) is None:
        raise EventNotFoundError(registration_data.event_id)
    return await storage_service.create_registration(db, registration_data)


@router.patch("/{registration_id}", response_model=RegistrationResponse)
async def update_registration(
    registration_id: str,
    registration_data: RegistrationUpdate,
    db: AsyncSession = Depends(get_db)
):
    registration = await storage_service.update_registration(db, registration_id, registration_data)
    if registration is None:
        raise RegistrationNotFoundError(registration_id)
    return registration


@router.delete("/{registration_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_registration(registration_id: str, db: AsyncSession = Depends(get_db)):
    if not await storage_service.delete_registration(db, registration_id):
        raise RegistrationNotFoundError(registration_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
