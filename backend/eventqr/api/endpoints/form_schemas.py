from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventqr.core.database import get_db
from eventqr.core.exceptions import EventNotFoundError, FormSchemaNotFoundError
from eventqr.models.user import User
from eventqr.modules.auth.dependencies import require_auth
from eventqr.schemas.form_schema import FormSchemaCreate, FormSchemaResponse, FormSchemaUpdate
from eventqr.services.storage_service import storage_service

router = APIRouter()


@router.post("", response_model=FormSchemaResponse, status_code=status.HTTP_201_CREATED)
async def create_form_schema(
    schema_data: FormSchemaCreate,
    current_user: User = Depends(require_auth),
    db: AsyncSession = Depends(get_db)
):
    """Save the form builder output for an event"""
    if await storage_service.get_event(db, schema_data.event_id) is None:
        raise EventNotFoundError(schema_data.event_id)
    return await storage_service.create_form_schema(db, schema_data)


@router.get("/{event_id}", response_model=FormSchemaResponse)
async def get_form_schema(event_id: str, db: AsyncSession = Depends(get_db)):
    """Public: attendees' registration page renders its fields from this"""
    form_schema = await storage_service.get_form_schema(db, event_id)
    if form_schema is None:
        raise FormSchemaNotFoundError(event_id)
    return form_schema


@router.patch("/{schema_id}", response_model=FormSchemaResponse)
async def update_form_schema(
    schema_id: str,
    schema_data: FormSchemaUpdate,
    current_user: User = Depends(require_auth),
    db: AsyncSession = Depends(get_db)
):
    form_schema = await storage_service.update_form_schema(db, schema_id, schema_data)
    if form_schema is None:
        raise FormSchemaNotFoundError(schema_id)
    return form_schema


@router.delete("/{schema_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_form_schema(
    schema_id: str,
    current_user: User = Depends(require_auth),
    db: AsyncSession = Depends(get_db)
):
    if not await storage_service.delete_form_schema(db, schema_id):
        raise FormSchemaNotFoundError(schema_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
