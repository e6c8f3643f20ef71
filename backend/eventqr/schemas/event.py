from pydantic import Field, model_validator
from typing import Optional
from datetime import datetime

from eventqr.schemas.base import CamelModel


class EventCreate(CamelModel):
    # userId and the URL fields are assigned server-side
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    event_date: Optional[str] = None
    event_time: Optional[str] = None
    is_active: bool = True


class EventUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    event_date: Optional[str] = None
    event_time: Optional[str] = None
    is_active: Optional[bool] = None

    @model_validator(mode='after')
    def reject_null_required(self):
        for field in ("name", "is_active"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class EventResponse(CamelModel):
    id: str
    user_id: str
    name: str
    description: Optional[str] = None
    event_date: Optional[str] = None
    event_time: Optional[str] = None
    qr_code_url: Optional[str] = None
    registration_url: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
