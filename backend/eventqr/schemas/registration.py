from pydantic import Field, model_validator
from typing import Any, Dict, Optional
from datetime import datetime

from eventqr.schemas.base import CamelModel


class RegistrationCreate(CamelModel):
    event_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    position: Optional[str] = None
    email: Optional[str] = None
    custom_data: Dict[str, Any] = Field(default_factory=dict)


class RegistrationUpdate(CamelModel):
    """Attendee details only; a registration never moves to another event."""
    name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = Field(None, min_length=1)
    position: Optional[str] = None
    email: Optional[str] = None
    custom_data: Optional[Dict[str, Any]] = None

    @model_validator(mode='after')
    def reject_null_required(self):
        for field in ("name", "phone", "custom_data"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class RegistrationResponse(CamelModel):
    id: str
    event_id: str
    name: str
    phone: str
    position: Optional[str] = None
    email: Optional[str] = None
    custom_data: Dict[str, Any] = Field(default_factory=dict)
    registered_at: datetime
