from pydantic import Field, model_validator
from typing import Any, Dict, List, Optional
from datetime import datetime

from eventqr.schemas.base import CamelModel

# Blob fields are stored as given; their layout belongs to the QR designer UI.

QR_SIZE_MIN = 100
QR_SIZE_MAX = 1000


class QrSettingsCreate(CamelModel):
    event_id: str = Field(..., min_length=1)
    background_image: Optional[str] = None
    qr_size: int = Field(200, ge=QR_SIZE_MIN, le=QR_SIZE_MAX)
    qr_position: Dict[str, Any] = Field(default_factory=lambda: {"x": 0, "y": 0})
    text_overlays: List[Any] = Field(default_factory=list)
    custom_fields: Dict[str, Any] = Field(default_factory=dict)


class QrSettingsUpdate(CamelModel):
    background_image: Optional[str] = None
    qr_size: Optional[int] = Field(None, ge=QR_SIZE_MIN, le=QR_SIZE_MAX)
    qr_position: Optional[Dict[str, Any]] = None
    text_overlays: Optional[List[Any]] = None
    custom_fields: Optional[Dict[str, Any]] = None

    @model_validator(mode='after')
    def reject_null_required(self):
        for field in ("qr_size", "qr_position", "text_overlays", "custom_fields"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class QrSettingsResponse(CamelModel):
    id: str
    event_id: str
    background_image: Optional[str] = None
    qr_size: Optional[int] = None
    qr_position: Optional[Dict[str, Any]] = None
    text_overlays: Optional[List[Any]] = None
    custom_fields: Optional[Dict[str, Any]] = None
    created_at: datetime
    updated_at: datetime
