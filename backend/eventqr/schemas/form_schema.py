from pydantic import Field, model_validator
from typing import Any, Dict, Optional
from datetime import datetime

from eventqr.schemas.base import CamelModel


def _default_responsive_settings() -> Dict[str, bool]:
    return {"mobile": True, "tablet": True, "desktop": True}


class FormSchemaCreate(CamelModel):
    event_id: str = Field(..., min_length=1)
    # Field definitions from the form builder, kept as an opaque document
    definition: Any = Field(..., alias="schema")
    layout: Dict[str, Any] = Field(default_factory=dict)
    responsive_settings: Dict[str, Any] = Field(default_factory=_default_responsive_settings)

    @model_validator(mode='after')
    def require_definition(self):
        if self.definition is None:
            raise ValueError("schema cannot be null")
        return self


class FormSchemaUpdate(CamelModel):
    definition: Optional[Any] = Field(None, alias="schema")
    layout: Optional[Dict[str, Any]] = None
    responsive_settings: Optional[Dict[str, Any]] = None

    @model_validator(mode='after')
    def reject_null_required(self):
        for field in ("definition", "layout", "responsive_settings"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class FormSchemaResponse(CamelModel):
    id: str
    event_id: str
    definition: Any = Field(None, alias="schema")
    layout: Optional[Dict[str, Any]] = None
    responsive_settings: Optional[Dict[str, Any]] = None
    created_at: datetime
    updated_at: datetime
