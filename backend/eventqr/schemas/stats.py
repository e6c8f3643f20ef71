from pydantic import Field

from eventqr.schemas.base import CamelModel


class StatsResponse(CamelModel):
    """Dashboard counters. exports is process-local and resets on restart."""
    total_events: int
    total_registrations: int
    total_users: int
    active_qrs: int = Field(..., alias="activeQRs")
    exports: int


class MessageResponse(CamelModel):
    message: str
