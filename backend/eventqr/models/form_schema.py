from sqlalchemy import Column, DateTime, ForeignKey

from eventqr.core.database import Base
from eventqr.core.types import GUID, JSONDocument, generate_uuid, utcnow


def default_responsive_settings():
    return {"mobile": True, "tablet": True, "desktop": True}


class FormSchema(Base):
    """Field definitions for an event's dynamic registration form"""
    __tablename__ = "form_schemas"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    event_id = Column(GUID, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)

    definition = Column("schema", JSONDocument, nullable=False)
    layout = Column(JSONDocument, default=dict)
    responsive_settings = Column(JSONDocument, default=default_responsive_settings)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"<FormSchema event={self.event_id}>"
