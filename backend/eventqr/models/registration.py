from sqlalchemy import Column, DateTime, ForeignKey, Text

from eventqr.core.database import Base
from eventqr.core.types import GUID, JSONDocument, generate_uuid, utcnow


class Registration(Base):
    """One attendee submission. Duplicate attendees are allowed."""
    __tablename__ = "registrations"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    event_id = Column(GUID, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(Text, nullable=False)
    phone = Column(Text, nullable=False)
    position = Column(Text, nullable=True)
    email = Column(Text, nullable=True)
    custom_data = Column(JSONDocument, default=dict)  # answers to dynamic form fields

    registered_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<Registration {self.name} event={self.event_id}>"
