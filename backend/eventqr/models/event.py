from sqlalchemy import Column, DateTime, ForeignKey, Boolean, Text

from eventqr.core.database import Base
from eventqr.core.types import GUID, generate_uuid, utcnow


class Event(Base):
    """A registration campaign owned by one user"""
    __tablename__ = "events"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    event_date = Column(Text, nullable=True)  # display string
    event_time = Column(Text, nullable=True)  # display string

    # Denormalized, computed at insert time
    qr_code_url = Column(Text, nullable=True)
    registration_url = Column(Text, nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"<Event {self.name}>"
