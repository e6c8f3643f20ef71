from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text

from eventqr.core.database import Base
from eventqr.core.types import GUID, JSONDocument, generate_uuid, utcnow


def default_qr_position():
    return {"x": 0, "y": 0}


class QrSettings(Base):
    """Visual customization of an event's QR page. Blob columns are opaque to the core."""
    __tablename__ = "qr_settings"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    event_id = Column(GUID, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)

    background_image = Column(Text, nullable=True)
    qr_size = Column(Integer, default=200)
    qr_position = Column(JSONDocument, default=default_qr_position)
    text_overlays = Column(JSONDocument, default=list)
    custom_fields = Column(JSONDocument, default=dict)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"<QrSettings event={self.event_id}>"
