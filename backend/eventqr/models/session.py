from sqlalchemy import Column, String, DateTime, ForeignKey, Text
from datetime import datetime
from typing import Optional

from eventqr.core.database import Base
from eventqr.core.types import GUID, utcnow


class Session(Base):
    """Server-side login session. The client only ever holds the raw token."""
    __tablename__ = "sessions"

    # HMAC-SHA256 of the client token
    id = Column(String(64), primary_key=True)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    expires_at = Column(DateTime, nullable=False, index=True)

    # Device/browser info
    user_agent = Column(Text, nullable=True)
    ip_address = Column(String(45), nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Expiry is fixed at issuance; use does not extend it"""
        return (now or utcnow()) >= self.expires_at

    def __repr__(self):
        return f"<Session user={self.user_id} expires={self.expires_at}>"
