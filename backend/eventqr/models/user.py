from sqlalchemy import Column, String, Boolean, DateTime, Text, Enum as SQLEnum
import enum

from eventqr.core.database import Base
from eventqr.core.types import GUID, generate_uuid, utcnow


class UserRole(str, enum.Enum):
    """User roles"""
    USER = "user"
    ADMIN = "admin"


class User(Base):
    """User model"""
    __tablename__ = "users"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    username = Column(String(255), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    # scrypt credential "<hex key>.<hex salt>", never the plaintext
    password = Column(Text, nullable=False)

    role = Column(
        SQLEnum(
            UserRole,
            name="user_role",
            native_enum=False,
            length=50,
            values_callable=lambda roles: [r.value for r in roles],
        ),
        default=UserRole.USER,
        nullable=False,
    )
    banned = Column(Boolean, default=False, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __repr__(self):
        return f"<User {self.username}>"
