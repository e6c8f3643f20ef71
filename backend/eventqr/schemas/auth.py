from pydantic import EmailStr, Field
from datetime import datetime

from eventqr.models.user import UserRole
from eventqr.schemas.base import CamelModel

PASSWORD_MIN_LENGTH = 6


class UserRegister(CamelModel):
    """
    Public registration body.

    Only these three fields are read. Anything else the client sends
    (role, banned, ...) is dropped during validation.
    """
    username: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH)


class UserLogin(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserResponse(CamelModel):
    """Sanitized user view. The stored credential has no field here."""
    id: str
    username: str
    email: str
    role: UserRole
    banned: bool
    created_at: datetime
