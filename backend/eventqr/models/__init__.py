# Re-export all models for convenient imports
from eventqr.models.user import User, UserRole
from eventqr.models.session import Session
from eventqr.models.event import Event
from eventqr.models.registration import Registration
from eventqr.models.qr_settings import QrSettings
from eventqr.models.form_schema import FormSchema

__all__ = [
    "User",
    "UserRole",
    "Session",
    "Event",
    "Registration",
    "QrSettings",
    "FormSchema",
]
