from eventqr.schemas.auth import UserRegister, UserLogin, UserResponse
from eventqr.schemas.event import EventCreate, EventUpdate, EventResponse
from eventqr.schemas.registration import RegistrationCreate, RegistrationUpdate, RegistrationResponse
from eventqr.schemas.qr_settings import QrSettingsCreate, QrSettingsUpdate, QrSettingsResponse
from eventqr.schemas.form_schema import FormSchemaCreate, FormSchemaUpdate, FormSchemaResponse
from eventqr.schemas.stats import StatsResponse, MessageResponse

__all__ = [
    "UserRegister", "UserLogin", "UserResponse",
    "EventCreate", "EventUpdate", "EventResponse",
    "RegistrationCreate", "RegistrationUpdate", "RegistrationResponse",
    "QrSettingsCreate", "QrSettingsUpdate", "QrSettingsResponse",
    "FormSchemaCreate", "FormSchemaUpdate", "FormSchemaResponse",
    "StatsResponse", "MessageResponse",
]
