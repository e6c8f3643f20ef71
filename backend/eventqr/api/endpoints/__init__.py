# API endpoints
from . import auth, users, events, registrations, qr_settings, form_schemas, stats, health

__all__ = ["auth", "users", "events", "registrations", "qr_settings", "form_schemas", "stats", "health"]
