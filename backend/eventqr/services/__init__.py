from eventqr.services.storage_service import StorageService, ExportCounter, storage_service
from eventqr.services.session_store import SessionStore, SessionSweeper, session_store
from eventqr.services.auth_service import AuthService, get_auth_service, verify_local_credentials

__all__ = [
    "StorageService",
    "ExportCounter",
    "storage_service",
    "SessionStore",
    "SessionSweeper",
    "session_store",
    "AuthService",
    "get_auth_service",
    "verify_local_credentials",
]
