"""
Custom Exceptions for EventQR
=============================

Every failure the core reports to a caller is one of these. Handlers at the
API boundary turn them into JSON bodies; nothing here carries stack traces
or storage internals to the client.

Usage:
    from eventqr.core.exceptions import EventNotFoundError, ForbiddenError

    if event is None:
        raise EventNotFoundError(event_id)
"""

from typing import Optional, Any, Dict, List


class EventQRError(Exception):
    """Base exception for all EventQR errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "message": self.message,
            "code": self.code,
        }
        if self.details:
            body.update(self.details)
        return body


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(EventQRError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message, code="VALIDATION_ERROR", details={"errors": errors or []})

    @property
    def errors(self) -> List[Dict[str, Any]]:
        return self.details["errors"]


class DuplicateUsernameError(EventQRError):
    """Username is already taken"""

    status_code = 400

    def __init__(self, message: str = "Username already exists"):
        super().__init__(message, code="DUPLICATE_USERNAME")


class DuplicateEmailError(EventQRError):
    """Email is already registered"""

    status_code = 400

    def __init__(self, message: str = "Email already exists"):
        super().__init__(message, code="DUPLICATE_EMAIL")


class InvalidOperationError(EventQRError):
    """Operation is not allowed on this target (e.g. an admin acting on themselves)"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message, code="INVALID_OPERATION")


# ============================================
# Authentication & Authorization Errors
# ============================================

class InvalidCredentialsError(EventQRError):
    """Login failed. Deliberately says nothing about why."""

    status_code = 401

    def __init__(self):
        super().__init__("Invalid credentials", code="INVALID_CREDENTIALS")


class UnauthorizedError(EventQRError):
    """No valid session bound to the request"""

    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="UNAUTHORIZED")


class ForbiddenError(EventQRError):
    """Valid session, insufficient privilege (or banned account)"""

    status_code = 403

    def __init__(self, message: str = "Access denied"):
        super().__init__(message, code="FORBIDDEN")


class MalformedCredentialError(EventQRError):
    """Stored password credential cannot be parsed. Data integrity problem for one record."""

    status_code = 500

    def __init__(self, message: str = "Stored credential is malformed"):
        super().__init__(message, code="MALFORMED_CREDENTIAL")


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(EventQRError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: Optional[str] = None):
        super().__init__(
            f"{resource_type} not found",
            code=f"{resource_type.upper().replace(' ', '_')}_NOT_FOUND",
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class UserNotFoundError(ResourceNotFoundError):
    def __init__(self, user_id: Optional[str] = None):
        super().__init__("User", user_id)


class EventNotFoundError(ResourceNotFoundError):
    def __init__(self, event_id: Optional[str] = None):
        super().__init__("Event", event_id)


class RegistrationNotFoundError(ResourceNotFoundError):
    def __init__(self, registration_id: Optional[str] = None):
        super().__init__("Registration", registration_id)


class QrSettingsNotFoundError(ResourceNotFoundError):
    def __init__(self, key: Optional[str] = None):
        super().__init__("QR settings", key)


class FormSchemaNotFoundError(ResourceNotFoundError):
    def __init__(self, key: Optional[str] = None):
        super().__init__("Form schema", key)


# ============================================
# Storage Errors
# ============================================

class StorageUnavailableError(EventQRError):
    """The persistent store is unreachable or timed out. Not retried by the core."""

    status_code = 503

    def __init__(self, operation: Optional[str] = None):
        super().__init__("Service temporarily unavailable", code="STORAGE_UNAVAILABLE")
        self.operation = operation


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: EventQRError) -> Dict[str, Any]:
    """Convert exception to API error response body"""
    return error.to_dict()
