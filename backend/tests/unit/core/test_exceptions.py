"""
Unit Tests for the exception hierarchy
"""
from eventqr.core.exceptions import (
    DuplicateEmailError,
    DuplicateUsernameError,
    EventNotFoundError,
    EventQRError,
    ForbiddenError,
    InvalidCredentialsError,
    InvalidOperationError,
    QrSettingsNotFoundError,
    ResourceNotFoundError,
    StorageUnavailableError,
    UnauthorizedError,
    ValidationError,
    error_response,
)


class TestStatusCodes:
    def test_client_errors(self):
        assert ValidationError("Invalid user data").status_code == 400
        assert DuplicateUsernameError().status_code == 400
        assert DuplicateEmailError().status_code == 400
        assert InvalidOperationError("Cannot ban yourself").status_code == 400
        assert InvalidCredentialsError().status_code == 401
        assert UnauthorizedError().status_code == 401
        assert ForbiddenError().status_code == 403
        assert EventNotFoundError("x").status_code == 404

    def test_storage_unavailable_is_503(self):
        assert StorageUnavailableError("list_events").status_code == 503


class TestErrorBodies:
    def test_duplicate_messages(self):
        assert DuplicateUsernameError().to_dict() == {
            "message": "Username already exists",
            "code": "DUPLICATE_USERNAME",
        }
        assert DuplicateEmailError().to_dict()["message"] == "Email already exists"

    def test_invalid_credentials_is_uniform(self):
        assert InvalidCredentialsError().to_dict() == {
            "message": "Invalid credentials",
            "code": "INVALID_CREDENTIALS",
        }

    def test_validation_error_carries_field_errors(self):
        errors = [{"field": "password", "message": "too short", "type": "string_too_short"}]
        body = ValidationError("Invalid user data", errors).to_dict()

        assert body["code"] == "VALIDATION_ERROR"
        assert body["errors"] == errors

    def test_not_found_codes(self):
        assert EventNotFoundError("e1").code == "EVENT_NOT_FOUND"
        assert QrSettingsNotFoundError("e1").code == "QR_SETTINGS_NOT_FOUND"
        assert QrSettingsNotFoundError("e1").message == "QR settings not found"

    def test_not_found_hierarchy(self):
        error = EventNotFoundError("e1")
        assert isinstance(error, ResourceNotFoundError)
        assert isinstance(error, EventQRError)
        assert error.resource_id == "e1"

    def test_storage_error_is_opaque(self):
        body = StorageUnavailableError("get_user").to_dict()
        assert body == {"message": "Service temporarily unavailable", "code": "STORAGE_UNAVAILABLE"}

    def test_error_response_helper(self):
        assert error_response(ForbiddenError("Admin access required")) == {
            "message": "Admin access required",
            "code": "FORBIDDEN",
        }
