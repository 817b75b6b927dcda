"""Unit tests for error classification utilities."""

import pytest

from src.core.errors import (
    AuthorizationError,
    BindayError,
    ConflictError,
    ErrorCategory,
    ErrorCode,
    ErrorSeverity,
    NotFoundError,
    RequestValidationError,
    classify_error_with_response,
    http_status_for,
)


@pytest.mark.unit
class TestErrorTaxonomy:
    """Tests for the exception hierarchy."""

    def test_not_found_is_a_validation_error(self):
        assert issubclass(NotFoundError, RequestValidationError)

    @pytest.mark.parametrize(
        ("error_type", "category"),
        [
            (AuthorizationError, ErrorCategory.AUTHORIZATION),
            (RequestValidationError, ErrorCategory.VALIDATION),
            (NotFoundError, ErrorCategory.NOT_FOUND),
            (ConflictError, ErrorCategory.CONFLICT),
        ],
    )
    def test_categories(self, error_type, category):
        assert issubclass(error_type, BindayError)
        assert error_type.category == category


@pytest.mark.unit
class TestClassifyErrorWithResponse:
    """Tests for classify_error_with_response function."""

    def test_authorization(self):
        response = classify_error_with_response(AuthorizationError("You can only complete your own tasks"))

        assert response.code == ErrorCode.ERR_PERMISSION_DENIED
        assert response.message == "You can only complete your own tasks"
        assert response.severity == ErrorSeverity.MEDIUM

    def test_not_found_before_validation(self):
        """Test NotFoundError is classified on its own despite subclassing RequestValidationError."""
        response = classify_error_with_response(NotFoundError("Task not found"))

        assert response.code == ErrorCode.ERR_NOT_FOUND

    def test_validation(self):
        response = classify_error_with_response(RequestValidationError("Cannot create tasks for inactive services"))

        assert response.code == ErrorCode.ERR_VALIDATION
        assert response.severity == ErrorSeverity.LOW

    def test_conflict_state_transition(self):
        response = classify_error_with_response(ConflictError("Task is not pending"))

        assert response.code == ErrorCode.ERR_INVALID_STATE_TRANSITION

    def test_conflict_duplicate(self):
        response = classify_error_with_response(ConflictError("User already has a referral code"))

        assert response.code == ErrorCode.ERR_DUPLICATE

    def test_unknown_error_hides_detail(self):
        """Test unexpected errors never leak their message."""
        response = classify_error_with_response(RuntimeError("database password is hunter2"))

        assert response.code == ErrorCode.ERR_UNKNOWN
        assert "hunter2" not in response.message
        assert response.severity == ErrorSeverity.HIGH

    def test_empty_message_gets_default(self):
        response = classify_error_with_response(AuthorizationError())

        assert "permission" in response.message.lower()


@pytest.mark.unit
class TestHttpStatusFor:
    @pytest.mark.parametrize(
        ("error", "status"),
        [
            (AuthorizationError("x"), 403),
            (NotFoundError("x"), 404),
            (RequestValidationError("x"), 400),
            (ConflictError("x"), 409),
            (ValueError("x"), 500),
        ],
    )
    def test_mapping(self, error, status):
        assert http_status_for(error) == status
