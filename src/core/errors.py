"""Domain error taxonomy and classification utilities."""

from enum import Enum

from pydantic import BaseModel

from src.core.config import constants


class ErrorCategory(Enum):
    """Categories of errors raised by scheduling and billing operations."""

    AUTHORIZATION = "authorization"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode:
    """Error codes for specific error conditions."""

    ERR_PERMISSION_DENIED = "ERR_PERMISSION_DENIED"
    ERR_VALIDATION = "ERR_VALIDATION"
    ERR_NOT_FOUND = "ERR_NOT_FOUND"
    ERR_INVALID_STATE_TRANSITION = "ERR_INVALID_STATE_TRANSITION"
    ERR_DUPLICATE = "ERR_DUPLICATE"
    ERR_UNKNOWN = "ERR_UNKNOWN"


class BindayError(Exception):
    """Base class for errors surfaced synchronously to callers."""

    category: ErrorCategory = ErrorCategory.UNKNOWN


class AuthorizationError(BindayError):
    """Acting party does not own the resource it is acting on."""

    category = ErrorCategory.AUTHORIZATION


class RequestValidationError(BindayError):
    """Request rejected before any mutation (bad input or resource state)."""

    category = ErrorCategory.VALIDATION


class NotFoundError(RequestValidationError):
    """Referenced service, task, home or profile does not exist."""

    category = ErrorCategory.NOT_FOUND


class ConflictError(BindayError):
    """Resource is not in a state that allows the requested transition."""

    category = ErrorCategory.CONFLICT


class ErrorResponse(BaseModel):
    """Structured error response with user-friendly messaging."""

    code: str
    message: str
    suggestion: str
    severity: ErrorSeverity


def classify_error_with_response(exception: Exception) -> ErrorResponse:
    """Classify an error and return a structured response with recovery suggestions.

    Args:
        exception: The exception raised during execution

    Returns:
        ErrorResponse with code, message, suggestion, and severity
    """
    detail = str(exception)

    if isinstance(exception, AuthorizationError):
        return ErrorResponse(
            code=ErrorCode.ERR_PERMISSION_DENIED,
            message=detail or "You don't have permission for this action.",
            suggestion="Only the home owner, the assigned worker or an operator may do this.",
            severity=ErrorSeverity.MEDIUM,
        )

    if isinstance(exception, NotFoundError):
        return ErrorResponse(
            code=ErrorCode.ERR_NOT_FOUND,
            message=detail or "Resource not found.",
            suggestion="Check the identifier and try again.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, RequestValidationError):
        return ErrorResponse(
            code=ErrorCode.ERR_VALIDATION,
            message=detail or "The request is not valid.",
            suggestion="Correct the request and try again.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, ConflictError):
        code = ErrorCode.ERR_DUPLICATE if "already" in detail.lower() else ErrorCode.ERR_INVALID_STATE_TRANSITION
        return ErrorResponse(
            code=code,
            message=detail or "This action cannot be performed in the current state.",
            suggestion="Reload the task or service and try again.",
            severity=ErrorSeverity.LOW,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        message="An unexpected error occurred.",
        suggestion="Please try again later. If the problem persists, contact support.",
        severity=ErrorSeverity.HIGH,
    )


def http_status_for(exception: Exception) -> int:
    """Map a domain error to the HTTP status code the router returns."""
    if isinstance(exception, AuthorizationError):
        return constants.HTTP_FORBIDDEN
    if isinstance(exception, NotFoundError):
        return constants.HTTP_NOT_FOUND
    if isinstance(exception, RequestValidationError):
        return constants.HTTP_BAD_REQUEST
    if isinstance(exception, ConflictError):
        return constants.HTTP_CONFLICT
    return constants.HTTP_SERVER_ERROR
