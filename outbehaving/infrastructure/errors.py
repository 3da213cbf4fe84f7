"""Error classification - the single point mapping failures onto user-facing categories"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Protocol

import httpx
from pydantic import ValidationError

from outbehaving.domain.exceptions import BackendError, FormValidationError, InvalidRecordError, PaymentRollbackError
from outbehaving.infrastructure.observability.logging import log_backend_failure
from outbehaving.infrastructure.observability.metrics import backend_failure_counter


class ErrorType(str, Enum):
    NETWORK = "NETWORK_ERROR"
    AUTHENTICATION = "AUTHENTICATION_ERROR"
    AUTHORIZATION = "AUTHORIZATION_ERROR"
    VALIDATION = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND_ERROR"
    SERVER = "SERVER_ERROR"
    UNKNOWN = "UNKNOWN_ERROR"


USER_MESSAGES = {
    ErrorType.NETWORK: "Unable to connect. Please check your internet connection.",
    ErrorType.AUTHENTICATION: "Your session has expired. Please log in again.",
    ErrorType.AUTHORIZATION: "You do not have permission to perform this action.",
    ErrorType.VALIDATION: "Please check your input and try again.",
    ErrorType.NOT_FOUND: "The requested resource was not found.",
    ErrorType.SERVER: "Something went wrong on our end. Please try again later.",
    ErrorType.UNKNOWN: "An unexpected error occurred. Please try again.",
}


@dataclass
class AppError:
    """Classified failure as surfaced to the user"""

    type: ErrorType
    message: str
    status_code: Optional[int] = None
    details: Any = None


class NotificationSink(Protocol):
    def push(self, type: str, message: str) -> Any:
        ...


def classify_status(status_code: int, url_path: str = "") -> ErrorType:
    """Map an HTTP status from the backend onto the taxonomy"""
    if status_code == 401:
        return ErrorType.AUTHENTICATION
    if status_code == 400 and "/auth/" in url_path:
        # Rejected credentials come back as 400 from the auth service
        return ErrorType.AUTHENTICATION
    if status_code == 403:
        return ErrorType.AUTHORIZATION
    if status_code == 404:
        return ErrorType.NOT_FOUND
    if status_code in (400, 422):
        return ErrorType.VALIDATION
    if status_code >= 500:
        return ErrorType.SERVER
    return ErrorType.UNKNOWN


def classify_exception(exc: BaseException) -> ErrorType:
    if isinstance(exc, BackendError):
        return exc.error_type
    if isinstance(exc, (httpx.TransportError, httpx.TimeoutException)):
        return ErrorType.NETWORK
    if isinstance(exc, httpx.HTTPStatusError):
        return classify_status(exc.response.status_code, exc.request.url.path)
    if isinstance(exc, (FormValidationError, ValidationError)):
        return ErrorType.VALIDATION
    if isinstance(exc, (InvalidRecordError, PaymentRollbackError)):
        return ErrorType.SERVER
    return ErrorType.UNKNOWN


def to_backend_error(exc: BaseException, operation: str) -> BackendError:
    """Wrap a transport/status failure from a gateway call"""
    error_type = classify_exception(exc)
    status_code = exc.response.status_code if isinstance(exc, httpx.HTTPStatusError) else None
    details = None
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            details = exc.response.json()
        except ValueError:
            details = exc.response.text or None
    return BackendError(f"{operation} failed: {exc}", error_type, status_code=status_code, details=details)


class ErrorHandler:
    """Logs, counts and notifies; returns the user-facing AppError"""

    def __init__(self, notifications: Optional[NotificationSink] = None):
        self.notifications = notifications

    def handle(self, exc: BaseException, context: str = "application") -> AppError:
        error_type = classify_exception(exc)
        status_code = getattr(exc, "status_code", None)

        if isinstance(exc, FormValidationError):
            details = exc.field_errors
        else:
            details = getattr(exc, "details", None)

        log_backend_failure(context, error_type.value, status_code, exc)
        backend_failure_counter.labels(error_type=error_type.value).inc()

        app_error = AppError(
            type=error_type,
            message=USER_MESSAGES[error_type],
            status_code=status_code,
            details=details,
        )
        if self.notifications is not None:
            self.notifications.push("error", app_error.message)
        return app_error
