"""Translate service failures recorded on a container into HTTP errors"""

from typing import Optional

from fastapi import HTTPException

from outbehaving.infrastructure.errors import USER_MESSAGES, ErrorType
from outbehaving.state.base import StatusFlags

STATUS_BY_ERROR_TYPE = {
    ErrorType.NETWORK: 503,
    ErrorType.AUTHENTICATION: 401,
    ErrorType.AUTHORIZATION: 403,
    ErrorType.VALIDATION: 422,
    ErrorType.NOT_FOUND: 404,
    ErrorType.SERVER: 502,
    ErrorType.UNKNOWN: 500,
}


def http_error(error_type: ErrorType, detail: Optional[str] = None) -> HTTPException:
    return HTTPException(
        status_code=STATUS_BY_ERROR_TYPE[error_type],
        detail=detail or USER_MESSAGES[error_type],
    )


def raise_for_state(container: StatusFlags) -> None:
    """Raise the HTTP equivalent of the container's last failure"""
    error_type = container.error_type or ErrorType.UNKNOWN
    raise http_error(error_type, container.error)
