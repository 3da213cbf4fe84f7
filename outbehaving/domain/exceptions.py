"""Domain-specific exceptions"""

from typing import Any, Dict, List, Optional


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ConfigurationError(DomainException):
    """Required configuration is missing or invalid"""

    pass


class BackendError(DomainException):
    """A backend gateway call failed; carries the classified error type"""

    def __init__(
        self,
        message: str,
        error_type: Any,
        status_code: Optional[int] = None,
        details: Any = None,
    ):
        super().__init__(message)
        self.error_type = error_type
        self.status_code = status_code
        self.details = details


class UnreadableResponseError(BackendError):
    """A 2xx reply whose body could not be decoded; the write may have landed"""

    pass


class FormValidationError(DomainException):
    """Local input validation failed before any backend call"""

    def __init__(self, field_errors: Dict[str, List[str]]):
        super().__init__("Invalid form input")
        self.field_errors = field_errors


class InvalidRecordError(DomainException):
    """Backend returned a record that does not match the expected shape"""

    pass


class PaymentRefusedError(DomainException):
    """Goal payment preconditions not met; nothing was written"""

    def __init__(self, reason: str, message: str):
        super().__init__(message)
        self.reason = reason


class PaymentRollbackError(DomainException):
    """Goal credit failed and restoring the debited account also failed"""

    pass


class RewardNotRedeemableError(DomainException):
    """Reward is unknown, already redeemed, or the user lacks points"""

    pass
