"""Input schemas validated locally before any backend call"""

import re
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError, ValidationInfo, field_validator

from outbehaving.domain.constants import AVAILABLE_CHAMPIONS, INTEREST_CATEGORIES
from outbehaving.domain.exceptions import FormValidationError
from outbehaving.domain.models import GoalFrequency

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

FormT = TypeVar("FormT", bound=BaseModel)

CLEARED_FIELD_MESSAGES = {
    "name": "Goal name is required",
    "target_amount": "Target amount is required",
    "frequency": "Frequency is required",
}


def _check_length(value: str, minimum: int, maximum: int, min_message: str, max_message: str) -> str:
    value = value.strip()
    if len(value) < minimum:
        raise ValueError(min_message)
    if len(value) > maximum:
        raise ValueError(max_message)
    return value


def _check_email(value: str) -> str:
    value = value.strip()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Please enter a valid email address")
    return value.lower()


def _check_password(value: str) -> str:
    if len(value) < 6:
        raise ValueError("Password must be at least 6 characters")
    if len(value) > 100:
        raise ValueError("Password must be less than 100 characters")
    return value


def _check_positive(value: Optional[Decimal], message: str) -> Optional[Decimal]:
    if value is not None and value < Decimal("0.01"):
        raise ValueError(message)
    return value


class SignInForm(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _check_password(v)


class PasswordResetForm(BaseModel):
    email: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _check_email(v)


class PasswordUpdateForm(BaseModel):
    password: str

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _check_password(v)


class SignUpForm(SignInForm):
    name: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _check_length(v, 2, 100, "Name must be at least 2 characters", "Name must be at most 100 characters")


class ProfileForm(BaseModel):
    name: Optional[str] = None
    dob: Optional[date] = None
    address: Optional[str] = None
    interests: Optional[List[str]] = None
    favourite_champions: Optional[List[str]] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _check_length(v, 2, 100, "Name must be at least 2 characters", "Name must be at most 100 characters")

    @field_validator("address")
    @classmethod
    def validate_address(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and len(v) > 200:
            raise ValueError("Address must be at most 200 characters")
        return v

    @field_validator("interests")
    @classmethod
    def validate_interests(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        unknown = [item for item in v or [] if item not in INTEREST_CATEGORIES]
        if unknown:
            raise ValueError(f"Unknown interests: {', '.join(unknown)}")
        return v

    @field_validator("favourite_champions")
    @classmethod
    def validate_champions(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        unknown = [item for item in v or [] if item not in AVAILABLE_CHAMPIONS]
        if unknown:
            raise ValueError(f"Unknown champions: {', '.join(unknown)}")
        return v


class GoalForm(BaseModel):
    name: str
    target_amount: Decimal
    frequency: GoalFrequency
    description: Optional[str] = None
    due_date: Optional[date] = None
    regular_amount: Optional[Decimal] = None
    linked_account_id: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _check_length(
            v, 3, 100, "Goal name must be at least 3 characters", "Goal name must be at most 100 characters"
        )

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and len(v) > 500:
            raise ValueError("Description must be at most 500 characters")
        return v

    @field_validator("target_amount")
    @classmethod
    def validate_target(cls, v: Decimal) -> Decimal:
        return _check_positive(v, "Target amount must be positive")

    @field_validator("regular_amount")
    @classmethod
    def validate_regular(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return _check_positive(v, "Regular amount must be positive")


class GoalUpdateForm(GoalForm):
    """Partial goal update; only fields that were set are sent"""

    name: Optional[str] = None
    target_amount: Optional[Decimal] = None
    frequency: Optional[GoalFrequency] = None
    saved_amount: Optional[Decimal] = None

    @field_validator("name", "target_amount", "frequency", mode="before")
    @classmethod
    def reject_clearing(cls, v: Any, info: ValidationInfo) -> Any:
        # Required on a goal; omit the field to leave it unchanged
        if v is None:
            raise ValueError(CLEARED_FIELD_MESSAGES[info.field_name])
        return v

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _check_length(
            v, 3, 100, "Goal name must be at least 3 characters", "Goal name must be at most 100 characters"
        )

    @field_validator("target_amount")
    @classmethod
    def validate_target(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return _check_positive(v, "Target amount must be positive")

    @field_validator("saved_amount")
    @classmethod
    def validate_saved(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is not None and v < 0:
            raise ValueError("Saved amount cannot be negative")
        return v


class PaymentForm(BaseModel):
    amount: Decimal

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("Enter a valid amount")
        return v


def field_errors(exc: ValidationError) -> Dict[str, List[str]]:
    """Collapse pydantic errors into field → messages"""
    errors: Dict[str, List[str]] = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "__root__"
        message = error["msg"]
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.setdefault(field, []).append(message)
    return errors


def validate_form(model: Type[FormT], data: Union[FormT, Mapping[str, Any]]) -> FormT:
    """
    Validate raw input against a form schema.

    Raises:
        FormValidationError: with field-level messages
    """
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise FormValidationError(field_errors(e)) from e
