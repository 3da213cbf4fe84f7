"""Boundary validation - untyped backend JSON into domain entities

Rows that fail validation are quarantined: logged, counted and dropped, so
nothing malformed reaches a state container.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from outbehaving.domain.exceptions import InvalidRecordError
from outbehaving.domain.membership import calculate_engagement_points
from outbehaving.domain.models import (
    Account,
    Article,
    AuthSession,
    AuthUser,
    EngagementMetrics,
    Goal,
    GoalFrequency,
    Profile,
    Reward,
    UserReward,
)
from outbehaving.infrastructure.observability.metrics import quarantined_records_counter
from outbehaving.utils.date_utils import to_date

logger = logging.getLogger(__name__)


class Record(BaseModel):
    model_config = ConfigDict(extra="ignore")

    def to_domain(self) -> Any:
        raise NotImplementedError


class GoalRecord(Record):
    id: str
    user_id: str
    name: str
    target_amount: Decimal = Field(ge=0)
    saved_amount: Decimal = Field(default=Decimal("0"), ge=0)
    description: Optional[str] = None
    frequency: Optional[GoalFrequency] = None
    due_date: Optional[date] = None
    regular_amount: Optional[Decimal] = None
    linked_account_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("saved_amount", mode="before")
    @classmethod
    def default_saved(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Any) -> Any:
        return to_date(v) if isinstance(v, str) else v

    def to_domain(self) -> Goal:
        return Goal(**self.model_dump())


class AccountRecord(Record):
    id: str
    user_id: str
    bank_name: str
    balance: Decimal
    credit_score: Optional[int] = None
    account_number: Optional[str] = None
    sort_code: Optional[str] = None
    iban: Optional[str] = None
    account_type: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_domain(self) -> Account:
        return Account(**self.model_dump())


class ArticleRecord(Record):
    id: str
    title: str
    summary: str
    url: str
    category: str
    champion: Optional[str] = None
    thumbnail_url: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_domain(self) -> Article:
        return Article(**self.model_dump())


class RewardRecord(Record):
    id: str
    name: str
    description: str
    points_required: int = Field(ge=0)
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_domain(self) -> Reward:
        return Reward(**self.model_dump())


class UserRewardRecord(Record):
    id: str
    user_id: str
    reward_id: str
    redeemed: bool = False
    redeemed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def to_domain(self) -> UserReward:
        return UserReward(**self.model_dump())


class EngagementRecord(Record):
    referrals_count: int = Field(default=0, ge=0)
    articles_read_count: int = Field(default=0, ge=0)
    days_active_count: int = Field(default=0, ge=0)
    goals_completed_count: int = Field(default=0, ge=0)
    total_points: Optional[int] = Field(default=None, ge=0)

    @field_validator("referrals_count", "articles_read_count", "days_active_count", "goals_completed_count", mode="before")
    @classmethod
    def default_zero(cls, v: Any) -> Any:
        return 0 if v is None else v

    def to_domain(self) -> EngagementMetrics:
        metrics = EngagementMetrics(
            referrals=self.referrals_count,
            articles_read=self.articles_read_count,
            days_active=self.days_active_count,
            goals_completed=self.goals_completed_count,
        )
        if self.total_points is None:
            metrics.total_points = calculate_engagement_points(metrics)
        else:
            metrics.total_points = self.total_points
        return metrics


class ProfileRecord(Record):
    id: str
    name: str = ""
    email: str = ""
    dob: Optional[date] = None
    address: Optional[str] = None
    avatar_url: Optional[str] = None
    interests: List[str] = Field(default_factory=list)
    favourite_champions: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("name", "email", mode="before")
    @classmethod
    def default_blank(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("interests", "favourite_champions", mode="before")
    @classmethod
    def default_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("dob", mode="before")
    @classmethod
    def parse_dob(cls, v: Any) -> Any:
        return to_date(v) if isinstance(v, str) else v

    def to_domain(self) -> Profile:
        return Profile(**self.model_dump())


class AuthUserRecord(Record):
    id: str
    email: Optional[str] = None
    user_metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("user_metadata", mode="before")
    @classmethod
    def default_metadata(cls, v: Any) -> Any:
        return {} if v is None else v

    def to_domain(self) -> AuthUser:
        return AuthUser(id=self.id, email=self.email, metadata=dict(self.user_metadata))


class AuthSessionRecord(Record):
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    user: AuthUserRecord

    def to_domain(self) -> AuthSession:
        return AuthSession(
            access_token=self.access_token,
            refresh_token=self.refresh_token,
            expires_in=self.expires_in,
            user=self.user.to_domain(),
        )


RecordT = TypeVar("RecordT", bound=Record)


def parse_record(model: Type[RecordT], row: Any, collection: str) -> Any:
    """
    Validate one row and convert it to its domain entity.

    Raises:
        InvalidRecordError: row is not an object or fails validation
    """
    if not isinstance(row, Mapping):
        raise InvalidRecordError(f"Expected an object from '{collection}', got {type(row).__name__}")
    try:
        return model.model_validate(dict(row)).to_domain()
    except ValidationError as e:
        raise InvalidRecordError(f"Malformed '{collection}' record: {e.error_count()} error(s)") from e


def parse_records(model: Type[RecordT], rows: Iterable[Any], collection: str) -> List[Any]:
    """Convert every valid row, quarantining the rest"""
    parsed = []
    for row in rows:
        try:
            parsed.append(parse_record(model, row, collection))
        except InvalidRecordError as e:
            quarantined_records_counter.labels(collection=collection).inc()
            logger.warning(
                "Quarantined malformed record",
                extra={"collection": collection, "record_id": row.get("id") if isinstance(row, Mapping) else None, "error": str(e)},
            )
    return parsed


def serialize(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Make a payload JSON-safe: Decimal → plain numeric string, dates → ISO strings, enums → values"""
    return {key: _to_json(value) for key, value in payload.items()}


def _to_json(value: Any) -> Any:
    if isinstance(value, Decimal):
        # Exact on the wire; the backend casts numeric strings
        return format(value, "f")
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_to_json(item) for item in value]
    if isinstance(value, Mapping):
        return serialize(value)
    return value
