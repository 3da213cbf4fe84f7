"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional


class GoalFrequency(str, Enum):
    """How often the user intends to contribute to a goal"""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    ONE_TIME = "one-time"


class MembershipTier(str, Enum):
    """Ordered loyalty bands, lowest first"""

    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"

    @property
    def rank(self) -> int:
        return list(MembershipTier).index(self)


class NewsTab(str, Enum):
    POPULAR = "popular"
    FAVOURITES = "favourites"


@dataclass
class Goal:
    """Savings goal as persisted in the `goals` collection"""

    id: str
    user_id: str
    name: str
    target_amount: Decimal
    saved_amount: Decimal = Decimal("0")
    description: Optional[str] = None
    frequency: Optional[GoalFrequency] = None
    due_date: Optional[date] = None
    regular_amount: Optional[Decimal] = None
    linked_account_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class GoalWithProgress:
    """Goal plus its derived fields; the only goal shape state containers expose"""

    goal: Goal
    progress_percentage: float
    is_complete: bool
    days_remaining: Optional[int] = None

    @property
    def id(self) -> str:
        return self.goal.id


@dataclass
class Account:
    """Bank account linked to a user"""

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


@dataclass
class Article:
    """Curated article"""

    id: str
    title: str
    summary: str
    url: str
    category: str
    champion: Optional[str] = None
    thumbnail_url: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class ArticleCard:
    """Article annotated with the local favourite overlay"""

    article: Article
    is_favourite: bool = False

    @property
    def id(self) -> str:
        return self.article.id


@dataclass
class Reward:
    """Reward redeemable for loyalty points"""

    id: str
    name: str
    description: str
    points_required: int
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class UserReward:
    """Redemption record joining a user and a reward"""

    id: str
    user_id: str
    reward_id: str
    redeemed: bool
    redeemed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


@dataclass
class RewardWithStatus:
    """Reward annotated with the user's eligibility"""

    reward: Reward
    is_redeemed: bool
    can_redeem: bool
    user_reward_id: Optional[str] = None

    @property
    def id(self) -> str:
        return self.reward.id


@dataclass
class EngagementMetrics:
    """Engagement counts that roll up into the loyalty point total"""

    referrals: int = 0
    articles_read: int = 0
    days_active: int = 0
    goals_completed: int = 0
    total_points: int = 0


@dataclass(frozen=True)
class TierBand:
    """Single membership band; `min_points` is inclusive"""

    tier: MembershipTier
    name: str
    min_points: int
    color: str


@dataclass
class MembershipStatus:
    """Output of tier assessment"""

    tier: MembershipTier
    points: int
    progress_to_next_tier: float
    next_tier: Optional[MembershipTier] = None
    points_to_next_tier: Optional[int] = None


@dataclass
class Profile:
    """Row of the `profiles` collection"""

    id: str
    name: str
    email: str
    dob: Optional[date] = None
    address: Optional[str] = None
    avatar_url: Optional[str] = None
    interests: List[str] = field(default_factory=list)
    favourite_champions: List[str] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class AuthUser:
    """Authenticated identity as reported by the auth service"""

    id: str
    email: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class AuthSession:
    """Token pair issued on sign-in"""

    access_token: str
    user: AuthUser
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None


@dataclass
class Notification:
    """Transient user-facing message"""

    id: str
    type: str  # "info" | "success" | "warning" | "error"
    message: str
    timestamp: datetime
