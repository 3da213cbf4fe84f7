"""Pydantic schemas for API responses; request bodies reuse the domain forms"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel

from outbehaving.domain.constants import TIER_DISPLAY
from outbehaving.domain.models import (
    Account,
    ArticleCard,
    EngagementMetrics,
    GoalWithProgress,
    MembershipStatus,
    Profile,
    RewardWithStatus,
)


class SessionResponse(BaseModel):
    """Response for POST /v1/auth/signin"""

    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    user_id: str
    email: Optional[str] = None


class SignUpResponse(BaseModel):
    user_id: str
    email: Optional[str] = None


class GoalResponse(BaseModel):
    """Goal with derived progress fields"""

    id: str
    name: str
    description: Optional[str] = None
    target_amount: float
    saved_amount: float
    frequency: Optional[str] = None
    due_date: Optional[date] = None
    regular_amount: Optional[float] = None
    linked_account_id: Optional[str] = None
    progress_percentage: float
    is_complete: bool
    days_remaining: Optional[int] = None

    @classmethod
    def from_domain(cls, item: GoalWithProgress) -> "GoalResponse":
        goal = item.goal
        return cls(
            id=goal.id,
            name=goal.name,
            description=goal.description,
            target_amount=float(goal.target_amount),
            saved_amount=float(goal.saved_amount),
            frequency=goal.frequency.value if goal.frequency else None,
            due_date=goal.due_date,
            regular_amount=float(goal.regular_amount) if goal.regular_amount is not None else None,
            linked_account_id=goal.linked_account_id,
            progress_percentage=item.progress_percentage,
            is_complete=item.is_complete,
            days_remaining=item.days_remaining,
        )


class GoalListResponse(BaseModel):
    goals: List[GoalResponse]


class AccountResponse(BaseModel):
    id: str
    bank_name: str
    balance: float
    credit_score: Optional[int] = None
    account_type: Optional[str] = None

    @classmethod
    def from_domain(cls, account: Account) -> "AccountResponse":
        return cls(
            id=account.id,
            bank_name=account.bank_name,
            balance=float(account.balance),
            credit_score=account.credit_score,
            account_type=account.account_type,
        )


class PaymentResponse(BaseModel):
    """Response for POST /v1/goals/{goal_id}/payments"""

    goal: GoalResponse
    account: Optional[AccountResponse] = None


class RewardResponse(BaseModel):
    id: str
    name: str
    description: str
    points_required: int
    image_url: Optional[str] = None
    is_redeemed: bool
    can_redeem: bool

    @classmethod
    def from_domain(cls, item: RewardWithStatus) -> "RewardResponse":
        return cls(
            id=item.reward.id,
            name=item.reward.name,
            description=item.reward.description,
            points_required=item.reward.points_required,
            image_url=item.reward.image_url,
            is_redeemed=item.is_redeemed,
            can_redeem=item.can_redeem,
        )


class EngagementSchema(BaseModel):
    referrals: int
    articles_read: int
    days_active: int
    goals_completed: int
    total_points: int


class OwnershipResponse(BaseModel):
    """Response for GET /v1/ownership"""

    tier: str
    tier_name: str
    tier_color: str
    points: int
    progress_to_next_tier: float
    next_tier: Optional[str] = None
    points_to_next_tier: Optional[int] = None
    engagement: EngagementSchema
    rewards: List[RewardResponse]

    @classmethod
    def from_domain(
        cls,
        membership: MembershipStatus,
        engagement: EngagementMetrics,
        rewards: List[RewardWithStatus],
    ) -> "OwnershipResponse":
        name, color = TIER_DISPLAY[membership.tier]
        return cls(
            tier=membership.tier.value,
            tier_name=name,
            tier_color=color,
            points=membership.points,
            progress_to_next_tier=round(membership.progress_to_next_tier, 2),
            next_tier=membership.next_tier.value if membership.next_tier else None,
            points_to_next_tier=membership.points_to_next_tier,
            engagement=EngagementSchema(**engagement.__dict__),
            rewards=[RewardResponse.from_domain(r) for r in rewards],
        )


class ArticleResponse(BaseModel):
    id: str
    title: str
    summary: str
    url: str
    category: str
    champion: Optional[str] = None
    thumbnail_url: Optional[str] = None
    is_favourite: bool

    @classmethod
    def from_domain(cls, card: ArticleCard) -> "ArticleResponse":
        article = card.article
        return cls(
            id=article.id,
            title=article.title,
            summary=article.summary,
            url=article.url,
            category=article.category,
            champion=article.champion,
            thumbnail_url=article.thumbnail_url,
            is_favourite=card.is_favourite,
        )


class NewsResponse(BaseModel):
    tab: str
    articles: List[ArticleResponse]


class FavouriteResponse(BaseModel):
    article_id: str
    is_favourite: bool


class ProfileResponse(BaseModel):
    id: str
    name: str
    email: str
    dob: Optional[date] = None
    address: Optional[str] = None
    avatar_url: Optional[str] = None
    interests: List[str]
    favourite_champions: List[str]
    accounts: List[AccountResponse] = []

    @classmethod
    def from_domain(cls, profile: Profile, accounts: List[Account]) -> "ProfileResponse":
        return cls(
            id=profile.id,
            name=profile.name,
            email=profile.email,
            dob=profile.dob,
            address=profile.address,
            avatar_url=profile.avatar_url,
            interests=profile.interests,
            favourite_champions=profile.favourite_champions,
            accounts=[AccountResponse.from_domain(a) for a in accounts],
        )


class AvatarResponse(BaseModel):
    avatar_url: str
