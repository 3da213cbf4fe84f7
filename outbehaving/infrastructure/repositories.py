"""Data access layer - typed entities over the generic database gateway"""

from typing import Any, Generic, List, Mapping, Optional, Tuple, Type, TypeVar

from outbehaving.domain import constants
from outbehaving.domain.models import Account, Article, EngagementMetrics, Goal, Profile, Reward, UserReward
from outbehaving.infrastructure.clients.database import DatabaseClient
from outbehaving.infrastructure.records import (
    AccountRecord,
    ArticleRecord,
    EngagementRecord,
    GoalRecord,
    ProfileRecord,
    Record,
    RewardRecord,
    UserRewardRecord,
    parse_record,
    parse_records,
)

EntityT = TypeVar("EntityT")


class Repository(Generic[EntityT]):
    """Repository for one backend collection"""

    collection: str
    record: Type[Record]

    def __init__(self, db: DatabaseClient):
        self.db = db

    async def list(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        order: Optional[Tuple[str, bool]] = None,
        limit: Optional[int] = None,
    ) -> List[EntityT]:
        rows = await self.db.query(self.collection, filters=filters, order=order, limit=limit)
        return parse_records(self.record, rows, self.collection)

    async def get(self, record_id: str) -> Optional[EntityT]:
        rows = await self.db.query(self.collection, filters={"id": record_id}, limit=1)
        parsed = parse_records(self.record, rows, self.collection)
        return parsed[0] if parsed else None

    async def create(self, payload: Mapping[str, Any]) -> EntityT:
        row = await self.db.insert(self.collection, payload)
        return parse_record(self.record, row, self.collection)

    async def update(self, record_id: str, fields: Mapping[str, Any]) -> EntityT:
        row = await self.db.update(self.collection, record_id, fields)
        return parse_record(self.record, row, self.collection)

    async def delete(self, record_id: str) -> bool:
        return await self.db.delete(self.collection, record_id)


class GoalRepository(Repository[Goal]):
    collection = constants.GOALS
    record = GoalRecord

    async def list_for_user(self, user_id: str) -> List[Goal]:
        return await self.list(filters={"user_id": user_id}, order=("created_at", False))


class AccountRepository(Repository[Account]):
    collection = constants.ACCOUNTS
    record = AccountRecord

    async def list_for_user(self, user_id: str) -> List[Account]:
        return await self.list(filters={"user_id": user_id}, order=("created_at", True))


class ArticleRepository(Repository[Article]):
    collection = constants.ARTICLES
    record = ArticleRecord

    async def list_latest(self) -> List[Article]:
        return await self.list(order=("created_at", False))


class RewardRepository(Repository[Reward]):
    collection = constants.REWARDS
    record = RewardRecord

    async def list_by_cost(self) -> List[Reward]:
        return await self.list(order=("points_required", True))


class UserRewardRepository(Repository[UserReward]):
    collection = constants.USER_REWARDS
    record = UserRewardRecord

    async def list_for_user(self, user_id: str) -> List[UserReward]:
        return await self.list(filters={"user_id": user_id})


class EngagementRepository(Repository[EngagementMetrics]):
    collection = constants.USER_ENGAGEMENT
    record = EngagementRecord

    async def get_for_user(self, user_id: str) -> Optional[EngagementMetrics]:
        metrics = await self.list(filters={"user_id": user_id}, limit=1)
        return metrics[0] if metrics else None


class ProfileRepository(Repository[Profile]):
    collection = constants.PROFILES
    record = ProfileRecord

    async def get_profile(self, user_id: str) -> Profile:
        return parse_record(self.record, await self.db.get_profile(user_id), self.collection)

    async def update_profile(self, user_id: str, updates: Mapping[str, Any]) -> Profile:
        return parse_record(self.record, await self.db.update_profile(user_id, updates), self.collection)
