"""Loyalty points, membership tier and reward redemption"""

import asyncio
import logging
from typing import Optional

from outbehaving.domain.exceptions import RewardNotRedeemableError
from outbehaving.domain.models import MembershipStatus
from outbehaving.domain.rewards import ensure_redeemable
from outbehaving.infrastructure.clients.database import DatabaseClient
from outbehaving.infrastructure.errors import ErrorHandler, ErrorType
from outbehaving.infrastructure.observability.metrics import reward_redemption_counter
from outbehaving.infrastructure.repositories import EngagementRepository, RewardRepository, UserRewardRepository
from outbehaving.services.base import SERVICE_ERRORS, Service
from outbehaving.state.app import AppState
from outbehaving.utils.date_utils import utcnow

logger = logging.getLogger(__name__)


class OwnershipService(Service):
    def __init__(self, state: AppState, db: DatabaseClient, user_id: str, error_handler: Optional[ErrorHandler] = None):
        super().__init__(state, error_handler)
        self.user_id = user_id
        self.engagement_repo = EngagementRepository(db)
        self.reward_repo = RewardRepository(db)
        self.user_reward_repo = UserRewardRepository(db)

    async def load_engagement_data(self) -> Optional[MembershipStatus]:
        """Fetch engagement, rewards and redemptions together and re-derive tier and eligibility"""
        logger.info("Loading engagement data", extra={"user_id": self.user_id})
        ownership = self.state.ownership
        with self._operation(ownership):
            try:
                metrics, rewards, user_rewards = await asyncio.gather(
                    self.engagement_repo.get_for_user(self.user_id),
                    self.reward_repo.list_by_cost(),
                    self.user_reward_repo.list_for_user(self.user_id),
                )
            except SERVICE_ERRORS as e:
                self._fail(ownership, e, "OwnershipService.load_engagement_data")
                return None

            if metrics is not None:
                ownership.set_engagement_metrics(metrics)
            ownership.update_reward_status(rewards, user_rewards)
            return ownership.membership

    async def redeem_reward(self, reward_id: str) -> bool:
        """
        Redeem once per user. Requires points >= points_required at the
        time of the call; points are not deducted.
        """
        logger.info("Redeeming reward", extra={"user_id": self.user_id, "reward_id": reward_id})
        ownership = self.state.ownership
        with self._operation(ownership):
            try:
                ensure_redeemable(ownership.find_reward(reward_id), ownership.current_points)
            except RewardNotRedeemableError as e:
                logger.warning("Reward not redeemable", extra={"reward_id": reward_id, "reason": str(e)})
                ownership.set_error("Insufficient points or reward not found", ErrorType.VALIDATION)
                self.state.notifications.push("error", "Insufficient points or reward not found")
                return False

            try:
                user_reward = await self.user_reward_repo.create(
                    {
                        "user_id": self.user_id,
                        "reward_id": reward_id,
                        "redeemed": True,
                        "redeemed_at": utcnow(),
                    }
                )
            except SERVICE_ERRORS as e:
                self._fail(ownership, e, "OwnershipService.redeem_reward")
                return False

            ownership.mark_redeemed(user_reward)
            reward_redemption_counter.inc()
            self.state.notifications.push("success", "Reward redeemed")

        # Refresh points and statuses from the backend
        await self.load_engagement_data()
        return True
