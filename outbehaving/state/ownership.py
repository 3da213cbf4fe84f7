"""Ownership container - points, tier and reward eligibility kept in step"""

import logging
from typing import Iterable, List, Optional

from outbehaving.domain.membership import assess_membership
from outbehaving.domain.models import (
    EngagementMetrics,
    MembershipStatus,
    Reward,
    RewardWithStatus,
    TierBand,
    UserReward,
)
from outbehaving.domain.rewards import annotate_rewards
from outbehaving.state.base import StatusFlags

logger = logging.getLogger(__name__)


class OwnershipState(StatusFlags):
    """
    Any change to points, rewards or redemptions re-runs the tier and
    eligibility calculators, so `membership` and `available_rewards` are
    never stale.
    """

    def __init__(self, bands: Optional[List[TierBand]] = None):
        super().__init__()
        self._bands = bands
        self.reset()

    @property
    def current_points(self) -> int:
        return self.membership.points

    def _recompute(self) -> None:
        self.membership = assess_membership(self.engagement.total_points, self._bands)
        self.available_rewards = annotate_rewards(self._rewards, self.redeemed_rewards, self.membership.points)

    def set_current_points(self, points: int) -> MembershipStatus:
        logger.debug("Setting current points", extra={"points": points})
        self.engagement.total_points = max(int(points), 0)
        self._recompute()
        return self.membership

    def set_engagement_metrics(self, metrics: EngagementMetrics) -> MembershipStatus:
        logger.debug("Setting engagement metrics", extra={"total_points": metrics.total_points})
        self.engagement = metrics
        self._recompute()
        return self.membership

    def set_rewards(self, rewards: Iterable[Reward]) -> None:
        self._rewards = list(rewards)
        logger.debug("Setting available rewards", extra={"count": len(self._rewards)})
        self._recompute()

    def set_redeemed_rewards(self, user_rewards: Iterable[UserReward]) -> None:
        self.redeemed_rewards = list(user_rewards)
        logger.debug("Setting redeemed rewards", extra={"count": len(self.redeemed_rewards)})
        self._recompute()

    def update_reward_status(self, rewards: Iterable[Reward], user_rewards: Iterable[UserReward]) -> None:
        self._rewards = list(rewards)
        self.redeemed_rewards = list(user_rewards)
        logger.debug("Updating reward status", extra={"count": len(self._rewards)})
        self._recompute()

    def mark_redeemed(self, user_reward: UserReward) -> Optional[RewardWithStatus]:
        """Record a redemption; one-way, the reward can never become redeemable again"""
        logger.debug("Redeeming reward", extra={"reward_id": user_reward.reward_id})
        self.redeemed_rewards = [ur for ur in self.redeemed_rewards if ur.reward_id != user_reward.reward_id]
        self.redeemed_rewards.append(user_reward)
        self._recompute()
        return self.find_reward(user_reward.reward_id)

    def find_reward(self, reward_id: str) -> Optional[RewardWithStatus]:
        return next((r for r in self.available_rewards if r.id == reward_id), None)

    def reset(self) -> None:
        logger.info("Resetting ownership store")
        self.engagement = EngagementMetrics()
        self._rewards: List[Reward] = []
        self.redeemed_rewards: List[UserReward] = []
        self._recompute()
        self._reset_status()
