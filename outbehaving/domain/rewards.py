"""Reward eligibility - annotates rewards against a user's redemption history"""

from typing import Iterable, List, Optional

from outbehaving.domain.exceptions import RewardNotRedeemableError
from outbehaving.domain.models import Reward, RewardWithStatus, UserReward


def _find_redemption(reward: Reward, user_rewards: Iterable[UserReward]) -> Optional[UserReward]:
    return next((ur for ur in user_rewards if ur.reward_id == reward.id), None)


def annotate_reward(reward: Reward, user_rewards: Iterable[UserReward], points: int) -> RewardWithStatus:
    """
    Eligibility rules:
    - is_redeemed: a matching redemption record exists with redeemed=True
    - can_redeem: no matching record at all AND points >= points_required

    Redeeming never deducts points; totals are driven by engagement.
    """
    record = _find_redemption(reward, user_rewards)
    return RewardWithStatus(
        reward=reward,
        is_redeemed=bool(record and record.redeemed),
        can_redeem=record is None and points >= reward.points_required,
        user_reward_id=record.id if record else None,
    )


def annotate_rewards(
    rewards: Iterable[Reward],
    user_rewards: Iterable[UserReward],
    points: int,
) -> List[RewardWithStatus]:
    user_rewards = list(user_rewards)
    return [annotate_reward(reward, user_rewards, points) for reward in rewards]


def ensure_redeemable(reward: Optional[RewardWithStatus], points: int) -> RewardWithStatus:
    """Raise unless the reward exists, is unredeemed and affordable at `points`"""
    if reward is None:
        raise RewardNotRedeemableError("Reward not found")
    if reward.is_redeemed or reward.user_reward_id is not None:
        raise RewardNotRedeemableError("Reward already redeemed")
    if points < reward.reward.points_required:
        raise RewardNotRedeemableError("Insufficient points")
    return reward
