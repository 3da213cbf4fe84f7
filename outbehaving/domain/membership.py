"""Membership tier engine - maps a point total onto ordered loyalty bands"""

from typing import Dict, List, Mapping, Optional

from outbehaving.config import settings
from outbehaving.domain.constants import TIER_DISPLAY
from outbehaving.domain.exceptions import ConfigurationError
from outbehaving.domain.models import EngagementMetrics, MembershipStatus, MembershipTier, TierBand


def build_tier_bands(thresholds: Mapping[str, int]) -> List[TierBand]:
    """
    Build bands from a tier → minimum points mapping, lowest first.

    Requirements:
    - Every tier has a threshold
    - The lowest band starts at 0 so every non-negative total has a tier
    - Thresholds strictly increase with tier rank, which keeps the
      assignment monotonic in points
    """
    bands = []
    for tier in MembershipTier:
        if tier.value not in thresholds:
            raise ConfigurationError(f"Missing threshold for tier '{tier.value}'")
        name, color = TIER_DISPLAY[tier]
        bands.append(TierBand(tier=tier, name=name, min_points=int(thresholds[tier.value]), color=color))

    if bands[0].min_points != 0:
        raise ConfigurationError("Lowest tier threshold must be 0")
    for lower, upper in zip(bands, bands[1:]):
        if upper.min_points <= lower.min_points:
            raise ConfigurationError(
                f"Tier thresholds must increase: {lower.tier.value}={lower.min_points}, "
                f"{upper.tier.value}={upper.min_points}"
            )
    return bands


def _default_bands() -> List[TierBand]:
    return build_tier_bands(settings.membership_tier_thresholds)


def calculate_tier(points: int, bands: Optional[List[TierBand]] = None) -> MembershipTier:
    """Tier whose minimum is the highest one not exceeding `points`"""
    bands = bands or _default_bands()
    current = bands[0]
    for band in bands:
        if points >= band.min_points:
            current = band
    return current.tier


def calculate_progress_to_next_tier(
    points: int,
    tier: MembershipTier,
    bands: Optional[List[TierBand]] = None,
) -> float:
    """
    Progress from the current tier's minimum to the next tier's minimum.

    (points - current_min) / (next_min - current_min) * 100, clamped to
    [0, 100]. The top tier always reports 100.

    Example:
        4999 points, silver (1000) → gold (5000): 3999 / 4000 → 99.975
    """
    bands = bands or _default_bands()
    index = [band.tier for band in bands].index(tier)
    if index == len(bands) - 1:
        return 100.0

    current_min = bands[index].min_points
    next_min = bands[index + 1].min_points
    progress = (points - current_min) / (next_min - current_min) * 100
    return min(max(progress, 0.0), 100.0)


def assess_membership(points: int, bands: Optional[List[TierBand]] = None) -> MembershipStatus:
    """Main entry point: tier, progress and distance to the next band"""
    bands = bands or _default_bands()
    points = max(int(points), 0)
    tier = calculate_tier(points, bands)
    index = tier.rank
    next_band = bands[index + 1] if index + 1 < len(bands) else None

    return MembershipStatus(
        tier=tier,
        points=points,
        progress_to_next_tier=calculate_progress_to_next_tier(points, tier, bands),
        next_tier=next_band.tier if next_band else None,
        points_to_next_tier=next_band.min_points - points if next_band else None,
    )


def calculate_engagement_points(metrics: EngagementMetrics, values: Optional[Dict[str, int]] = None) -> int:
    """Roll engagement counts up into a point total"""
    if values is None:
        values = settings.points_values

    return (
        metrics.referrals * values.get("referral", 0)
        + metrics.articles_read * values.get("article_read", 0)
        + metrics.days_active * values.get("day_active", 0)
        + metrics.goals_completed * values.get("goal_completed", 0)
    )
