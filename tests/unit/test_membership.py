"""Unit tests for the membership tier engine"""

import pytest

from outbehaving.domain.exceptions import ConfigurationError
from outbehaving.domain.membership import (
    assess_membership,
    build_tier_bands,
    calculate_engagement_points,
    calculate_progress_to_next_tier,
    calculate_tier,
)
from outbehaving.domain.models import EngagementMetrics, MembershipTier

THRESHOLDS = {"bronze": 0, "silver": 1000, "gold": 5000, "platinum": 20000}


@pytest.fixture
def bands():
    return build_tier_bands(THRESHOLDS)


@pytest.mark.parametrize(
    "points,tier",
    [
        (0, MembershipTier.BRONZE),
        (999, MembershipTier.BRONZE),
        (1000, MembershipTier.SILVER),
        (4999, MembershipTier.SILVER),
        (5000, MembershipTier.GOLD),
        (19999, MembershipTier.GOLD),
        (20000, MembershipTier.PLATINUM),
        (1_000_000, MembershipTier.PLATINUM),
    ],
)
def test_calculate_tier_boundaries(bands, points, tier):
    assert calculate_tier(points, bands) == tier


def test_tier_is_monotonic_in_points(bands):
    ranks = [calculate_tier(points, bands).rank for points in range(0, 25000, 250)]
    assert ranks == sorted(ranks)


def test_progress_uses_next_tier_minimum(bands):
    # silver (1000) → gold (5000): 3999 / 4000
    assert calculate_progress_to_next_tier(4999, MembershipTier.SILVER, bands) == pytest.approx(99.975)
    assert calculate_progress_to_next_tier(1000, MembershipTier.SILVER, bands) == 0.0
    assert calculate_progress_to_next_tier(500, MembershipTier.BRONZE, bands) == 50.0


def test_progress_top_tier_is_full(bands):
    assert calculate_progress_to_next_tier(20000, MembershipTier.PLATINUM, bands) == 100.0
    assert calculate_progress_to_next_tier(90000, MembershipTier.PLATINUM, bands) == 100.0


def test_assess_membership(bands):
    status = assess_membership(1500, bands)

    assert status.tier == MembershipTier.SILVER
    assert status.points == 1500
    assert status.next_tier == MembershipTier.GOLD
    assert status.points_to_next_tier == 3500
    assert status.progress_to_next_tier == pytest.approx(12.5)


def test_assess_membership_top_tier(bands):
    status = assess_membership(25000, bands)

    assert status.next_tier is None
    assert status.points_to_next_tier is None
    assert status.progress_to_next_tier == 100.0


def test_assess_membership_negative_points_clamped(bands):
    status = assess_membership(-50, bands)

    assert status.points == 0
    assert status.tier == MembershipTier.BRONZE


def test_assess_membership_uses_configured_bands():
    # Default thresholds come from settings
    assert assess_membership(5000).tier == MembershipTier.GOLD


def test_bands_carry_display_metadata(bands):
    gold = bands[MembershipTier.GOLD.rank]

    assert gold.name == "Gold"
    assert gold.color == "#FFD700"
    assert gold.min_points == 5000


def test_bands_reject_missing_tier():
    with pytest.raises(ConfigurationError, match="platinum"):
        build_tier_bands({"bronze": 0, "silver": 1000, "gold": 5000})


def test_bands_reject_nonzero_floor():
    with pytest.raises(ConfigurationError):
        build_tier_bands({**THRESHOLDS, "bronze": 10})


def test_bands_reject_non_increasing_thresholds():
    with pytest.raises(ConfigurationError, match="increase"):
        build_tier_bands({**THRESHOLDS, "gold": 1000})


def test_engagement_points():
    metrics = EngagementMetrics(referrals=1, articles_read=3, days_active=4, goals_completed=2)
    values = {"referral": 100, "article_read": 10, "day_active": 5, "goal_completed": 50}

    assert calculate_engagement_points(metrics, values) == 100 + 30 + 20 + 100


def test_engagement_points_default_values():
    assert calculate_engagement_points(EngagementMetrics(articles_read=2)) == 20
