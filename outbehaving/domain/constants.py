"""Fixed domain vocabularies and backend collection names"""

from outbehaving.domain.models import MembershipTier

# Backend collections
PROFILES = "profiles"
ACCOUNTS = "accounts"
GOALS = "goals"
ARTICLES = "articles"
REWARDS = "rewards"
USER_REWARDS = "user_rewards"
USER_ARTICLE_READS = "user_article_reads"
USER_ENGAGEMENT = "user_engagement"

# Display metadata per tier; thresholds come from settings
TIER_DISPLAY = {
    MembershipTier.BRONZE: ("Bronze", "#CD7F32"),
    MembershipTier.SILVER: ("Silver", "#C0C0C0"),
    MembershipTier.GOLD: ("Gold", "#FFD700"),
    MembershipTier.PLATINUM: ("Platinum", "#E5E4E2"),
}

INTEREST_CATEGORIES = (
    "Finance",
    "Career",
    "Health",
    "Education",
    "Business",
    "Investing",
    "Real Estate",
    "Travel",
    "Technology",
    "Lifestyle",
)

AVAILABLE_CHAMPIONS = {
    "Financial Freedom": "Finance",
    "Career Growth": "Career",
    "Health & Wellness": "Health",
    "Education": "Education",
    "Entrepreneurship": "Business",
    "Investing": "Finance",
    "Real Estate": "Finance",
    "Travel": "Lifestyle",
}
