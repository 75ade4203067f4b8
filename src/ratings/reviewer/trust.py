"""Reviewer trust rules — tier thresholds and deviation-target detection.

Tiers are ordered Bronze < Silver < Gold < Gourmet and are earned from a
reviewer's cumulative submission and helpful-vote counts. Black (restricted)
is only ever assigned by an administrator.

A reviewer becomes a deviation target when at least 90% of their 20 most
recent public reviews sit exactly on an extreme composite score (1.00 or 5.00).
"""

from decimal import Decimal
from enum import Enum


class ReviewerTier(Enum):
    BRONZE = "Bronze"
    SILVER = "Silver"
    GOLD = "Gold"
    GOURMET = "Gourmet"
    BLACK = "Black"


class TierMode(Enum):
    """How a reviewer's tier is governed.

    AUTOMATIC tiers are recomputed from activity counters. RESTRICTED (Black)
    and ELITE tiers are administrator decisions that counter changes never touch.
    """

    AUTOMATIC = "Automatic"
    RESTRICTED = "Restricted"
    ELITE = "Elite"


class ReviewerRole(Enum):
    USER = "User"
    ADMIN = "Admin"


# Ordered scale of earnable tiers, lowest first
TIER_ORDER = [
    ReviewerTier.BRONZE.value,
    ReviewerTier.SILVER.value,
    ReviewerTier.GOLD.value,
    ReviewerTier.GOURMET.value,
]

# (minimum review count, minimum helpful count), scanned highest tier first
TIER_THRESHOLDS = [
    (ReviewerTier.GOURMET, 100, 500),
    (ReviewerTier.GOLD, 30, 100),
    (ReviewerTier.SILVER, 5, 0),
]

# Tiers held back by the extreme-score cooldown
COOLDOWN_TIERS = frozenset({ReviewerTier.BRONZE.value, ReviewerTier.SILVER.value})

EXTREME_SCORES = (1.0, 5.0)
DEVIATION_SAMPLE_SIZE = 20
DEVIATION_RATIO_THRESHOLD = Decimal("0.90")


def calculate_tier(review_count: int, helpful_count: int) -> str:
    """Return the highest earnable tier whose thresholds are both met."""
    for tier, min_reviews, min_helpful in TIER_THRESHOLDS:
        if review_count >= min_reviews and helpful_count >= min_helpful:
            return tier.value
    return ReviewerTier.BRONZE.value


def tier_rank(tier: str) -> int:
    """Position of an earnable tier on the ordered scale; Black ranks below Bronze."""
    if tier == ReviewerTier.BLACK.value:
        return -1
    return TIER_ORDER.index(tier)


def tier_below(tier: str) -> str:
    """The next lower earnable tier (Bronze stays Bronze)."""
    rank = tier_rank(tier)
    return TIER_ORDER[max(rank - 1, 0)]


def is_extreme_score(score) -> bool:
    return score is not None and float(score) in EXTREME_SCORES


def is_deviation_pattern(recent_scores) -> bool:
    """Decide whether a reviewer's most recent public scores are extreme enough.

    ``recent_scores`` must be the composite scores of the reviewer's most
    recent public reviews, newest first. Fewer than 20 samples never qualify.
    """
    sample = list(recent_scores)[:DEVIATION_SAMPLE_SIZE]
    if len(sample) < DEVIATION_SAMPLE_SIZE:
        return False

    extreme_count = sum(1 for score in sample if is_extreme_score(score))
    ratio = Decimal(extreme_count) / Decimal(DEVIATION_SAMPLE_SIZE)
    return ratio >= DEVIATION_RATIO_THRESHOLD
