"""Store aggregate engine — recomputes a store's public score from its public reviews.

For every public review:

* the composite score is pulled 0.5 toward the 3.0 baseline when its author is
  a deviation target (never crossing the baseline, clamped to [1.0, 5.0]);
* its weight is ``tier weight × recency decay``.

The weighted average is then blended with 30 pseudo-reviews at the 3.0
baseline, which keeps low-volume stores near the middle until trustworthy,
recent reviews accumulate::

    final = (average × Σweight + 3.0 × 30) / (Σweight + 30)

Recalculation always starts from persisted state, so it is safe to repeat.
"""

import calendar
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ratings.review.review import Review
from ratings.reviewer.reviewer import Reviewer
from ratings.reviewer.trust import ReviewerTier
from ratings.shared.clock import as_utc, resolve_as_of
from ratings.shared.scores import round_half_up, to_decimal
from ratings.store.store import Store

logger = structlog.get_logger(__name__)

BASELINE_SCORE = Decimal("3.0")
PRIOR_WEIGHT = Decimal("30.0")
DEVIATION_ADJUSTMENT = Decimal("0.5")
MIN_SCORE = Decimal("1.0")
MAX_SCORE = Decimal("5.0")

FOUR_PLACES = Decimal("0.0001")

TIER_WEIGHTS = {
    ReviewerTier.BRONZE.value: Decimal("0.5"),
    ReviewerTier.SILVER.value: Decimal("1.0"),
    ReviewerTier.GOLD.value: Decimal("1.5"),
    ReviewerTier.GOURMET.value: Decimal("2.0"),
    ReviewerTier.BLACK.value: Decimal("0.0"),
}

# (age limit in months, decay factor); older than the last bucket decays to 0.1
DECAY_BUCKETS = [
    (6, Decimal("1.0")),
    (12, Decimal("0.8")),
    (24, Decimal("0.5")),
    (36, Decimal("0.2")),
]
DECAY_FLOOR = Decimal("0.1")


# ---------------------------------------------------------------------------
# Scoring rules
# ---------------------------------------------------------------------------
def months_before(moment: datetime, months: int) -> datetime:
    """Same wall-clock time ``months`` calendar months earlier, clamped to month end."""
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def recency_decay(created_at: datetime | None, as_of: datetime) -> Decimal:
    if created_at is None:
        return DECAY_BUCKETS[0][1]
    created_at, as_of = as_utc(created_at), as_utc(as_of)
    for months, factor in DECAY_BUCKETS:
        if created_at > months_before(as_of, months):
            return factor
    return DECAY_FLOOR


def tier_weight(tier: str | None) -> Decimal:
    return TIER_WEIGHTS.get(tier, TIER_WEIGHTS[ReviewerTier.BRONZE.value])


def adjust_for_deviation(score, is_deviation_target: bool) -> Decimal:
    """Damp a deviation target's score toward the baseline."""
    score = to_decimal(score)
    if not is_deviation_target:
        return score

    if score > BASELINE_SCORE:
        adjusted = max(score - DEVIATION_ADJUSTMENT, BASELINE_SCORE)
    elif score < BASELINE_SCORE:
        adjusted = min(score + DEVIATION_ADJUSTMENT, BASELINE_SCORE)
    else:
        adjusted = score
    return min(max(adjusted, MIN_SCORE), MAX_SCORE)


def mean_score(scores) -> Decimal:
    """Unweighted mean of composite scores, half-up to 2 places (0 when empty)."""
    scores = [to_decimal(s) for s in scores]
    if not scores:
        return round_half_up(0)
    return round_half_up(sum(scores, Decimal("0")) / Decimal(len(scores)))


def weighted_score(reviews, reviewers: dict, as_of: datetime) -> Decimal:
    """Bayesian-blended, trust- and recency-weighted score of ``reviews``.

    ``reviewers`` maps reviewer id to the Reviewer aggregate of each author.
    """
    weighted_sum = Decimal("0")
    total_weight = Decimal("0")

    for review in reviews:
        author = reviewers.get(str(review.reviewer_id))
        is_target = bool(author.is_deviation_target) if author else False
        tier = author.tier if author else None

        score = adjust_for_deviation(review.composite_score, is_target)
        weight = tier_weight(tier) * recency_decay(review.created_at, as_of)

        weighted_sum += score * weight
        total_weight += weight

    if total_weight == 0:
        average = BASELINE_SCORE
    else:
        average = (weighted_sum / total_weight).quantize(FOUR_PLACES, rounding=ROUND_HALF_UP)

    blended = (average * total_weight + BASELINE_SCORE * PRIOR_WEIGHT) / (total_weight + PRIOR_WEIGHT)
    return round_half_up(blended.quantize(FOUR_PLACES, rounding=ROUND_HALF_UP))


# ---------------------------------------------------------------------------
# Recalculation
# ---------------------------------------------------------------------------
def _load_authors(reviews) -> dict:
    repo = current_domain.repository_for(Reviewer)
    authors = {}
    for review in reviews:
        reviewer_id = str(review.reviewer_id)
        if reviewer_id in authors:
            continue
        try:
            authors[reviewer_id] = repo.get(reviewer_id)
        except ObjectNotFoundError:
            logger.warning(
                "Review author not found, weighting as Bronze",
                review_id=str(review.id),
                reviewer_id=reviewer_id,
            )
    return authors


def recalculate_store(store_id, as_of: datetime | None = None) -> Store:
    """Recompute mean, weighted score, valid count and blind flag of one store.

    Raises ``ObjectNotFoundError`` when the store does not exist.
    """
    as_of = resolve_as_of(as_of)
    store_repo = current_domain.repository_for(Store)
    store = store_repo.get(store_id)

    public_reviews = current_domain.repository_for(Review).public_for_store(store.id)
    authors = _load_authors(public_reviews)

    avg_rating = mean_score(r.composite_score for r in public_reviews)
    score = weighted_score(public_reviews, authors, as_of)

    store.apply_scores(
        valid_count=len(public_reviews),
        avg_rating=float(avg_rating),
        score_weighted=float(score),
        recalculated_at=as_of,
    )
    store_repo.add(store)

    logger.info(
        "Store scores recalculated",
        store_id=str(store.id),
        valid_count=len(public_reviews),
        avg_rating=float(avg_rating),
        score_weighted=float(score),
    )
    return store


def recalculate_stores(store_ids, as_of: datetime | None = None) -> int:
    """Recalculate each distinct, existing store in ``store_ids``.

    ``None`` entries are dropped and unknown stores are skipped. Returns the
    number of stores recalculated.
    """
    if not store_ids:
        return 0

    as_of = resolve_as_of(as_of)
    unique_ids = list(dict.fromkeys(str(s) for s in store_ids if s is not None))

    recalculated = 0
    for store_id in unique_ids:
        try:
            recalculate_store(store_id, as_of=as_of)
        except ObjectNotFoundError:
            logger.info("Store not found, skipping recalculation", store_id=store_id)
            continue
        recalculated += 1
    return recalculated
