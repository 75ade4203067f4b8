"""Propagation of a reviewer's tier change to their public reviews and stores.

A tier change alters the weight of every public review the reviewer wrote,
so each affected store is recalculated. Moving to Black additionally takes
all of the reviewer's public reviews down.

Callers must persist the reviewer before calling, so the recalculation reads
the new tier.
"""

from datetime import datetime

import structlog
from protean.utils.globals import current_domain

from ratings.review.review import Review
from ratings.reviewer.trust import ReviewerTier
from ratings.shared.clock import resolve_as_of
from ratings.store.aggregation import recalculate_stores

logger = structlog.get_logger(__name__)

RESTRICTION_NOTE = "Suspended automatically: reviewer moved to the restricted tier"


def handle_tier_change(reviewer_id, old_tier, new_tier, as_of: datetime | None = None) -> int:
    """Apply the consequences of ``old_tier`` → ``new_tier``.

    Returns the number of stores recalculated. No-op when either tier is
    missing or nothing changed.
    """
    if reviewer_id is None or not old_tier or not new_tier or old_tier == new_tier:
        return 0

    as_of = resolve_as_of(as_of)
    repo = current_domain.repository_for(Review)
    public_reviews = repo.public_by_reviewer(reviewer_id)

    # Collected up front: suspended reviews no longer point at their stores
    affected_store_ids = list(dict.fromkeys(str(r.store_id) for r in public_reviews))

    if new_tier == ReviewerTier.BLACK.value:
        for review in public_reviews:
            review.suspend(RESTRICTION_NOTE)
            repo.add(review)
        logger.info(
            "Public reviews suspended for restricted reviewer",
            reviewer_id=str(reviewer_id),
            suspended=len(public_reviews),
        )

    recalculated = recalculate_stores(affected_store_ids, as_of=as_of)
    logger.info(
        "Tier change propagated",
        reviewer_id=str(reviewer_id),
        old_tier=old_tier,
        new_tier=new_tier,
        stores_recalculated=recalculated,
    )
    return recalculated
