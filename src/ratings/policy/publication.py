"""Publication threshold rule — when approved reviews become public.

A store's reviews stay out of sight until it has collected ``BLIND_THRESHOLD``
moderated reviews (approved, blind-held or public). Below the threshold every
newly approved review is blind-held. Once the threshold is reached every
approved or blind-held review is published, each stamped with its author's
running visit count for the store, and the store is recalculated once.

Runs after every approval, cooldown expiry and any recompute that touches a store.
"""

from datetime import datetime

import structlog
from protean.utils.globals import current_domain

from ratings.review.review import Review
from ratings.shared.clock import resolve_as_of
from ratings.store.aggregation import recalculate_store
from ratings.store.store import BLIND_THRESHOLD
from ratings.visit.visit import StoreVisit

logger = structlog.get_logger(__name__)


class VisitLedger:
    """Hands out visit numbers, creating StoreVisit records on first use.

    Records are cached for the lifetime of the ledger so several reviews by
    the same reviewer published together each get their own number.
    """

    def __init__(self):
        self._repo = current_domain.repository_for(StoreVisit)
        self._visits = {}

    def next_visit(self, reviewer_id, store_id, at) -> int:
        key = (str(reviewer_id), str(store_id))
        visit = self._visits.get(key)
        if visit is None:
            visit = self._repo.find_for(reviewer_id, store_id) or StoreVisit(
                reviewer_id=str(reviewer_id),
                store_id=str(store_id),
                visit_count=0,
            )
            self._visits[key] = visit

        count = visit.increment(at)
        self._repo.add(visit)
        return count


def reevaluate_store_threshold(store_id, as_of: datetime | None = None) -> bool:
    """Blind-hold or publish the store's approved reviews.

    Returns True when the store is at or above the threshold (reviews were
    published and the store recalculated), False while it is still collecting.
    """
    now = resolve_as_of(as_of)
    repo = current_domain.repository_for(Review)

    moderated = repo.count_moderated_for_store(store_id)
    if moderated < BLIND_THRESHOLD:
        held = 0
        for review in repo.approved_for_store(store_id):
            review.hold_for_blind()
            repo.add(review)
            held += 1
        logger.info(
            "Store below publication threshold",
            store_id=str(store_id),
            moderated=moderated,
            held=held,
        )
        return False

    ledger = VisitLedger()
    targets = sorted(repo.awaiting_publication(store_id), key=lambda r: r.created_at)
    for review in targets:
        review.publish(visit_count=ledger.next_visit(review.reviewer_id, review.store_id, now))
        repo.add(review)

    logger.info(
        "Reviews published",
        store_id=str(store_id),
        moderated=moderated,
        published=len(targets),
    )
    recalculate_store(store_id, as_of=now)
    return True
