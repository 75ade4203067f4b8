"""Scheduled policy jobs.

Each job selects its candidates, then dispatches one command per candidate so
every item runs in its own unit of work. A failing item is logged and
skipped; the next run picks it up again. Failures while selecting candidates
propagate to the caller.

Every job returns the number of items it changed and accepts ``as_of`` so the
caller controls the clock.
"""

from datetime import datetime

import structlog
from protean.utils.globals import current_domain

from ratings.review.cooldown import ExpireReviewCooldown, cooldown_cutoff
from ratings.review.review import Review
from ratings.reviewer.deviation import RefreshDeviationTarget
from ratings.reviewer.lapse import EvaluateReviewerTier
from ratings.reviewer.reviewer import Reviewer
from ratings.shared.clock import resolve_as_of
from ratings.store.recalculation import RecalculateStoreScores

logger = structlog.get_logger(__name__)


def _dispatch_each(job, item_ids, make_command, id_field) -> tuple[int, int]:
    """Process one command per item; returns (changed, failed)."""
    changed = failed = 0
    for item_id in item_ids:
        try:
            result = current_domain.process(make_command(item_id), asynchronous=False)
        except Exception as exc:
            failed += 1
            logger.warning(
                "Scheduled job item failed, skipping",
                job=job,
                error=str(exc),
                error_type=type(exc).__name__,
                **{id_field: str(item_id)},
            )
            continue
        if result:
            changed += 1
    return changed, failed


def process_cooldown_expirations(as_of: datetime | None = None) -> int:
    """Auto-approve cooldown targets that have waited out the cooldown window."""
    as_of = resolve_as_of(as_of)
    candidates = current_domain.repository_for(Review).pending_submitted_before(cooldown_cutoff(as_of))

    approved, failed = _dispatch_each(
        "cooldown",
        [str(review.id) for review in candidates],
        lambda review_id: ExpireReviewCooldown(review_id=review_id, as_of=as_of),
        "review_id",
    )
    logger.info(
        "Cooldown sweep finished",
        candidates=len(candidates),
        approved=approved,
        failed=failed,
        as_of=as_of.isoformat(),
    )
    return approved


def refresh_deviation_targets(as_of: datetime | None = None) -> int:
    """Re-run deviation detection for every reviewer."""
    as_of = resolve_as_of(as_of)
    reviewer_ids = current_domain.repository_for(Reviewer).list_ids()

    changed, failed = _dispatch_each(
        "deviation",
        reviewer_ids,
        lambda reviewer_id: RefreshDeviationTarget(reviewer_id=reviewer_id, as_of=as_of),
        "reviewer_id",
    )
    logger.info(
        "Deviation refresh finished",
        reviewers=len(reviewer_ids),
        changed=changed,
        failed=failed,
        as_of=as_of.isoformat(),
    )
    return changed


def recalculate_stores_for_time_decay(as_of: datetime | None = None) -> int:
    """Recalculate every store with a public review; decay buckets shift with time."""
    as_of = resolve_as_of(as_of)
    store_ids = current_domain.repository_for(Review).store_ids_with_public_reviews()

    _, failed = _dispatch_each(
        "time_decay",
        store_ids,
        lambda store_id: RecalculateStoreScores(store_id=store_id, as_of=as_of),
        "store_id",
    )
    recalculated = len(store_ids) - failed
    logger.info(
        "Time-decay refresh finished",
        stores=len(store_ids),
        recalculated=recalculated,
        failed=failed,
        as_of=as_of.isoformat(),
    )
    return recalculated


def run_tier_evaluation(as_of: datetime | None = None) -> int:
    """Step down reviewers whose earned tier has lapsed."""
    as_of = resolve_as_of(as_of)
    reviewer_ids = current_domain.repository_for(Reviewer).list_ids()

    demoted, failed = _dispatch_each(
        "tier_evaluation",
        reviewer_ids,
        lambda reviewer_id: EvaluateReviewerTier(reviewer_id=reviewer_id, as_of=as_of),
        "reviewer_id",
    )
    logger.info(
        "Tier evaluation finished",
        reviewers=len(reviewer_ids),
        demoted=demoted,
        failed=failed,
        as_of=as_of.isoformat(),
    )
    return demoted


JOBS = {
    "cooldown": process_cooldown_expirations,
    "deviation": refresh_deviation_targets,
    "time-decay": recalculate_stores_for_time_decay,
    "tier-evaluation": run_tier_evaluation,
}
