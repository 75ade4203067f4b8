"""Cooldown auto-approval of extreme scores from low-tier reviewers.

A review scoring exactly 1.0 or 5.0 from a Bronze or Silver reviewer (not
elite) is a cooldown target. Once it has waited ``COOLDOWN_HOURS`` without
being moderated, it is approved by the system and the store's publication
threshold re-evaluated. Each review is handled in its own command so a
failure on one leaves the rest of the sweep intact.
"""

from datetime import datetime, timedelta

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from ratings.domain import ratings
from ratings.policy.publication import reevaluate_store_threshold
from ratings.review.review import SYSTEM_ACTOR, Review, ReviewStatus
from ratings.reviewer.reviewer import Reviewer
from ratings.reviewer.trust import COOLDOWN_TIERS
from ratings.shared.clock import as_utc, resolve_as_of

logger = structlog.get_logger(__name__)

COOLDOWN_HOURS = 12


def cooldown_cutoff(as_of: datetime) -> datetime:
    return as_of - timedelta(hours=COOLDOWN_HOURS)


def is_cooldown_target(review, reviewer) -> bool:
    if reviewer is None or reviewer.is_elite:
        return False
    return reviewer.tier in COOLDOWN_TIERS and review.has_extreme_score


@ratings.command(part_of="Review")
class ExpireReviewCooldown:
    review_id = Identifier(required=True)
    as_of = DateTime()


@ratings.command_handler(part_of=Review)
class ExpireReviewCooldownHandler:
    @handle(ExpireReviewCooldown)
    def expire_cooldown(self, command):
        """Approve the review if its cooldown has run out. Returns True when approved."""
        as_of = resolve_as_of(command.as_of)
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)

        if review.status != ReviewStatus.PENDING.value:
            return False
        if review.created_at is None or as_utc(review.created_at) >= cooldown_cutoff(as_of):
            return False

        try:
            author = current_domain.repository_for(Reviewer).get(review.reviewer_id)
        except ObjectNotFoundError:
            author = None
        if not is_cooldown_target(review, author):
            return False

        review.approve(approved_by=SYSTEM_ACTOR)
        repo.add(review)
        logger.info(
            "Cooldown expired, review approved",
            review_id=str(review.id),
            store_id=str(review.store_id),
        )

        reevaluate_store_threshold(review.store_id, as_of=as_of)
        return True
