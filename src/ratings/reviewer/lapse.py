"""EvaluateReviewerTier — step down a Gold reviewer who stopped reviewing.

A Gold tier earned automatically lapses to Silver once the reviewer's last
submission is more than ``LAPSE_MONTHS`` months old. Pinned tiers (elite or
restricted) never lapse. The demotion runs the usual tier-change cascade.
"""

from datetime import datetime

from protean.fields import DateTime, Identifier
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from ratings.domain import logger, ratings
from ratings.policy.tier_changes import handle_tier_change
from ratings.reviewer.reviewer import Reviewer
from ratings.reviewer.trust import ReviewerTier, TierMode
from ratings.shared.clock import as_utc, resolve_as_of
from ratings.store.aggregation import months_before

LAPSE_MONTHS = 12
LAPSING_TIERS = (ReviewerTier.GOLD.value,)


def has_lapsed(reviewer, as_of: datetime) -> bool:
    if reviewer.tier_mode != TierMode.AUTOMATIC.value or reviewer.tier not in LAPSING_TIERS:
        return False
    if reviewer.last_review_at is None:
        return False
    return as_utc(reviewer.last_review_at) < months_before(as_utc(as_of), LAPSE_MONTHS)


@ratings.command(part_of="Reviewer")
class EvaluateReviewerTier:
    reviewer_id = Identifier(required=True)
    as_of = DateTime()


@ratings.command_handler(part_of=Reviewer)
class EvaluateReviewerTierHandler:
    @handle(EvaluateReviewerTier)
    def evaluate_tier(self, command):
        """Returns True when the reviewer was stepped down."""
        as_of = resolve_as_of(command.as_of)
        repo = current_domain.repository_for(Reviewer)
        reviewer = repo.get(command.reviewer_id)

        if not has_lapsed(reviewer, as_of):
            return False

        previous_tier = reviewer.step_down_tier()
        repo.add(reviewer)
        logger.info(
            "Reviewer tier lapsed",
            reviewer_id=str(reviewer.id),
            previous_tier=previous_tier,
            new_tier=reviewer.tier,
        )
        handle_tier_change(reviewer.id, previous_tier, reviewer.tier, as_of=as_of)
        return True
