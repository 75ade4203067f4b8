"""RefreshDeviationTarget — re-run outlier detection for one reviewer.

A reviewer whose 20 most recent public reviews are at least 90% extreme
scores (exactly 1.0 or 5.0) is a deviation target; their scores are damped
toward the baseline in every store aggregate. When the flag flips, every
store the reviewer rated publicly is recalculated.
"""

from protean.fields import DateTime, Identifier
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from ratings.domain import logger, ratings
from ratings.review.review import Review
from ratings.reviewer.reviewer import Reviewer
from ratings.reviewer.trust import DEVIATION_SAMPLE_SIZE, is_deviation_pattern
from ratings.shared.clock import resolve_as_of
from ratings.store.aggregation import recalculate_stores


@ratings.command(part_of="Reviewer")
class RefreshDeviationTarget:
    reviewer_id = Identifier(required=True)
    as_of = DateTime()


@ratings.command_handler(part_of=Reviewer)
class RefreshDeviationTargetHandler:
    @handle(RefreshDeviationTarget)
    def refresh_deviation_target(self, command):
        """Returns True when the reviewer's flag changed."""
        as_of = resolve_as_of(command.as_of)
        reviewer_repo = current_domain.repository_for(Reviewer)
        review_repo = current_domain.repository_for(Review)

        reviewer = reviewer_repo.get(command.reviewer_id)
        recent = review_repo.recent_public_by_reviewer(reviewer.id, limit=DEVIATION_SAMPLE_SIZE)
        is_target = is_deviation_pattern([r.composite_score for r in recent])

        if not reviewer.mark_deviation_target(is_target):
            return False

        reviewer_repo.add(reviewer)
        logger.info(
            "Deviation target flag changed",
            reviewer_id=str(reviewer.id),
            is_deviation_target=is_target,
        )
        recalculate_stores(review_repo.store_ids_reviewed_publicly_by(reviewer.id), as_of=as_of)
        return True
