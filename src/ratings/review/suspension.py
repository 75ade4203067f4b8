"""SuspendReview — an administrator takes a public review down.

The record is kept with the administrator's annotation, the author collects a
violation and the store is recalculated without the review.
"""

from protean.fields import Identifier, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from ratings.domain import logger, ratings
from ratings.policy.access import require_admin
from ratings.review.moderation import record_violation_against
from ratings.review.review import Review
from ratings.store.aggregation import recalculate_store


@ratings.command(part_of="Review")
class SuspendReview:
    actor_id = Identifier()
    review_id = Identifier(required=True)
    reason = Text(required=True)


@ratings.command_handler(part_of=Review)
class SuspendReviewHandler:
    @handle(SuspendReview)
    def suspend_review(self, command):
        admin = require_admin(command.actor_id)

        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)
        review.suspend(command.reason)
        repo.add(review)

        record_violation_against(review.reviewer_id)
        logger.info(
            "Review suspended",
            review_id=str(review.id),
            store_id=str(review.store_id),
            admin_id=str(admin.id),
        )
        recalculate_store(review.store_id)
