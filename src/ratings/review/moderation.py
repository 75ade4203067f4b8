"""ModerateReview — an administrator approves or rejects a pending review.

Approval hands the review to the publication threshold rule, which either
blind-holds it or publishes the store's waiting reviews. Rejection needs a
reason, is terminal and counts as a violation against the author.
"""

from enum import Enum

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from ratings.domain import logger, ratings
from ratings.policy.access import require_admin
from ratings.policy.publication import reevaluate_store_threshold
from ratings.review.review import Review
from ratings.reviewer.reviewer import Reviewer


class ModerationAction(Enum):
    APPROVE = "Approve"
    REJECT = "Reject"


@ratings.command(part_of="Review")
class ModerateReview:
    actor_id = Identifier()
    review_id = Identifier(required=True)
    action = String(required=True, choices=ModerationAction)
    reason = Text()  # Required for rejection


@ratings.command_handler(part_of=Review)
class ModerateReviewHandler:
    @handle(ModerateReview)
    def moderate_review(self, command):
        """Returns the review's status once moderation side effects have run."""
        admin = require_admin(command.actor_id)

        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)

        if command.action == ModerationAction.APPROVE.value:
            review.approve(approved_by=admin.id)
            repo.add(review)
            reevaluate_store_threshold(review.store_id)
        else:
            if not command.reason or not command.reason.strip():
                raise ValidationError({"reason": ["Reason is required when rejecting a review"]})
            review.reject(rejected_by=admin.id, reason=command.reason)
            repo.add(review)
            record_violation_against(review.reviewer_id)

        logger.info(
            "Review moderated",
            review_id=str(review.id),
            action=command.action,
            admin_id=str(admin.id),
        )
        return repo.get(review.id).status


def record_violation_against(reviewer_id):
    reviewer_repo = current_domain.repository_for(Reviewer)
    try:
        author = reviewer_repo.get(reviewer_id)
    except ObjectNotFoundError:
        logger.warning("Review author not found, violation not recorded", reviewer_id=str(reviewer_id))
        return
    author.record_violation()
    reviewer_repo.add(author)
