"""SubmitReview — a reviewer rates a store.

Only phone-verified reviewers may submit. The review starts PENDING; the
store's lifetime count and the reviewer's submission counter are bumped in
the same unit of work, and a resulting tier change is propagated.
"""

from datetime import UTC, datetime

from protean.fields import Date, DateTime, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from ratings.domain import logger, ratings
from ratings.errors import PreconditionFailed
from ratings.policy.access import require_reviewer
from ratings.policy.tier_changes import handle_tier_change
from ratings.review.review import Review
from ratings.reviewer.reviewer import Reviewer
from ratings.store.store import Store


@ratings.command(part_of="Review")
class SubmitReview:
    actor_id = Identifier()
    store_id = Identifier(required=True)
    taste = Float(required=True, min_value=0.0, max_value=5.0)
    value = Float(required=True, min_value=0.0, max_value=5.0)
    ambiance = Float(required=True, min_value=0.0, max_value=5.0)
    service = Float(required=True, min_value=0.0, max_value=5.0)
    title = String(max_length=200)
    content = Text(required=True)
    party_size = Integer(default=1, min_value=1)
    visit_date = Date()
    submitted_at = DateTime()


@ratings.command_handler(part_of=Review)
class SubmitReviewHandler:
    @handle(SubmitReview)
    def submit_review(self, command):
        reviewer = require_reviewer(command.actor_id)
        if not reviewer.is_phone_verified:
            raise PreconditionFailed({"reviewer": ["Phone verification is required to submit reviews"]})

        store_repo = current_domain.repository_for(Store)
        store = store_repo.get(command.store_id)

        submitted_at = command.submitted_at or datetime.now(UTC)
        review = Review.submit(
            store_id=store.id,
            reviewer_id=reviewer.id,
            taste=command.taste,
            value=command.value,
            ambiance=command.ambiance,
            service=command.service,
            content=command.content,
            title=command.title,
            party_size=command.party_size,
            visit_date=command.visit_date,
            submitted_at=submitted_at,
        )
        current_domain.repository_for(Review).add(review)

        store.increment_review_count()
        store_repo.add(store)

        previous_tier = reviewer.tier
        reviewer.record_review_submitted(submitted_at)
        current_domain.repository_for(Reviewer).add(reviewer)

        logger.info(
            "Review submitted",
            review_id=str(review.id),
            store_id=str(store.id),
            reviewer_id=str(reviewer.id),
            composite_score=review.composite_score,
        )

        handle_tier_change(reviewer.id, previous_tier, reviewer.tier)
        return str(review.id)
