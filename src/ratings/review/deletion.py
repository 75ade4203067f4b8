"""DeleteReview — remove a review in any state.

The store's lifetime count always drops by one. Only deleting a public
review changes the aggregate, so only then is the store recalculated. The
reviewer's visit record is left as it is.
"""

from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from ratings.domain import logger, ratings
from ratings.policy.access import require_owner_or_admin
from ratings.review.review import Review
from ratings.store.aggregation import recalculate_store
from ratings.store.store import Store


@ratings.command(part_of="Review")
class DeleteReview:
    actor_id = Identifier()
    review_id = Identifier(required=True)


@ratings.command_handler(part_of=Review)
class DeleteReviewHandler:
    @handle(DeleteReview)
    def delete_review(self, command):
        """Returns True when the store aggregate was recalculated."""
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)
        actor = require_owner_or_admin(command.actor_id, review.reviewer_id)

        was_public = review.is_public
        store_id = review.store_id

        review.mark_deleted(deleted_by=actor.id)
        repo.add(review)
        repo.remove(review)

        store_repo = current_domain.repository_for(Store)
        try:
            store = store_repo.get(store_id)
        except ObjectNotFoundError:
            logger.warning("Store of deleted review not found", review_id=str(review.id), store_id=str(store_id))
            return False

        store.decrement_review_count()
        store_repo.add(store)

        logger.info(
            "Review deleted",
            review_id=str(review.id),
            store_id=str(store_id),
            was_public=was_public,
        )
        if was_public:
            recalculate_store(store_id)
            return True
        return False
