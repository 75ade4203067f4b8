"""EditReview — the author (or an administrator) changes a review.

Any dimension change recomputes the composite score. Editing a public review
changes the store's aggregate, so the store is recalculated.
"""

from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from ratings.domain import ratings
from ratings.policy.access import require_owner_or_admin
from ratings.review.review import _UNSET, Review
from ratings.store.aggregation import recalculate_store


@ratings.command(part_of="Review")
class EditReview:
    actor_id = Identifier()
    review_id = Identifier(required=True)
    title = String(max_length=200)
    content = Text()
    party_size = Integer(min_value=1)
    taste = Float(min_value=0.0, max_value=5.0)
    value = Float(min_value=0.0, max_value=5.0)
    ambiance = Float(min_value=0.0, max_value=5.0)
    service = Float(min_value=0.0, max_value=5.0)


def _provided(value):
    return _UNSET if value is None else value


@ratings.command_handler(part_of=Review)
class EditReviewHandler:
    @handle(EditReview)
    def edit_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)
        actor = require_owner_or_admin(command.actor_id, review.reviewer_id)

        review.edit(
            edited_by=actor.id,
            title=_provided(command.title),
            content=_provided(command.content),
            party_size=_provided(command.party_size),
            taste=_provided(command.taste),
            value=_provided(command.value),
            ambiance=_provided(command.ambiance),
            service=_provided(command.service),
        )
        repo.add(review)

        if review.is_public:
            recalculate_store(review.store_id)
        return review.composite_score
