"""ModerationQueue — reviews waiting for an administrator's decision."""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from ratings.domain import ratings
from ratings.review.events import (
    ReviewApproved,
    ReviewDeleted,
    ReviewEdited,
    ReviewRejected,
    ReviewSubmitted,
)
from ratings.review.review import Review


@ratings.projection
class ModerationQueue:
    review_id = Identifier(identifier=True, required=True)
    store_id = Identifier(required=True)
    reviewer_id = Identifier(required=True)
    title = String()
    content = Text(required=True)
    composite_score = Float(required=True)
    submitted_at = DateTime()


@ratings.projector(projector_for=ModerationQueue, aggregates=[Review])
class ModerationQueueProjector:
    @on(ReviewSubmitted)
    def on_review_submitted(self, event):
        current_domain.repository_for(ModerationQueue).add(
            ModerationQueue(
                review_id=event.review_id,
                store_id=event.store_id,
                reviewer_id=event.reviewer_id,
                title=event.title,
                content=event.content,
                composite_score=event.composite_score,
                submitted_at=event.submitted_at,
            )
        )

    @on(ReviewEdited)
    def on_review_edited(self, event):
        repo = current_domain.repository_for(ModerationQueue)
        try:
            entry = repo.get(event.review_id)
        except ObjectNotFoundError:
            return  # Already moderated

        review = current_domain.repository_for(Review).get(event.review_id)
        entry.title = review.title
        entry.content = review.content
        entry.composite_score = event.composite_score
        repo.add(entry)

    @on(ReviewApproved)
    def on_review_approved(self, event):
        _drop(event.review_id)

    @on(ReviewRejected)
    def on_review_rejected(self, event):
        _drop(event.review_id)

    @on(ReviewDeleted)
    def on_review_deleted(self, event):
        _drop(event.review_id)


def _drop(review_id):
    repo = current_domain.repository_for(ModerationQueue)
    try:
        repo.remove(repo.get(review_id))
    except ObjectNotFoundError:
        pass
