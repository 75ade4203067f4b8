"""Domain events for the Review aggregate.

All events are versioned, immutable facts representing state changes.
Projections react to them; the engine itself drives side effects
synchronously from the command handlers.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from ratings.domain import ratings


@ratings.event(part_of="Review")
class ReviewSubmitted:
    """A reviewer submitted a new store review."""

    __version__ = 1

    review_id = Identifier(required=True)
    store_id = Identifier(required=True)
    reviewer_id = Identifier(required=True)
    title = String()
    content = Text(required=True)
    composite_score = Float(required=True)
    submitted_at = DateTime(required=True)


@ratings.event(part_of="Review")
class ReviewEdited:
    """The author or an administrator changed the review content or scores."""

    __version__ = 1

    review_id = Identifier(required=True)
    store_id = Identifier(required=True)
    edited_by = Identifier(required=True)
    previous_composite_score = Float(required=True)
    composite_score = Float(required=True)
    edited_at = DateTime(required=True)


@ratings.event(part_of="Review")
class ReviewApproved:
    """The review passed moderation (manually or after its cooldown)."""

    __version__ = 1

    review_id = Identifier(required=True)
    store_id = Identifier(required=True)
    reviewer_id = Identifier(required=True)
    approved_by = Identifier(required=True)
    approved_at = DateTime(required=True)


@ratings.event(part_of="Review")
class ReviewRejected:
    """A moderator rejected the review. Terminal."""

    __version__ = 1

    review_id = Identifier(required=True)
    store_id = Identifier(required=True)
    reviewer_id = Identifier(required=True)
    rejected_by = Identifier(required=True)
    reason = String(required=True)
    rejected_at = DateTime(required=True)


@ratings.event(part_of="Review")
class ReviewBlindHeld:
    """An approved review is held back until its store collects enough reviews."""

    __version__ = 1

    review_id = Identifier(required=True)
    store_id = Identifier(required=True)
    held_at = DateTime(required=True)


@ratings.event(part_of="Review")
class ReviewPublished:
    """The review became publicly visible and counts toward the store score."""

    __version__ = 1

    review_id = Identifier(required=True)
    store_id = Identifier(required=True)
    reviewer_id = Identifier(required=True)
    composite_score = Float(required=True)
    visit_count = Integer(required=True)
    published_at = DateTime(required=True)


@ratings.event(part_of="Review")
class ReviewSuspended:
    """A public review was taken down; the record is retained."""

    __version__ = 1

    review_id = Identifier(required=True)
    store_id = Identifier(required=True)
    reviewer_id = Identifier(required=True)
    reason = String(required=True)
    suspended_at = DateTime(required=True)


@ratings.event(part_of="Review")
class ReviewDeleted:
    """The review record was deleted by its author or an administrator."""

    __version__ = 1

    review_id = Identifier(required=True)
    store_id = Identifier(required=True)
    reviewer_id = Identifier(required=True)
    status = String(required=True)
    deleted_by = Identifier(required=True)
    deleted_at = DateTime(required=True)


@ratings.event(part_of="Review")
class HelpfulVoteCast:
    """A reviewer marked the review as helpful."""

    __version__ = 1

    review_id = Identifier(required=True)
    voter_id = Identifier(required=True)
    author_id = Identifier(required=True)
    helpful_count = Integer(required=True)
    voted_at = DateTime(required=True)


@ratings.event(part_of="Review")
class HelpfulVoteRevoked:
    """A reviewer withdrew their helpful vote."""

    __version__ = 1

    review_id = Identifier(required=True)
    voter_id = Identifier(required=True)
    author_id = Identifier(required=True)
    helpful_count = Integer(required=True)
    revoked_at = DateTime(required=True)
