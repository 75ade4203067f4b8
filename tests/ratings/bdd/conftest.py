"""Shared BDD fixtures and step definitions for the Ratings domain."""

import pytest
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then
from ratings.review.events import ReviewApproved, ReviewBlindHeld, ReviewPublished, ReviewRejected, ReviewSuspended
from ratings.review.review import Review

_REVIEW_EVENT_CLASSES = {
    "ReviewApproved": ReviewApproved,
    "ReviewRejected": ReviewRejected,
    "ReviewBlindHeld": ReviewBlindHeld,
    "ReviewPublished": ReviewPublished,
    "ReviewSuspended": ReviewSuspended,
}


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse('a pending review by reviewer "{reviewer_id}"'),
    target_fixture="review",
)
def pending_review_by_reviewer(reviewer_id):
    review = Review.submit(
        store_id="store-bdd",
        reviewer_id=reviewer_id,
        taste=4,
        value=4,
        ambiance=4,
        service=4,
        content="Crisp dosa, slow service.",
    )
    review._events.clear()
    return review


@given(
    parsers.cfparse("a store with {count:d} approved reviews"),
    target_fixture="store_id",
)
def store_with_approved_reviews(store_with_reviews, count):
    store_id, _ = store_with_reviews(approved=count)
    return store_id


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the review status is "{status}"'))
def review_status_is(review, status):
    assert review.status == status


@then("the review action fails with a validation error")
def review_action_fails(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse("a {event_type} event is raised"))
def review_event_raised(review, event_type):
    event_cls = _REVIEW_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in review._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in review._events]}"


@then("the store is blind")
def store_is_blind(load, store_id):
    assert load.store(store_id).is_blind is True


@then("the store is not blind")
def store_is_not_blind(load, store_id):
    assert load.store(store_id).is_blind is False


@then(parsers.cfparse("the store has {count:d} valid reviews"))
def store_valid_count(load, store_id, count):
    assert load.store(store_id).review_count_valid == count
