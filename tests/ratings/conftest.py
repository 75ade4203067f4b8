import itertools
import os

import pytest
from protean.utils.globals import current_domain


@pytest.fixture(scope="session")
def _ratings_domain(request):
    """Initialize the ratings domain once per session."""
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from ratings.domain import ratings

    ratings.init()
    return ratings


@pytest.fixture(scope="session", autouse=True)
def setup_db(_ratings_domain):
    from ratings.utils.db import drop_db, setup_db

    setup_db(_ratings_domain)

    yield

    drop_db(_ratings_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_ratings_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _ratings_domain.domain_context()
    ctx.push()

    yield

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    for _, broker in current_domain.brokers.items():
        broker._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------
@pytest.fixture()
def new_reviewer():
    """Register a reviewer and return their id."""
    from ratings.reviewer.registration import RegisterReviewer

    counter = itertools.count(1)

    def _register(phone_verified=True, role="User", nickname=None):
        n = next(counter)
        command = RegisterReviewer(
            nickname=nickname or f"diner{n}",
            email=f"diner{n}@example.com",
            role=role,
            phone_verified=phone_verified,
        )
        return current_domain.process(command, asynchronous=False)

    return _register


@pytest.fixture()
def admin_id(new_reviewer):
    return new_reviewer(role="Admin", nickname="head-critic")


@pytest.fixture()
def new_store():
    """Register a store and return its id."""
    from ratings.store.registration import RegisterStore

    def _register(name="Trattoria Roma"):
        return current_domain.process(RegisterStore(name=name), asynchronous=False)

    return _register


@pytest.fixture()
def submit_review():
    """Submit a review; dimension scores default to a plain 4.0."""
    from ratings.review.submission import SubmitReview

    def _submit(reviewer_id, store_id, taste=4.0, value=4.0, ambiance=4.0, service=4.0, **extra):
        command = SubmitReview(
            actor_id=reviewer_id,
            store_id=store_id,
            taste=taste,
            value=value,
            ambiance=ambiance,
            service=service,
            content=extra.pop("content", "Handmade pasta, friendly staff."),
            **extra,
        )
        return current_domain.process(command, asynchronous=False)

    return _submit


@pytest.fixture()
def approve(admin_id):
    """Approve a review as the administrator; returns the resulting status."""
    from ratings.review.moderation import ModerateReview

    def _approve(review_id):
        command = ModerateReview(actor_id=admin_id, review_id=review_id, action="Approve")
        return current_domain.process(command, asynchronous=False)

    return _approve


@pytest.fixture()
def store_with_reviews(new_reviewer, new_store, submit_review, approve):
    """Build a store with ``approved`` reviews by distinct reviewers.

    Returns ``(store_id, review_ids)``. Five or more approvals make the
    store public.
    """

    def _build(approved=5, score=4.0, name="Trattoria Roma"):
        store_id = new_store(name)
        review_ids = []
        for _ in range(approved):
            review_id = submit_review(new_reviewer(), store_id, score, score, score, score)
            approve(review_id)
            review_ids.append(review_id)
        return store_id, review_ids

    return _build


def get_review(review_id):
    from ratings.review.review import Review

    return current_domain.repository_for(Review).get(review_id)


def get_reviewer(reviewer_id):
    from ratings.reviewer.reviewer import Reviewer

    return current_domain.repository_for(Reviewer).get(reviewer_id)


def get_store(store_id):
    from ratings.store.store import Store

    return current_domain.repository_for(Store).get(store_id)


@pytest.fixture()
def load():
    """Lookups of persisted aggregates: ``load.review(id)``, ``load.reviewer(id)``, ``load.store(id)``."""

    class _Loader:
        review = staticmethod(get_review)
        reviewer = staticmethod(get_reviewer)
        store = staticmethod(get_store)

    return _Loader()
