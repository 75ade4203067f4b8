"""Integration tests for the ratings read models and the masked review view."""

import pytest
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from ratings.projections.moderation_queue import ModerationQueue
from ratings.projections.store_scorecard import StoreScorecard
from ratings.review.editing import EditReview
from ratings.review.moderation import ModerateReview
from ratings.review.visibility import SCORE_FIELDS, review_view


def _queue_entry(review_id):
    return current_domain.repository_for(ModerationQueue).get(review_id)


def _scorecard(store_id):
    return current_domain.repository_for(StoreScorecard).get(store_id)


class TestModerationQueue:
    def test_submission_enters_the_queue(self, new_reviewer, new_store, submit_review):
        reviewer_id = new_reviewer()
        store_id = new_store()
        review_id = submit_review(reviewer_id, store_id, 4, 2, 3, 5, title="Too loud")

        entry = _queue_entry(review_id)
        assert str(entry.store_id) == store_id
        assert str(entry.reviewer_id) == reviewer_id
        assert entry.title == "Too loud"
        assert entry.composite_score == 3.40

    def test_edit_refreshes_the_entry(self, new_reviewer, new_store, submit_review):
        author = new_reviewer()
        review_id = submit_review(author, new_store())

        current_domain.process(
            EditReview(actor_id=author, review_id=review_id, content="Better on a weekday.", taste=5.0),
            asynchronous=False,
        )

        entry = _queue_entry(review_id)
        assert entry.content == "Better on a weekday."
        assert entry.composite_score == 4.40

    def test_approval_leaves_the_queue(self, new_reviewer, new_store, submit_review, approve):
        review_id = submit_review(new_reviewer(), new_store())

        approve(review_id)

        with pytest.raises(ObjectNotFoundError):
            _queue_entry(review_id)

    def test_rejection_leaves_the_queue(self, admin_id, new_reviewer, new_store, submit_review):
        review_id = submit_review(new_reviewer(), new_store())

        current_domain.process(
            ModerateReview(actor_id=admin_id, review_id=review_id, action="Reject", reason="Off-topic"),
            asynchronous=False,
        )

        with pytest.raises(ObjectNotFoundError):
            _queue_entry(review_id)


class TestStoreScorecard:
    def test_new_store_card_is_blind(self, new_store):
        card = _scorecard(new_store("Kasbah"))

        assert card.name == "Kasbah"
        assert card.is_blind is True
        assert card.review_count_valid == 0
        assert card.avg_rating is None
        assert card.score_weighted is None

    def test_scores_stay_hidden_below_threshold(self, store_with_reviews):
        store_id, _ = store_with_reviews(approved=4)

        card = _scorecard(store_id)
        assert card.is_blind is True
        assert card.score_weighted is None

    def test_scores_revealed_at_threshold(self, store_with_reviews, load):
        store_id, _ = store_with_reviews(approved=5)

        card = _scorecard(store_id)
        store = load.store(store_id)
        assert card.is_blind is False
        assert card.review_count_valid == 5
        assert card.avg_rating == store.avg_rating == 4.0
        assert card.score_weighted == store.score_weighted


class TestReviewView:
    def test_scores_masked_while_store_is_blind(self, store_with_reviews):
        _, review_ids = store_with_reviews(approved=4)

        view = review_view(review_ids[0])

        assert view["scores_masked"] is True
        assert all(view[field] is None for field in SCORE_FIELDS)
        assert view["content"] == "Handmade pasta, friendly staff."

    def test_scores_visible_once_store_is_public(self, store_with_reviews):
        _, review_ids = store_with_reviews(approved=5)

        view = review_view(review_ids[0])

        assert view["scores_masked"] is False
        assert view["composite_score"] == 4.0
        assert view["taste"] == 4.0
        assert view["visit_count"] == 1

    def test_unknown_review(self):
        with pytest.raises(ObjectNotFoundError):
            review_view("no-such-review")
