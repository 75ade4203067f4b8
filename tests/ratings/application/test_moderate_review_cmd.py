"""Application tests for ModerateReview and the publication threshold rule."""

import pytest
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain
from ratings.errors import Forbidden, PreconditionFailed, Unauthenticated
from ratings.policy import publication
from ratings.review.moderation import ModerateReview
from ratings.review.review import ReviewStatus
from ratings.visit.visit import StoreVisit


def _reject(admin_id, review_id, reason="Advertising"):
    command = ModerateReview(actor_id=admin_id, review_id=review_id, action="Reject", reason=reason)
    return current_domain.process(command, asynchronous=False)


@pytest.fixture()
def count_recalculations(monkeypatch):
    """Count store recalculations triggered by the threshold rule."""
    calls = []
    original = publication.recalculate_store

    def _counting(store_id, as_of=None):
        calls.append(str(store_id))
        return original(store_id, as_of=as_of)

    monkeypatch.setattr(publication, "recalculate_store", _counting)
    return calls


class TestApproveBelowThreshold:
    def test_first_approval_is_blind_held(self, new_reviewer, new_store, submit_review, approve, load):
        store_id = new_store()
        review_id = submit_review(new_reviewer(), store_id)

        status = approve(review_id)

        assert status == ReviewStatus.BLIND_HELD.value
        assert load.review(review_id).status == ReviewStatus.BLIND_HELD.value
        assert load.store(store_id).is_blind is True

    def test_four_approvals_stay_blind(self, store_with_reviews, load):
        store_id, review_ids = store_with_reviews(approved=4)

        assert {load.review(r).status for r in review_ids} == {ReviewStatus.BLIND_HELD.value}
        assert load.store(store_id).review_count_valid == 0


class TestThresholdCrossing:
    def test_fifth_approval_publishes_all_five(
        self, store_with_reviews, new_reviewer, submit_review, approve, load, count_recalculations
    ):
        store_id, review_ids = store_with_reviews(approved=4)
        fifth = submit_review(new_reviewer(), store_id)

        status = approve(fifth)

        assert status == ReviewStatus.PUBLIC.value
        for review_id in [*review_ids, fifth]:
            review = load.review(review_id)
            assert review.status == ReviewStatus.PUBLIC.value
            assert review.visit_count == 1
        assert count_recalculations == [store_id]

        store = load.store(store_id)
        assert store.review_count_valid == 5
        assert store.is_blind is False
        assert store.avg_rating == 4.0

    def test_sixth_approval_publishes_only_the_new_review(
        self, store_with_reviews, new_reviewer, submit_review, approve, load, count_recalculations
    ):
        store_id, _ = store_with_reviews(approved=5)
        count_recalculations.clear()
        sixth = submit_review(new_reviewer(), store_id, 2, 2, 2, 2)

        approve(sixth)

        assert load.review(sixth).status == ReviewStatus.PUBLIC.value
        assert count_recalculations == [store_id]
        store = load.store(store_id)
        assert store.review_count_valid == 6
        # (4.0 * 5 + 2.0) / 6
        assert store.avg_rating == 3.67

    def test_visit_counter_grows_per_reviewer_and_store(
        self, store_with_reviews, new_reviewer, submit_review, approve, load
    ):
        store_id, _ = store_with_reviews(approved=5)
        regular = new_reviewer()

        first = submit_review(regular, store_id)
        approve(first)
        second = submit_review(regular, store_id)
        approve(second)

        assert load.review(first).visit_count == 1
        assert load.review(second).visit_count == 2
        visit = current_domain.repository_for(StoreVisit).find_for(regular, store_id)
        assert visit.visit_count == 2

    def test_weighted_score_is_blended_toward_baseline(self, store_with_reviews, load):
        store_id, _ = store_with_reviews(approved=5, score=5.0)

        # Five fresh Bronze reviews at 5.0: (5.0*2.5 + 90) / 32.5 = 3.1538 → 3.15
        assert load.store(store_id).score_weighted == 3.15


class TestReject:
    def test_reject_is_terminal_and_counts_a_violation(self, admin_id, new_reviewer, new_store, submit_review, load):
        author = new_reviewer()
        review_id = submit_review(author, new_store())

        status = _reject(admin_id, review_id)

        assert status == ReviewStatus.REJECTED.value
        review = load.review(review_id)
        assert review.admin_comment == "Advertising"
        assert load.reviewer(author).violation_count == 1

    def test_reject_requires_reason(self, admin_id, new_reviewer, new_store, submit_review, load):
        review_id = submit_review(new_reviewer(), new_store())

        with pytest.raises(ValidationError):
            _reject(admin_id, review_id, reason=None)

        assert load.review(review_id).status == ReviewStatus.PENDING.value

    def test_rejected_review_does_not_count_toward_threshold(self, admin_id, store_with_reviews, new_reviewer, submit_review, load):
        store_id, _ = store_with_reviews(approved=4)
        review_id = submit_review(new_reviewer(), store_id)

        _reject(admin_id, review_id)

        assert load.store(store_id).is_blind is True


class TestModerationGuards:
    def test_only_pending_reviews(self, new_reviewer, new_store, submit_review, approve):
        review_id = submit_review(new_reviewer(), new_store())
        approve(review_id)

        with pytest.raises(PreconditionFailed):
            approve(review_id)

    def test_requires_admin(self, new_reviewer, new_store, submit_review):
        review_id = submit_review(new_reviewer(), new_store())
        command = ModerateReview(actor_id=new_reviewer(), review_id=review_id, action="Approve")

        with pytest.raises(Forbidden):
            current_domain.process(command, asynchronous=False)

    def test_requires_actor(self, new_reviewer, new_store, submit_review):
        review_id = submit_review(new_reviewer(), new_store())
        command = ModerateReview(review_id=review_id, action="Approve")

        with pytest.raises(Unauthenticated):
            current_domain.process(command, asynchronous=False)

    def test_unknown_action(self, admin_id):
        with pytest.raises(ValidationError):
            ModerateReview(actor_id=admin_id, review_id="review-1", action="Escalate")
