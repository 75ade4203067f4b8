"""Application tests for CastHelpfulVote / RevokeHelpfulVote."""

import pytest
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from ratings.errors import PreconditionFailed, Unauthenticated
from ratings.review.voting import CastHelpfulVote, RevokeHelpfulVote


def _cast(voter_id, review_id):
    return current_domain.process(CastHelpfulVote(actor_id=voter_id, review_id=review_id), asynchronous=False)


def _revoke(voter_id, review_id):
    return current_domain.process(RevokeHelpfulVote(actor_id=voter_id, review_id=review_id), asynchronous=False)


@pytest.fixture()
def authored_review(new_reviewer, new_store, submit_review):
    author = new_reviewer()
    return author, submit_review(author, new_store())


class TestCastHelpfulVote:
    def test_counts_on_review_and_author(self, authored_review, new_reviewer, load):
        author, review_id = authored_review

        assert _cast(new_reviewer(), review_id) == 1
        assert _cast(new_reviewer(), review_id) == 2

        assert load.review(review_id).helpful_count == 2
        assert load.reviewer(author).helpful_count == 2

    def test_second_vote_from_same_voter_is_refused(self, authored_review, new_reviewer, load):
        author, review_id = authored_review
        voter = new_reviewer()
        _cast(voter, review_id)

        with pytest.raises(PreconditionFailed):
            _cast(voter, review_id)

        assert load.review(review_id).helpful_count == 1
        assert load.reviewer(author).helpful_count == 1

    def test_author_cannot_vote_for_own_review(self, authored_review, load):
        author, review_id = authored_review

        with pytest.raises(PreconditionFailed):
            _cast(author, review_id)

        assert load.reviewer(author).helpful_count == 0

    def test_anonymous_vote_is_refused(self, authored_review):
        _, review_id = authored_review

        with pytest.raises(Unauthenticated):
            _cast(None, review_id)

    def test_unknown_review(self, new_reviewer):
        with pytest.raises(ObjectNotFoundError):
            _cast(new_reviewer(), "no-such-review")


class TestRevokeHelpfulVote:
    def test_revoke_restores_counts(self, authored_review, new_reviewer, load):
        author, review_id = authored_review
        voter = new_reviewer()
        _cast(voter, review_id)

        assert _revoke(voter, review_id) == 0

        assert load.review(review_id).helpful_count == 0
        assert load.reviewer(author).helpful_count == 0

    def test_revoking_without_a_vote_is_refused(self, authored_review, new_reviewer):
        _, review_id = authored_review

        with pytest.raises(PreconditionFailed):
            _revoke(new_reviewer(), review_id)

    def test_voter_can_vote_again_after_revoking(self, authored_review, new_reviewer):
        _, review_id = authored_review
        voter = new_reviewer()
        _cast(voter, review_id)
        _revoke(voter, review_id)

        assert _cast(voter, review_id) == 1
