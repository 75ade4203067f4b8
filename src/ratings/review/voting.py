"""Helpful votes — cast and revoke.

One vote per (voter, review); authors cannot vote on their own reviews. The
author's cumulative helpful count moves with each vote and may change their
tier, which is then propagated.
"""

from protean.fields import Identifier
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from ratings.domain import ratings
from ratings.policy.access import require_reviewer
from ratings.policy.tier_changes import handle_tier_change
from ratings.review.review import Review
from ratings.reviewer.reviewer import Reviewer


@ratings.command(part_of="Review")
class CastHelpfulVote:
    actor_id = Identifier()
    review_id = Identifier(required=True)


@ratings.command(part_of="Review")
class RevokeHelpfulVote:
    actor_id = Identifier()
    review_id = Identifier(required=True)


@ratings.command_handler(part_of=Review)
class HelpfulVoteHandler:
    @handle(CastHelpfulVote)
    def cast_vote(self, command):
        """Returns the review's new helpful count."""
        voter = require_reviewer(command.actor_id)

        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)
        review.vote(voter.id)
        repo.add(review)

        _update_author(review.reviewer_id, lambda author: author.record_helpful_received())
        return review.helpful_count

    @handle(RevokeHelpfulVote)
    def revoke_vote(self, command):
        """Returns the review's new helpful count."""
        voter = require_reviewer(command.actor_id)

        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)
        review.revoke_vote(voter.id)
        repo.add(review)

        _update_author(review.reviewer_id, lambda author: author.record_helpful_withdrawn())
        return review.helpful_count


def _update_author(author_id, change):
    reviewer_repo = current_domain.repository_for(Reviewer)
    author = reviewer_repo.get(author_id)

    previous_tier = author.tier
    change(author)
    reviewer_repo.add(author)

    handle_tier_change(author.id, previous_tier, author.tier)
