"""Review aggregate — the core of the Ratings domain.

A Review is one reviewer's rating of one store on four dimensions plus free
text. Its composite score is always the weighted sum of the four dimensions.

State Machine (6 states):
    PENDING → APPROVED | REJECTED          (moderation; REJECTED is terminal)
    APPROVED → BLIND_HELD | PUBLIC         (store below / at the 5-review threshold)
    BLIND_HELD → PUBLIC                    (store reached the threshold)
    PUBLIC → SUSPENDED                     (administrative or reviewer restriction)
    SUSPENDED → (terminal, record retained)

Only PUBLIC reviews count toward a store's aggregate score.
"""

from datetime import UTC, date, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Date,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from ratings.domain import ratings
from ratings.errors import PreconditionFailed
from ratings.review.events import (
    HelpfulVoteCast,
    HelpfulVoteRevoked,
    ReviewApproved,
    ReviewBlindHeld,
    ReviewDeleted,
    ReviewEdited,
    ReviewPublished,
    ReviewRejected,
    ReviewSubmitted,
    ReviewSuspended,
)
from ratings.reviewer.trust import is_extreme_score
from ratings.shared.scores import DimensionScores

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()

SYSTEM_ACTOR = "system"


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class ReviewStatus(Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    BLIND_HELD = "BlindHeld"
    PUBLIC = "Public"
    SUSPENDED = "Suspended"


# Statuses that have passed moderation and count toward the publication threshold
MODERATED_STATUSES = (
    ReviewStatus.APPROVED.value,
    ReviewStatus.BLIND_HELD.value,
    ReviewStatus.PUBLIC.value,
)

# Statuses waiting for the store to reach the publication threshold
AWAITING_PUBLICATION_STATUSES = (
    ReviewStatus.APPROVED.value,
    ReviewStatus.BLIND_HELD.value,
)


# ---------------------------------------------------------------------------
# State Machine
# ---------------------------------------------------------------------------
_VALID_TRANSITIONS = {
    ReviewStatus.PENDING: {ReviewStatus.APPROVED, ReviewStatus.REJECTED},
    ReviewStatus.APPROVED: {ReviewStatus.BLIND_HELD, ReviewStatus.PUBLIC},
    ReviewStatus.BLIND_HELD: {ReviewStatus.PUBLIC},
    ReviewStatus.PUBLIC: {ReviewStatus.SUSPENDED},
    ReviewStatus.REJECTED: set(),  # Terminal state
    ReviewStatus.SUSPENDED: set(),  # Terminal state
}


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ratings.entity(part_of="Review")
class HelpfulVote:
    """One reviewer's "this was helpful" mark on a review."""

    voter_id = Identifier(required=True)
    voted_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ratings.aggregate
class Review:
    """A reviewer's rating of a store they visited."""

    store_id = Identifier(required=True)
    reviewer_id = Identifier(required=True)

    # Content
    title = String(max_length=200)
    content = Text(required=True)
    party_size = Integer(default=1, min_value=1)
    visit_date = Date()

    # Scores
    scores = ValueObject(DimensionScores, required=True)
    composite_score = Float(required=True)

    # Status
    status = String(choices=ReviewStatus, default=ReviewStatus.PENDING.value)
    admin_comment = Text()

    # nth public visit of this reviewer to this store, stamped on publication
    visit_count = Integer(default=0)

    # Voting
    votes = HasMany(HelpfulVote)
    helpful_count = Integer(default=0, min_value=0)

    # Timestamps
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def composite_score_matches_dimensions(self):
        if self.scores is not None and self.composite_score != self.scores.composite:
            raise ValidationError({"composite_score": ["Composite score must be derived from the dimension scores"]})

    @invariant.post
    def content_must_not_be_blank(self):
        if self.content is not None and len(self.content.strip()) == 0:
            raise ValidationError({"content": ["Review content cannot be empty"]})

    @invariant.post
    def visit_date_not_in_future(self):
        if self.visit_date is not None and self.visit_date > date.today():
            raise ValidationError({"visit_date": ["Visit date cannot be in the future"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def submit(
        cls,
        store_id,
        reviewer_id,
        taste,
        value,
        ambiance,
        service,
        content,
        title=None,
        party_size=1,
        visit_date=None,
        submitted_at=None,
    ):
        """Submit a new review; it starts PENDING moderation."""
        now = submitted_at or datetime.now(UTC)
        scores = DimensionScores(taste=taste, value=value, ambiance=ambiance, service=service)

        review = cls(
            store_id=store_id,
            reviewer_id=reviewer_id,
            title=title,
            content=content,
            party_size=party_size,
            visit_date=visit_date,
            scores=scores,
            composite_score=scores.composite,
            status=ReviewStatus.PENDING.value,
            visit_count=0,
            helpful_count=0,
            created_at=now,
            updated_at=now,
        )

        review.raise_(
            ReviewSubmitted(
                review_id=str(review.id),
                store_id=str(store_id),
                reviewer_id=str(reviewer_id),
                title=title,
                content=content,
                composite_score=review.composite_score,
                submitted_at=now,
            )
        )

        return review

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def is_public(self) -> bool:
        return self.status == ReviewStatus.PUBLIC.value

    @property
    def has_extreme_score(self) -> bool:
        return is_extreme_score(self.composite_score)

    def has_vote_from(self, voter_id) -> bool:
        return any(str(v.voter_id) == str(voter_id) for v in self.votes)

    # -------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        """Validate state machine transition."""
        current = ReviewStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise PreconditionFailed({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def approve(self, approved_by=SYSTEM_ACTOR):
        """Pass moderation. Visibility is decided by the store threshold afterwards."""
        self._assert_can_transition(ReviewStatus.APPROVED)

        now = datetime.now(UTC)
        self.status = ReviewStatus.APPROVED.value
        self.updated_at = now

        self.raise_(
            ReviewApproved(
                review_id=str(self.id),
                store_id=str(self.store_id),
                reviewer_id=str(self.reviewer_id),
                approved_by=str(approved_by),
                approved_at=now,
            )
        )

    def reject(self, rejected_by, reason):
        """Fail moderation with a mandatory reason."""
        if not reason or not reason.strip():
            raise ValidationError({"reason": ["Reason is required when rejecting a review"]})
        self._assert_can_transition(ReviewStatus.REJECTED)

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = ReviewStatus.REJECTED.value
            self.admin_comment = reason
            self.updated_at = now

        self.raise_(
            ReviewRejected(
                review_id=str(self.id),
                store_id=str(self.store_id),
                reviewer_id=str(self.reviewer_id),
                rejected_by=str(rejected_by),
                reason=reason,
                rejected_at=now,
            )
        )

    def hold_for_blind(self):
        """Keep an approved review out of sight while its store is blind."""
        self._assert_can_transition(ReviewStatus.BLIND_HELD)

        now = datetime.now(UTC)
        self.status = ReviewStatus.BLIND_HELD.value
        self.updated_at = now

        self.raise_(
            ReviewBlindHeld(
                review_id=str(self.id),
                store_id=str(self.store_id),
                held_at=now,
            )
        )

    def publish(self, visit_count):
        """Make the review public, stamping the reviewer's visit count for the store."""
        self._assert_can_transition(ReviewStatus.PUBLIC)

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = ReviewStatus.PUBLIC.value
            self.visit_count = visit_count
            self.updated_at = now

        self.raise_(
            ReviewPublished(
                review_id=str(self.id),
                store_id=str(self.store_id),
                reviewer_id=str(self.reviewer_id),
                composite_score=self.composite_score,
                visit_count=visit_count,
                published_at=now,
            )
        )

    def suspend(self, reason):
        """Take a public review down, keeping the record."""
        self._assert_can_transition(ReviewStatus.SUSPENDED)

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = ReviewStatus.SUSPENDED.value
            self.admin_comment = reason
            self.updated_at = now

        self.raise_(
            ReviewSuspended(
                review_id=str(self.id),
                store_id=str(self.store_id),
                reviewer_id=str(self.reviewer_id),
                reason=reason,
                suspended_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Edit
    # -------------------------------------------------------------------
    def edit(
        self,
        edited_by,
        title=_UNSET,
        content=_UNSET,
        party_size=_UNSET,
        taste=_UNSET,
        value=_UNSET,
        ambiance=_UNSET,
        service=_UNSET,
    ):
        """Edit content and/or dimension scores. Not allowed once suspended."""
        if self.status == ReviewStatus.SUSPENDED.value:
            raise PreconditionFailed({"status": ["Suspended reviews cannot be edited"]})

        now = datetime.now(UTC)
        previous_composite = self.composite_score

        current = self.scores
        new_scores = DimensionScores(
            taste=taste if taste is not _UNSET else current.taste,
            value=value if value is not _UNSET else current.value,
            ambiance=ambiance if ambiance is not _UNSET else current.ambiance,
            service=service if service is not _UNSET else current.service,
        )

        with atomic_change(self):
            if title is not _UNSET:
                self.title = title
            if content is not _UNSET:
                self.content = content
            if party_size is not _UNSET:
                self.party_size = party_size
            self.scores = new_scores
            self.composite_score = new_scores.composite
            self.updated_at = now

        self.raise_(
            ReviewEdited(
                review_id=str(self.id),
                store_id=str(self.store_id),
                edited_by=str(edited_by),
                previous_composite_score=previous_composite,
                composite_score=self.composite_score,
                edited_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Voting
    # -------------------------------------------------------------------
    def vote(self, voter_id):
        """Record a helpful vote. One per voter; authors cannot vote on their own review."""
        if str(voter_id) == str(self.reviewer_id):
            raise PreconditionFailed({"vote": ["Cannot vote on your own review"]})

        if self.has_vote_from(voter_id):
            raise PreconditionFailed({"vote": ["You have already marked this review as helpful"]})

        now = datetime.now(UTC)
        self.add_votes(HelpfulVote(voter_id=voter_id, voted_at=now))

        with atomic_change(self):
            self.helpful_count = self.helpful_count + 1
            self.updated_at = now

        self.raise_(
            HelpfulVoteCast(
                review_id=str(self.id),
                voter_id=str(voter_id),
                author_id=str(self.reviewer_id),
                helpful_count=self.helpful_count,
                voted_at=now,
            )
        )

    def revoke_vote(self, voter_id):
        """Withdraw a previously cast helpful vote."""
        vote = next((v for v in self.votes if str(v.voter_id) == str(voter_id)), None)
        if vote is None:
            raise PreconditionFailed({"vote": ["No helpful vote from this reviewer"]})

        now = datetime.now(UTC)
        self.remove_votes(vote)

        with atomic_change(self):
            self.helpful_count = max(0, self.helpful_count - 1)
            self.updated_at = now

        self.raise_(
            HelpfulVoteRevoked(
                review_id=str(self.id),
                voter_id=str(voter_id),
                author_id=str(self.reviewer_id),
                helpful_count=self.helpful_count,
                revoked_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Deletion
    # -------------------------------------------------------------------
    def mark_deleted(self, deleted_by):
        """Announce deletion; the caller removes the record from its repository."""
        self.raise_(
            ReviewDeleted(
                review_id=str(self.id),
                store_id=str(self.store_id),
                reviewer_id=str(self.reviewer_id),
                status=self.status,
                deleted_by=str(deleted_by),
                deleted_at=datetime.now(UTC),
            )
        )
