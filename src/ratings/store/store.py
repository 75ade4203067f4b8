"""Store aggregate — the target of review aggregation.

A store is blind while fewer than ``BLIND_THRESHOLD`` reviews are public; its
scores are only computed over the public set and are hidden from readers
while blind.
"""

from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String

from ratings.domain import ratings
from ratings.store.events import StoreRegistered, StoreScoresRecalculated

BLIND_THRESHOLD = 5


@ratings.aggregate
class Store:
    """A restaurant that reviewers rate."""

    name = String(required=True, max_length=100)

    # Lifetime review count, every status
    review_count = Integer(default=0, min_value=0)

    # Public reviews currently counted toward the aggregate
    review_count_valid = Integer(default=0, min_value=0)
    avg_rating = Float(default=0.0)
    score_weighted = Float(default=0.0)
    is_blind = Boolean(default=True)

    registered_at = DateTime()
    scores_updated_at = DateTime()

    @invariant.post
    def blind_while_below_threshold(self):
        if self.is_blind != (self.review_count_valid < BLIND_THRESHOLD):
            raise ValidationError({"is_blind": [f"A store is blind exactly while it has fewer than {BLIND_THRESHOLD} public reviews"]})

    @classmethod
    def register(cls, name):
        now = datetime.now(UTC)
        store = cls(
            name=name,
            review_count=0,
            review_count_valid=0,
            avg_rating=0.0,
            score_weighted=0.0,
            is_blind=True,
            registered_at=now,
        )
        store.raise_(StoreRegistered(store_id=str(store.id), name=name, registered_at=now))
        return store

    def increment_review_count(self):
        self.review_count = self.review_count + 1

    def decrement_review_count(self):
        if self.review_count > 0:
            self.review_count = self.review_count - 1

    def apply_scores(self, valid_count, avg_rating, score_weighted, recalculated_at=None):
        """Replace the public aggregate with freshly computed values."""
        now = recalculated_at or datetime.now(UTC)
        with atomic_change(self):
            self.review_count_valid = valid_count
            self.avg_rating = avg_rating
            self.score_weighted = score_weighted
            self.is_blind = valid_count < BLIND_THRESHOLD
            self.scores_updated_at = now

        self.raise_(
            StoreScoresRecalculated(
                store_id=str(self.id),
                review_count_valid=valid_count,
                avg_rating=avg_rating,
                score_weighted=score_weighted,
                is_blind=self.is_blind,
                recalculated_at=now,
            )
        )
