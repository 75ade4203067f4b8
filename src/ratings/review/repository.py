"""Repository for the Review aggregate — the lookups the engine relies on."""

from ratings.domain import ratings
from ratings.review.review import (
    AWAITING_PUBLICATION_STATUSES,
    MODERATED_STATUSES,
    Review,
    ReviewStatus,
)
from ratings.reviewer.trust import DEVIATION_SAMPLE_SIZE

# Upper bound on rows fetched by a single lookup
MAX_RESULTS = 100_000


@ratings.repository(part_of=Review)
class ReviewRepository:
    def _fetch(self, **filters) -> list[Review]:
        return self._dao.query.filter(**filters).limit(MAX_RESULTS).all().items

    def public_for_store(self, store_id) -> list[Review]:
        """Reviews currently counted toward the store's aggregate."""
        return self._fetch(store_id=str(store_id), status=ReviewStatus.PUBLIC.value)

    def count_moderated_for_store(self, store_id) -> int:
        """Approved, blind-held and public reviews of the store."""
        return len(self._fetch(store_id=str(store_id), status__in=list(MODERATED_STATUSES)))

    def awaiting_publication(self, store_id) -> list[Review]:
        return self._fetch(store_id=str(store_id), status__in=list(AWAITING_PUBLICATION_STATUSES))

    def approved_for_store(self, store_id) -> list[Review]:
        return self._fetch(store_id=str(store_id), status=ReviewStatus.APPROVED.value)

    def pending_submitted_before(self, cutoff) -> list[Review]:
        return self._fetch(status=ReviewStatus.PENDING.value, created_at__lt=cutoff)

    def public_by_reviewer(self, reviewer_id) -> list[Review]:
        return self._fetch(reviewer_id=str(reviewer_id), status=ReviewStatus.PUBLIC.value)

    def recent_public_by_reviewer(self, reviewer_id, limit=DEVIATION_SAMPLE_SIZE) -> list[Review]:
        """Most recent public reviews of a reviewer, newest first."""
        return (
            self._dao.query.filter(reviewer_id=str(reviewer_id), status=ReviewStatus.PUBLIC.value)
            .order_by("-created_at")
            .limit(limit)
            .all()
            .items
        )

    def store_ids_reviewed_publicly_by(self, reviewer_id) -> list[str]:
        """Distinct stores where the reviewer has at least one public review."""
        return _distinct_store_ids(self.public_by_reviewer(reviewer_id))

    def store_ids_with_public_reviews(self) -> list[str]:
        return _distinct_store_ids(self._fetch(status=ReviewStatus.PUBLIC.value))


def _distinct_store_ids(reviews) -> list[str]:
    seen = {}
    for review in reviews:
        seen.setdefault(str(review.store_id), None)
    return list(seen)
