"""Repository for the Reviewer aggregate."""

from ratings.domain import ratings
from ratings.reviewer.reviewer import Reviewer

# Upper bound on rows fetched by a single lookup
MAX_RESULTS = 100_000


@ratings.repository(part_of=Reviewer)
class ReviewerRepository:
    def list_all(self) -> list[Reviewer]:
        return self._dao.query.limit(MAX_RESULTS).all().items

    def list_ids(self) -> list[str]:
        return [str(reviewer.id) for reviewer in self.list_all()]

    def find_by_tier(self, tier) -> list[Reviewer]:
        return self._dao.query.filter(tier=tier).limit(MAX_RESULTS).all().items

    def _first(self, **filters) -> Reviewer | None:
        results = self._dao.query.filter(**filters).all()
        if not results or not results.items:
            return None
        return results.first

    def find_by_email(self, email) -> Reviewer | None:
        return self._first(email=email)

    def find_by_nickname(self, nickname) -> Reviewer | None:
        return self._first(nickname=nickname)
