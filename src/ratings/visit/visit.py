"""StoreVisit aggregate — how many times a reviewer has publicly reviewed a store.

One record per (reviewer, store). The counter only grows: it is bumped each
time one of the reviewer's reviews of that store becomes public.
"""

from protean.fields import DateTime, Identifier, Integer

from ratings.domain import ratings


@ratings.aggregate
class StoreVisit:
    reviewer_id = Identifier(required=True)
    store_id = Identifier(required=True)
    visit_count = Integer(default=0, min_value=0)
    last_visited_at = DateTime()

    def increment(self, at):
        """Count one more public visit and return the new total."""
        self.visit_count = self.visit_count + 1
        self.last_visited_at = at
        return self.visit_count


@ratings.repository(part_of=StoreVisit)
class StoreVisitRepository:
    def find_for(self, reviewer_id, store_id) -> StoreVisit | None:
        """The visit record for a reviewer/store pair, if any."""
        results = self._dao.query.filter(
            reviewer_id=str(reviewer_id),
            store_id=str(store_id),
        ).all()
        if not results or not results.items:
            return None
        return results.first
