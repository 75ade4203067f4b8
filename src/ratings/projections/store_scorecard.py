"""StoreScorecard — what readers see of a store's aggregate.

Scores stay hidden (``None``) while the store is blind.
"""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from ratings.domain import ratings
from ratings.store.events import StoreRegistered, StoreScoresRecalculated
from ratings.store.store import Store


@ratings.projection
class StoreScorecard:
    store_id = Identifier(identifier=True, required=True)
    name = String(required=True)
    review_count_valid = Integer(default=0)
    avg_rating = Float()
    score_weighted = Float()
    is_blind = Boolean(default=True)
    updated_at = DateTime()


@ratings.projector(projector_for=StoreScorecard, aggregates=[Store])
class StoreScorecardProjector:
    @on(StoreRegistered)
    def on_store_registered(self, event):
        current_domain.repository_for(StoreScorecard).add(
            StoreScorecard(
                store_id=event.store_id,
                name=event.name,
                review_count_valid=0,
                is_blind=True,
                updated_at=event.registered_at,
            )
        )

    @on(StoreScoresRecalculated)
    def on_scores_recalculated(self, event):
        repo = current_domain.repository_for(StoreScorecard)
        try:
            card = repo.get(event.store_id)
        except ObjectNotFoundError:
            store = current_domain.repository_for(Store).get(event.store_id)
            card = StoreScorecard(store_id=event.store_id, name=store.name)

        card.review_count_valid = event.review_count_valid
        card.is_blind = event.is_blind
        card.avg_rating = None if event.is_blind else event.avg_rating
        card.score_weighted = None if event.is_blind else event.score_weighted
        card.updated_at = event.recalculated_at
        repo.add(card)
