"""RecalculateStoreScores — recompute one store's aggregate on demand.

Used by the time-decay refresh so each store is recalculated in its own unit
of work.
"""

from protean.fields import DateTime, Identifier
from protean.utils.mixins import handle

from ratings.domain import ratings
from ratings.store.aggregation import recalculate_store
from ratings.store.store import Store


@ratings.command(part_of="Store")
class RecalculateStoreScores:
    store_id = Identifier(required=True)
    as_of = DateTime()


@ratings.command_handler(part_of=Store)
class RecalculateStoreScoresHandler:
    @handle(RecalculateStoreScores)
    def recalculate(self, command):
        """Returns the store's new weighted score."""
        store = recalculate_store(command.store_id, as_of=command.as_of)
        return store.score_weighted
