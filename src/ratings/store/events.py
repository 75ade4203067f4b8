"""Domain events for the Store aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from ratings.domain import ratings


@ratings.event(part_of="Store")
class StoreRegistered:
    """A store was added to the ratings catalogue."""

    __version__ = 1

    store_id = Identifier(required=True)
    name = String(required=True)
    registered_at = DateTime(required=True)


@ratings.event(part_of="Store")
class StoreScoresRecalculated:
    """A store's public aggregate was recomputed from its public reviews."""

    __version__ = 1

    store_id = Identifier(required=True)
    review_count_valid = Integer(required=True)
    avg_rating = Float(required=True)
    score_weighted = Float(required=True)
    is_blind = Boolean(required=True)
    recalculated_at = DateTime(required=True)
