"""Reader-facing view of a review.

While a review's store is blind its scores are masked: the composite and the
four dimension scores are returned as ``None``.
"""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ratings.review.review import Review
from ratings.store.store import Store

SCORE_FIELDS = ("composite_score", "taste", "value", "ambiance", "service")


def review_view(review_id) -> dict:
    review = current_domain.repository_for(Review).get(review_id)

    try:
        store_is_blind = current_domain.repository_for(Store).get(review.store_id).is_blind
    except ObjectNotFoundError:
        store_is_blind = True

    view = {
        "review_id": str(review.id),
        "store_id": str(review.store_id),
        "reviewer_id": str(review.reviewer_id),
        "title": review.title,
        "content": review.content,
        "party_size": review.party_size,
        "visit_date": review.visit_date,
        "status": review.status,
        "visit_count": review.visit_count,
        "helpful_count": review.helpful_count,
        "created_at": review.created_at,
        "updated_at": review.updated_at,
        "composite_score": review.composite_score,
        "taste": review.scores.taste,
        "value": review.scores.value,
        "ambiance": review.scores.ambiance,
        "service": review.scores.service,
        "scores_masked": store_is_blind,
    }
    if store_is_blind:
        view.update(dict.fromkeys(SCORE_FIELDS))
    return view
