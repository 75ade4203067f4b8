"""Ratings bounded context — Restaurant Reviews, Reviewer Trust, and Store Scores.

Handles the review lifecycle (submission, moderation, blind hold, publication,
suspension), reviewer trust tiers and deviation targets, and the trust-weighted
store score. Scheduled policy jobs keep time-dependent state current.
"""

from protean.domain import Domain

from ratings.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

ratings = Domain(name="ratings")
