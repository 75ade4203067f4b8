"""Actor checks shared by the command handlers.

The authenticated reviewer id travels on every command as ``actor_id``;
handlers never read identity from ambient state.
"""

from protean.utils.globals import current_domain

from ratings.errors import Forbidden, Unauthenticated
from ratings.reviewer.reviewer import Reviewer


def require_reviewer(actor_id) -> Reviewer:
    """Load the acting reviewer or fail with Unauthenticated / ObjectNotFoundError."""
    if not actor_id:
        raise Unauthenticated("Login is required")
    return current_domain.repository_for(Reviewer).get(actor_id)


def require_admin(actor_id) -> Reviewer:
    actor = require_reviewer(actor_id)
    if not actor.is_admin:
        raise Forbidden("Administrator privileges are required")
    return actor


def require_owner_or_admin(actor_id, owner_id) -> Reviewer:
    actor = require_reviewer(actor_id)
    if str(actor.id) != str(owner_id) and not actor.is_admin:
        raise Forbidden("Only the author or an administrator may change this review")
    return actor
