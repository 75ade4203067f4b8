"""Administrative overrides of a reviewer's tier and role.

A tier override bypasses the automatic rule and is then propagated to the
reviewer's public reviews and the stores they rated. Administrators cannot
change their own role.
"""

from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from ratings.domain import logger, ratings
from ratings.errors import Forbidden
from ratings.policy.access import require_admin
from ratings.policy.tier_changes import handle_tier_change
from ratings.reviewer.reviewer import Reviewer


@ratings.command(part_of="Reviewer")
class OverrideReviewerTier:
    actor_id = Identifier()
    reviewer_id = Identifier(required=True)
    tier = String(required=True)
    elite = Boolean(default=False)


@ratings.command(part_of="Reviewer")
class ChangeReviewerRole:
    actor_id = Identifier()
    reviewer_id = Identifier(required=True)
    role = String(required=True)


@ratings.command_handler(part_of=Reviewer)
class ReviewerAdministrationHandler:
    @handle(OverrideReviewerTier)
    def override_tier(self, command):
        """Returns the tier the reviewer held before the override."""
        admin = require_admin(command.actor_id)

        repo = current_domain.repository_for(Reviewer)
        reviewer = repo.get(command.reviewer_id)
        previous_tier = reviewer.override_tier(command.tier, elite=command.elite)
        repo.add(reviewer)

        logger.info(
            "Reviewer tier overridden",
            reviewer_id=str(reviewer.id),
            previous_tier=previous_tier,
            new_tier=reviewer.tier,
            tier_mode=reviewer.tier_mode,
            admin_id=str(admin.id),
        )
        handle_tier_change(reviewer.id, previous_tier, reviewer.tier)
        return previous_tier

    @handle(ChangeReviewerRole)
    def change_role(self, command):
        """Returns the role the reviewer held before the change."""
        admin = require_admin(command.actor_id)
        if str(admin.id) == str(command.reviewer_id):
            raise Forbidden("Administrators cannot change their own role")

        repo = current_domain.repository_for(Reviewer)
        reviewer = repo.get(command.reviewer_id)
        previous_role = reviewer.change_role(command.role, changed_by=admin.id)
        repo.add(reviewer)
        return previous_role
