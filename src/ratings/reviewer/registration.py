"""Reviewer registration and phone verification.

Phone verification is the gate for submitting reviews. Verification itself
happens outside this system; an administrator records its outcome here.
"""

from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from ratings.domain import ratings
from ratings.errors import PreconditionFailed
from ratings.policy.access import require_admin
from ratings.reviewer.reviewer import Reviewer
from ratings.reviewer.trust import ReviewerRole


@ratings.command(part_of="Reviewer")
class RegisterReviewer:
    """Create a reviewer account.

    ``role`` and ``phone_verified`` are for provisioning only; the public
    sign-up endpoint never sets them.
    """

    nickname = String(required=True, max_length=50)
    email = String(required=True, max_length=100)
    role = String(choices=ReviewerRole, default=ReviewerRole.USER.value)
    phone_verified = Boolean(default=False)


@ratings.command(part_of="Reviewer")
class VerifyPhone:
    actor_id = Identifier()
    reviewer_id = Identifier(required=True)


@ratings.command(part_of="Reviewer")
class RevokePhoneVerification:
    actor_id = Identifier()
    reviewer_id = Identifier(required=True)


@ratings.command_handler(part_of=Reviewer)
class ReviewerRegistrationHandler:
    @handle(RegisterReviewer)
    def register_reviewer(self, command):
        repo = current_domain.repository_for(Reviewer)
        if repo.find_by_email(command.email) is not None:
            raise PreconditionFailed({"email": ["This email is already registered"]})
        if repo.find_by_nickname(command.nickname) is not None:
            raise PreconditionFailed({"nickname": ["This nickname is already taken"]})

        reviewer = Reviewer.register(
            nickname=command.nickname,
            email=command.email,
            role=command.role,
            phone_verified=command.phone_verified,
        )
        repo.add(reviewer)
        return str(reviewer.id)

    @handle(VerifyPhone)
    def verify_phone(self, command):
        require_admin(command.actor_id)
        repo = current_domain.repository_for(Reviewer)
        reviewer = repo.get(command.reviewer_id)
        reviewer.verify_phone()
        repo.add(reviewer)

    @handle(RevokePhoneVerification)
    def revoke_phone_verification(self, command):
        require_admin(command.actor_id)
        repo = current_domain.repository_for(Reviewer)
        reviewer = repo.get(command.reviewer_id)
        reviewer.revoke_phone_verification()
        repo.add(reviewer)
