"""Domain events for the Reviewer aggregate."""

from protean.fields import Boolean, DateTime, Identifier, String

from ratings.domain import ratings


@ratings.event(part_of="Reviewer")
class ReviewerRegistered:
    """A new reviewer account was created."""

    __version__ = 1

    reviewer_id = Identifier(required=True)
    nickname = String(required=True)
    role = String(required=True)
    tier = String(required=True)
    registered_at = DateTime(required=True)


@ratings.event(part_of="Reviewer")
class PhoneVerificationChanged:
    """The reviewer's phone verification flag was set or cleared."""

    __version__ = 1

    reviewer_id = Identifier(required=True)
    is_phone_verified = Boolean(required=True)
    changed_at = DateTime(required=True)


@ratings.event(part_of="Reviewer")
class ReviewerTierChanged:
    """The reviewer moved to a different trust tier."""

    __version__ = 1

    reviewer_id = Identifier(required=True)
    previous_tier = String(required=True)
    new_tier = String(required=True)
    tier_mode = String(required=True)
    reason = String(required=True)  # "Activity", "Override", "Lapse"
    changed_at = DateTime(required=True)


@ratings.event(part_of="Reviewer")
class ReviewerRoleChanged:
    """An administrator changed the reviewer's role."""

    __version__ = 1

    reviewer_id = Identifier(required=True)
    previous_role = String(required=True)
    new_role = String(required=True)
    changed_by = Identifier(required=True)
    changed_at = DateTime(required=True)


@ratings.event(part_of="Reviewer")
class DeviationTargetChanged:
    """The reviewer's deviation-target flag flipped."""

    __version__ = 1

    reviewer_id = Identifier(required=True)
    is_deviation_target = Boolean(required=True)
    changed_at = DateTime(required=True)
