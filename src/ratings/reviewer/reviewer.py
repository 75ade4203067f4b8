"""Reviewer aggregate — identity, activity counters and trust state.

A reviewer's tier is fully determined by (review_count, helpful_count) while
their tier mode is AUTOMATIC. Administrators may pin a tier: Black puts the
reviewer in RESTRICTED mode, an elite grant puts them in ELITE mode. Neither
is ever overwritten by the automatic rule.
"""

from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Integer, String

from ratings.domain import ratings
from ratings.reviewer.events import (
    DeviationTargetChanged,
    PhoneVerificationChanged,
    ReviewerRegistered,
    ReviewerRoleChanged,
    ReviewerTierChanged,
)
from ratings.reviewer.trust import (
    ReviewerRole,
    ReviewerTier,
    TierMode,
    calculate_tier,
    tier_below,
)


class TierChangeReason:
    ACTIVITY = "Activity"
    OVERRIDE = "Override"
    LAPSE = "Lapse"


@ratings.aggregate
class Reviewer:
    """A registered person who rates stores."""

    nickname = String(required=True, max_length=50)
    email = String(required=True, max_length=100)
    role = String(choices=ReviewerRole, default=ReviewerRole.USER.value)

    # Trust state
    tier = String(choices=ReviewerTier, default=ReviewerTier.BRONZE.value)
    tier_mode = String(choices=TierMode, default=TierMode.AUTOMATIC.value)
    is_deviation_target = Boolean(default=False)
    is_phone_verified = Boolean(default=False)

    # Activity counters
    review_count = Integer(default=0, min_value=0)
    helpful_count = Integer(default=0, min_value=0)
    violation_count = Integer(default=0, min_value=0)
    last_review_at = DateTime()

    registered_at = DateTime()

    @invariant.post
    def black_tier_means_restricted_mode(self):
        is_black = self.tier == ReviewerTier.BLACK.value
        is_restricted = self.tier_mode == TierMode.RESTRICTED.value
        if is_black != is_restricted:
            raise ValidationError({"tier": ["Black tier and restricted mode must go together"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def register(cls, nickname, email, role=ReviewerRole.USER.value, phone_verified=False):
        now = datetime.now(UTC)
        reviewer = cls(
            nickname=nickname,
            email=email,
            role=role,
            tier=ReviewerTier.BRONZE.value,
            tier_mode=TierMode.AUTOMATIC.value,
            is_phone_verified=phone_verified,
            registered_at=now,
        )
        reviewer.raise_(
            ReviewerRegistered(
                reviewer_id=str(reviewer.id),
                nickname=nickname,
                role=role,
                tier=reviewer.tier,
                registered_at=now,
            )
        )
        return reviewer

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def is_admin(self) -> bool:
        return self.role == ReviewerRole.ADMIN.value

    @property
    def is_restricted(self) -> bool:
        return self.tier_mode == TierMode.RESTRICTED.value

    @property
    def is_elite(self) -> bool:
        return self.tier_mode == TierMode.ELITE.value

    # -------------------------------------------------------------------
    # Phone verification
    # -------------------------------------------------------------------
    def verify_phone(self):
        self._set_phone_verified(True)

    def revoke_phone_verification(self):
        self._set_phone_verified(False)

    def _set_phone_verified(self, verified):
        if self.is_phone_verified == verified:
            return
        self.is_phone_verified = verified
        self.raise_(
            PhoneVerificationChanged(
                reviewer_id=str(self.id),
                is_phone_verified=verified,
                changed_at=datetime.now(UTC),
            )
        )

    # -------------------------------------------------------------------
    # Activity counters
    # -------------------------------------------------------------------
    def record_review_submitted(self, submitted_at=None):
        """Count a new submission and stamp the last-activity time."""
        self.review_count = self.review_count + 1
        self.last_review_at = submitted_at or datetime.now(UTC)
        self.recompute_tier()

    def record_helpful_received(self):
        self.helpful_count = self.helpful_count + 1
        self.recompute_tier()

    def record_helpful_withdrawn(self):
        if self.helpful_count > 0:
            self.helpful_count = self.helpful_count - 1
            self.recompute_tier()

    def record_violation(self):
        self.violation_count = self.violation_count + 1

    def recompute_tier(self):
        """Apply the automatic tier rule unless an administrator pinned the tier."""
        if self.tier_mode != TierMode.AUTOMATIC.value:
            return
        new_tier = calculate_tier(self.review_count, self.helpful_count)
        if new_tier != self.tier:
            self._change_tier(new_tier, TierChangeReason.ACTIVITY)

    def _change_tier(self, new_tier, reason):
        previous_tier = self.tier
        self.tier = new_tier
        self.raise_(
            ReviewerTierChanged(
                reviewer_id=str(self.id),
                previous_tier=previous_tier,
                new_tier=new_tier,
                tier_mode=self.tier_mode,
                reason=reason,
                changed_at=datetime.now(UTC),
            )
        )
        return previous_tier

    # -------------------------------------------------------------------
    # Administrative overrides
    # -------------------------------------------------------------------
    def override_tier(self, new_tier, elite=False):
        """Pin the reviewer to ``new_tier`` and return the tier they had before.

        Black always means RESTRICTED. Any other tier is pinned as ELITE when
        ``elite`` is set, or handed back to the automatic rule otherwise.
        """
        if new_tier not in {t.value for t in ReviewerTier}:
            raise ValidationError({"tier": [f"Unknown tier: {new_tier}"]})

        if new_tier == ReviewerTier.BLACK.value:
            mode = TierMode.RESTRICTED.value
        elif elite:
            mode = TierMode.ELITE.value
        else:
            mode = TierMode.AUTOMATIC.value

        previous_tier = self.tier
        if new_tier == previous_tier:
            self.tier_mode = mode
            return previous_tier

        with atomic_change(self):
            self.tier_mode = mode
            self._change_tier(new_tier, TierChangeReason.OVERRIDE)
        return previous_tier

    def step_down_tier(self):
        """Demote one step for lapsed activity; returns the previous tier."""
        if self.tier_mode != TierMode.AUTOMATIC.value:
            raise ValidationError({"tier": ["Only automatically earned tiers can lapse"]})
        return self._change_tier(tier_below(self.tier), TierChangeReason.LAPSE)

    def change_role(self, new_role, changed_by):
        if new_role not in {r.value for r in ReviewerRole}:
            raise ValidationError({"role": [f"Unknown role: {new_role}"]})

        previous_role = self.role
        if previous_role == new_role:
            return previous_role

        self.role = new_role
        self.raise_(
            ReviewerRoleChanged(
                reviewer_id=str(self.id),
                previous_role=previous_role,
                new_role=new_role,
                changed_by=str(changed_by),
                changed_at=datetime.now(UTC),
            )
        )
        return previous_role

    # -------------------------------------------------------------------
    # Deviation target
    # -------------------------------------------------------------------
    def mark_deviation_target(self, is_target):
        """Set the deviation flag; returns True when it actually changed."""
        if bool(self.is_deviation_target) == bool(is_target):
            return False

        self.is_deviation_target = bool(is_target)
        self.raise_(
            DeviationTargetChanged(
                reviewer_id=str(self.id),
                is_deviation_target=bool(is_target),
                changed_at=datetime.now(UTC),
            )
        )
        return True
