"""Tests for the Reviewer aggregate — counters, tier modes and overrides."""

from datetime import UTC, datetime

import pytest
from protean.exceptions import ValidationError
from ratings.reviewer.events import (
    DeviationTargetChanged,
    ReviewerRegistered,
    ReviewerRoleChanged,
    ReviewerTierChanged,
)
from ratings.reviewer.reviewer import Reviewer, TierChangeReason


def _make_reviewer(**overrides):
    defaults = {"nickname": "foodie", "email": "foodie@example.com"}
    defaults.update(overrides)
    reviewer = Reviewer.register(**defaults)
    reviewer._events.clear()
    return reviewer


def _reviewer_with_counts(review_count, helpful_count, tier):
    return Reviewer(
        nickname="regular",
        email="regular@example.com",
        review_count=review_count,
        helpful_count=helpful_count,
        tier=tier,
    )


class TestRegistration:
    def test_starts_as_automatic_bronze_user(self):
        reviewer = Reviewer.register(nickname="foodie", email="foodie@example.com")
        assert reviewer.tier == "Bronze"
        assert reviewer.tier_mode == "Automatic"
        assert reviewer.role == "User"
        assert reviewer.is_phone_verified is False
        assert reviewer.review_count == 0

    def test_raises_registered_event(self):
        reviewer = Reviewer.register(nickname="foodie", email="foodie@example.com")
        assert isinstance(reviewer._events[0], ReviewerRegistered)

    def test_phone_verification_toggles(self):
        reviewer = _make_reviewer()
        reviewer.verify_phone()
        assert reviewer.is_phone_verified is True
        reviewer.revoke_phone_verification()
        assert reviewer.is_phone_verified is False


class TestAutomaticTier:
    def test_fifth_submission_promotes_to_silver(self):
        reviewer = _make_reviewer()
        for _ in range(5):
            reviewer.record_review_submitted()

        assert reviewer.tier == "Silver"
        tier_events = [e for e in reviewer._events if isinstance(e, ReviewerTierChanged)]
        assert len(tier_events) == 1
        assert tier_events[0].previous_tier == "Bronze"
        assert tier_events[0].reason == TierChangeReason.ACTIVITY

    def test_submission_stamps_last_review_time(self):
        reviewer = _make_reviewer()
        at = datetime(2024, 3, 1, 19, 30, tzinfo=UTC)
        reviewer.record_review_submitted(at)
        assert reviewer.last_review_at == at

    def test_helpful_votes_can_promote(self):
        reviewer = _reviewer_with_counts(30, 99, "Silver")
        reviewer.record_helpful_received()
        assert reviewer.tier == "Gold"

    def test_withdrawn_helpful_vote_can_demote(self):
        reviewer = _reviewer_with_counts(30, 100, "Gold")
        reviewer.record_helpful_withdrawn()
        assert reviewer.tier == "Silver"

    def test_helpful_count_never_goes_negative(self):
        reviewer = _make_reviewer()
        reviewer.record_helpful_withdrawn()
        assert reviewer.helpful_count == 0

    def test_restricted_reviewer_is_not_recomputed(self):
        reviewer = _make_reviewer()
        reviewer.override_tier("Black")
        for _ in range(10):
            reviewer.record_review_submitted()
        assert reviewer.tier == "Black"

    def test_elite_reviewer_is_not_recomputed(self):
        reviewer = _make_reviewer()
        reviewer.override_tier("Gourmet", elite=True)
        reviewer.record_review_submitted()
        assert reviewer.tier == "Gourmet"


class TestOverride:
    def test_black_means_restricted(self):
        reviewer = _make_reviewer()
        previous = reviewer.override_tier("Black")
        assert previous == "Bronze"
        assert reviewer.tier == "Black"
        assert reviewer.tier_mode == "Restricted"
        assert reviewer.is_restricted

    def test_elite_grant(self):
        reviewer = _make_reviewer()
        reviewer.override_tier("Gold", elite=True)
        assert reviewer.tier_mode == "Elite"
        assert reviewer.is_elite

    def test_plain_override_hands_back_to_automatic(self):
        reviewer = _make_reviewer()
        reviewer.override_tier("Black")
        previous = reviewer.override_tier("Silver")
        assert previous == "Black"
        assert reviewer.tier_mode == "Automatic"

    def test_override_event_reason(self):
        reviewer = _make_reviewer()
        reviewer.override_tier("Gold")
        event = reviewer._events[-1]
        assert isinstance(event, ReviewerTierChanged)
        assert event.reason == TierChangeReason.OVERRIDE

    def test_same_tier_changes_only_the_mode(self):
        reviewer = _make_reviewer()
        previous = reviewer.override_tier("Bronze", elite=True)
        assert previous == "Bronze"
        assert reviewer.tier_mode == "Elite"
        assert not any(isinstance(e, ReviewerTierChanged) for e in reviewer._events)

    def test_unknown_tier_is_rejected(self):
        reviewer = _make_reviewer()
        with pytest.raises(ValidationError):
            reviewer.override_tier("Platinum")

    def test_black_tier_requires_restricted_mode(self):
        reviewer = _make_reviewer()
        with pytest.raises(ValidationError):
            reviewer.tier = "Black"


class TestStepDown:
    def test_gold_steps_down_to_silver(self):
        reviewer = _make_reviewer()
        reviewer.override_tier("Gold")
        previous = reviewer.step_down_tier()
        assert previous == "Gold"
        assert reviewer.tier == "Silver"
        assert reviewer._events[-1].reason == TierChangeReason.LAPSE

    def test_pinned_tiers_do_not_lapse(self):
        reviewer = _make_reviewer()
        reviewer.override_tier("Gold", elite=True)
        with pytest.raises(ValidationError):
            reviewer.step_down_tier()


class TestRoleAndFlags:
    def test_change_role(self):
        reviewer = _make_reviewer()
        previous = reviewer.change_role("Admin", changed_by="admin-1")
        assert previous == "User"
        assert reviewer.is_admin
        assert isinstance(reviewer._events[-1], ReviewerRoleChanged)

    def test_unknown_role_is_rejected(self):
        reviewer = _make_reviewer()
        with pytest.raises(ValidationError):
            reviewer.change_role("Owner", changed_by="admin-1")

    def test_violation_counter(self):
        reviewer = _make_reviewer()
        reviewer.record_violation()
        reviewer.record_violation()
        assert reviewer.violation_count == 2

    def test_deviation_flag_reports_changes_only(self):
        reviewer = _make_reviewer()
        assert reviewer.mark_deviation_target(True) is True
        assert reviewer.mark_deviation_target(True) is False
        assert reviewer.mark_deviation_target(False) is True
        flag_events = [e for e in reviewer._events if isinstance(e, DeviationTargetChanged)]
        assert len(flag_events) == 2
