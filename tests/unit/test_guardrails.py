"""Tests for license guardrail evaluation."""

import pytest

from xenon_gatekeeper.licensing.guardrails import LicenseGuardrails


class TestLicenseGuardrails:
    def test_under_limits(self) -> None:
        g = LicenseGuardrails.evaluate(
            max_branches=3, max_users=15, current_branches=1, current_users=6
        )
        assert g.can_add_branch is True
        assert g.can_add_user is True
        assert g.remaining_branches == 2
        assert g.remaining_users == 9
        assert g.branch_usage_percent == pytest.approx(33.333, rel=1e-3)
        assert g.user_usage_percent == pytest.approx(40.0)

    def test_at_limit(self) -> None:
        """Reaching the limit blocks further additions."""
        g = LicenseGuardrails.evaluate(
            max_branches=1, max_users=5, current_branches=1, current_users=5
        )
        assert g.can_add_branch is False
        assert g.can_add_user is False
        assert g.remaining_branches == 0
        assert g.branch_usage_percent == 100.0

    def test_over_limit_after_downgrade(self) -> None:
        """Usage above the limit is reported, remaining never negative."""
        g = LicenseGuardrails.evaluate(
            max_branches=2, max_users=5, current_branches=3, current_users=8
        )
        assert g.can_add_branch is False
        assert g.remaining_branches == 0
        assert g.remaining_users == 0
        assert g.branch_usage_percent == pytest.approx(150.0)
        assert g.user_usage_percent == pytest.approx(160.0)

    def test_zero_limits(self) -> None:
        g = LicenseGuardrails.evaluate(
            max_branches=0, max_users=0, current_branches=0, current_users=2
        )
        assert g.can_add_branch is False
        assert g.can_add_user is False
        assert g.branch_usage_percent == 0.0
        assert g.user_usage_percent == 0.0

    def test_to_dict(self) -> None:
        g = LicenseGuardrails.evaluate(
            max_branches=10, max_users=50, current_branches=5, current_users=25
        )
        data = g.to_dict()
        assert data["can_add_branch"] is True
        assert data["remaining_users"] == 25
        assert data["branch_usage_percent"] == 50.0
        assert set(data) >= {"max_branches", "current_users", "user_usage_percent"}
