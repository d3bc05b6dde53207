"""License guardrails: plan capacity versus live usage."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


def _usage_percent(current: int, maximum: int) -> float:
    """Share of *maximum* used, in percent. Not clamped above 100."""
    if maximum <= 0:
        return 0.0
    return current / maximum * 100


@dataclass(frozen=True)
class LicenseGuardrails:
    """Snapshot of a tenant's branch/user capacity.

    Build with :meth:`evaluate` from the plan limits and counts taken at
    call time. A tenant over its limit (e.g. after a downgrade) reports
    usage above 100%.
    """

    max_branches: int
    max_users: int
    current_branches: int
    current_users: int

    @classmethod
    def evaluate(
        cls,
        max_branches: int,
        max_users: int,
        current_branches: int,
        current_users: int,
    ) -> LicenseGuardrails:
        return cls(
            max_branches=max_branches,
            max_users=max_users,
            current_branches=current_branches,
            current_users=current_users,
        )

    @property
    def can_add_branch(self) -> bool:
        return self.current_branches < self.max_branches

    @property
    def can_add_user(self) -> bool:
        return self.current_users < self.max_users

    @property
    def remaining_branches(self) -> int:
        return max(0, self.max_branches - self.current_branches)

    @property
    def remaining_users(self) -> int:
        return max(0, self.max_users - self.current_users)

    @property
    def branch_usage_percent(self) -> float:
        return _usage_percent(self.current_branches, self.max_branches)

    @property
    def user_usage_percent(self) -> float:
        return _usage_percent(self.current_users, self.max_users)

    def to_dict(self) -> dict[str, Any]:
        return {
            "max_branches": self.max_branches,
            "max_users": self.max_users,
            "current_branches": self.current_branches,
            "current_users": self.current_users,
            "can_add_branch": self.can_add_branch,
            "can_add_user": self.can_add_user,
            "remaining_branches": self.remaining_branches,
            "remaining_users": self.remaining_users,
            "branch_usage_percent": self.branch_usage_percent,
            "user_usage_percent": self.user_usage_percent,
        }
