"""In-memory block list of client IP addresses."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from threading import Lock
from typing import Protocol


def _utcnow() -> datetime:
    return datetime.now(UTC)


class IpBlockChecker(Protocol):
    """Read side of a block list, as used by the IP block gate."""

    def is_blocked(self, ip: str) -> bool: ...


@dataclass(frozen=True)
class BlockedIpEntry:
    ip: str
    reason: str
    blocked_at: datetime
    expires_at: datetime | None = None

    def is_active(self, now: datetime) -> bool:
        return self.expires_at is None or self.expires_at > now


class InMemoryIpBlocklist:
    """Block list with optional per-entry expiry.

    Thread-safe via Lock. Single-instance only.
    For multi-instance deployments: replace with a shared backend.
    """

    def __init__(self) -> None:
        self._entries: dict[str, BlockedIpEntry] = {}
        self._lock = Lock()

    def block(
        self,
        ip: str,
        reason: str,
        duration: timedelta | None = None,
    ) -> BlockedIpEntry:
        """Block *ip*, replacing any existing entry.

        Args:
            ip: Client address as resolved by the gate.
            reason: Short machine-readable reason, e.g. "brute_force".
            duration: Block lifetime; None blocks until cleared manually.
        """
        now = _utcnow()
        entry = BlockedIpEntry(
            ip=ip,
            reason=reason,
            blocked_at=now,
            expires_at=now + duration if duration is not None else None,
        )
        with self._lock:
            self._entries[ip] = entry
        return entry

    def unblock(self, ip: str) -> bool:
        """Remove *ip*. Returns False if it was not listed."""
        with self._lock:
            return self._entries.pop(ip, None) is not None

    def is_blocked(self, ip: str) -> bool:
        if not ip:
            return False
        with self._lock:
            entry = self._entries.get(ip)
        return entry is not None and entry.is_active(_utcnow())

    def entries(self) -> list[BlockedIpEntry]:
        """Currently active entries, oldest first."""
        now = _utcnow()
        with self._lock:
            active = [e for e in self._entries.values() if e.is_active(now)]
        return sorted(active, key=lambda e: e.blocked_at)

    def cleanup(self) -> int:
        """Remove expired entries. Call periodically.

        Returns:
            Number of entries removed.
        """
        now = _utcnow()
        with self._lock:
            expired = [ip for ip, e in self._entries.items() if not e.is_active(now)]
            for ip in expired:
                del self._entries[ip]
        return len(expired)
