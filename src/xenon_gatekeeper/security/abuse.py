"""Brute-force detection feeding the IP block list."""

from __future__ import annotations

import time
from collections import defaultdict
from datetime import timedelta
from threading import Lock

import structlog

from xenon_gatekeeper.security.blocklist import InMemoryIpBlocklist

logger = structlog.get_logger()

BRUTE_FORCE_REASON = "brute_force"


class SecurityEventMonitor:
    """Count authentication failures per IP and block repeat offenders.

    Sliding window: once *threshold* failures from one address fall within
    *window*, the address is blocked for *block_duration* and its counter
    is reset.

    Thread-safe via Lock. Single-instance only.
    """

    def __init__(
        self,
        blocklist: InMemoryIpBlocklist,
        *,
        threshold: int = 5,
        window: timedelta = timedelta(minutes=15),
        block_duration: timedelta = timedelta(minutes=60),
    ) -> None:
        self._blocklist = blocklist
        self._threshold = threshold
        self._window = window.total_seconds()
        self._block_duration = block_duration
        self._failures: dict[str, list[float]] = defaultdict(list)
        self._lock = Lock()

    def record_failure(self, ip: str | None, reason: str) -> bool:
        """Record one failed attempt from *ip*.

        Args:
            ip: Client address; failures without an address are ignored.
            reason: What failed, e.g. "invalid_token". Logged only.

        Returns:
            True if this failure caused the address to be blocked.
        """
        if not ip:
            return False

        now = time.monotonic()
        cutoff = now - self._window

        with self._lock:
            attempts = [t for t in self._failures[ip] if t > cutoff]
            attempts.append(now)
            if len(attempts) < self._threshold:
                self._failures[ip] = attempts
                return False
            del self._failures[ip]

        self._blocklist.block(ip, BRUTE_FORCE_REASON, self._block_duration)
        logger.warning(
            "ip_auto_blocked",
            ip=ip,
            reason=BRUTE_FORCE_REASON,
            trigger=reason,
            failures=len(attempts),
            block_minutes=int(self._block_duration.total_seconds() // 60),
        )
        return True

    def failure_count(self, ip: str) -> int:
        """Failures from *ip* still inside the window."""
        cutoff = time.monotonic() - self._window
        with self._lock:
            return sum(1 for t in self._failures.get(ip, []) if t > cutoff)

    def cleanup(self) -> int:
        """Remove addresses whose failures have all expired.

        Returns:
            Number of addresses cleaned up.
        """
        cutoff = time.monotonic() - self._window
        cleaned = 0

        with self._lock:
            empty_keys = []
            for ip, attempts in self._failures.items():
                self._failures[ip] = [t for t in attempts if t > cutoff]
                if not self._failures[ip]:
                    empty_keys.append(ip)
            for ip in empty_keys:
                del self._failures[ip]
                cleaned += 1

        return cleaned

    def reset(self) -> None:
        """Forget all recorded failures. Existing blocks are untouched."""
        with self._lock:
            self._failures.clear()
