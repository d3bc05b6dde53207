"""Tests for the IP block gate and automatic brute-force blocking."""

from unittest.mock import MagicMock, patch

import pytest
from httpx import AsyncClient

from xenon_gatekeeper.api.app import app, ip_blocklist
from xenon_gatekeeper.api.deps import get_pricing_calculator
from xenon_gatekeeper.api.middleware import IP_BLOCKED_MESSAGE
from xenon_gatekeeper.config import settings

# httpx ASGITransport reports this client address.
TRANSPORT_PEER = "127.0.0.1"

BLOCKED_BODY = {
    "success": False,
    "error": (
        "Your IP address has been temporarily blocked due to suspicious "
        "activity. Please try again later."
    ),
}


@pytest.fixture()
def calculator() -> MagicMock:
    calc = MagicMock()
    calc.active_plans.return_value = []
    app.dependency_overrides[get_pricing_calculator] = lambda: calc
    return calc


class TestIpBlockGate:
    def test_message_text(self) -> None:
        assert BLOCKED_BODY["error"] == IP_BLOCKED_MESSAGE

    async def test_empty_blocklist_passes(
        self, client: AsyncClient, calculator: MagicMock
    ) -> None:
        response = await client.get(
            "/api/v1/pricing/plans",
            headers={"X-Forwarded-For": "203.0.113.7"},
        )
        assert response.status_code == 200
        calculator.active_plans.assert_called_once()

    async def test_blocked_forwarded_ip_rejected(
        self, client: AsyncClient, calculator: MagicMock
    ) -> None:
        ip_blocklist.block("203.0.113.7", "manual")

        with patch("xenon_gatekeeper.api.middleware.logger") as mock_logger:
            response = await client.get(
                "/api/v1/pricing/plans",
                headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"},
            )

        assert response.status_code == 403
        assert response.json() == BLOCKED_BODY
        calculator.active_plans.assert_not_called()
        mock_logger.warning.assert_any_call(
            "ip_blocked", ip="203.0.113.7", path="/api/v1/pricing/plans"
        )

    async def test_blocked_real_ip_rejected(
        self, client: AsyncClient, calculator: MagicMock
    ) -> None:
        ip_blocklist.block("198.51.100.4", "manual")
        response = await client.get(
            "/api/v1/pricing/plans",
            headers={"X-Real-IP": "198.51.100.4"},
        )
        assert response.status_code == 403
        assert response.json() == BLOCKED_BODY

    async def test_other_ip_unaffected(
        self, client: AsyncClient, calculator: MagicMock
    ) -> None:
        ip_blocklist.block("203.0.113.7", "manual")
        response = await client.get(
            "/api/v1/pricing/plans",
            headers={"X-Forwarded-For": "203.0.113.8"},
        )
        assert response.status_code == 200

    async def test_health_also_gated(self, client: AsyncClient) -> None:
        ip_blocklist.block("203.0.113.7", "manual")
        response = await client.get(
            "/health", headers={"X-Forwarded-For": "203.0.113.7"}
        )
        assert response.status_code == 403


class TestBruteForceBlocking:
    async def test_repeated_invalid_tokens_block_peer(
        self, client: AsyncClient, calculator: MagicMock
    ) -> None:
        """The fifth invalid token from one address is rejected by the gate."""
        headers = {"Authorization": "Bearer not-a-jwt"}
        statuses = [
            (await client.get("/api/v1/pricing/plans", headers=headers)).status_code
            for _ in range(5)
        ]

        assert statuses == [200, 200, 200, 200, 403]
        assert ip_blocklist.is_blocked(TRANSPORT_PEER) is True
        assert ip_blocklist.entries()[0].reason == "brute_force"

        # Later requests are rejected even with no token at all.
        response = await client.get("/api/v1/pricing/plans")
        assert response.status_code == 403
        assert response.json() == BLOCKED_BODY

    async def test_spoofed_forwarded_for_does_not_block_victim(
        self, client: AsyncClient, calculator: MagicMock
    ) -> None:
        victim = "198.51.100.77"
        attacker = {"Authorization": "Bearer garbage", "X-Forwarded-For": victim}
        for _ in range(5):
            await client.get("/api/v1/pricing/plans", headers=attacker)

        assert ip_blocklist.is_blocked(victim) is False
        assert ip_blocklist.is_blocked(TRANSPORT_PEER) is True

        response = await client.get(
            "/api/v1/pricing/plans", headers={"X-Forwarded-For": victim}
        )
        assert response.status_code == 200

    async def test_forwarded_for_counted_behind_trusted_proxy(
        self,
        client: AsyncClient,
        calculator: MagicMock,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(settings, "trusted_proxies", [TRANSPORT_PEER])
        headers = {
            "Authorization": "Bearer not-a-jwt",
            "X-Forwarded-For": "203.0.113.50",
        }
        statuses = [
            (await client.get("/api/v1/pricing/plans", headers=headers)).status_code
            for _ in range(5)
        ]

        assert statuses == [200, 200, 200, 200, 403]
        assert ip_blocklist.is_blocked("203.0.113.50") is True
        assert ip_blocklist.is_blocked(TRANSPORT_PEER) is False
