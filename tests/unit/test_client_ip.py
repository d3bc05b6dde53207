"""Tests for client IP resolution."""

from starlette.datastructures import Headers

from xenon_gatekeeper.security.client_ip import resolve_client_ip, resolve_peer_ip


def _headers(**values: str) -> Headers:
    return Headers({k.replace("_", "-"): v for k, v in values.items()})


class TestResolveClientIp:
    def test_forwarded_for_first_entry(self) -> None:
        headers = _headers(x_forwarded_for="203.0.113.7, 10.0.0.2, 10.0.0.1")
        assert resolve_client_ip(headers, "10.0.0.1") == "203.0.113.7"

    def test_forwarded_for_header_case_insensitive(self) -> None:
        headers = Headers({"X-Forwarded-For": "203.0.113.7"})
        assert resolve_client_ip(headers, None) == "203.0.113.7"

    def test_forwarded_for_wins_over_real_ip(self) -> None:
        headers = _headers(x_forwarded_for="203.0.113.7", x_real_ip="198.51.100.1")
        assert resolve_client_ip(headers, None) == "203.0.113.7"

    def test_real_ip_fallback(self) -> None:
        headers = _headers(x_real_ip=" 198.51.100.1 ")
        assert resolve_client_ip(headers, "10.0.0.1") == "198.51.100.1"

    def test_remote_address_fallback(self) -> None:
        assert resolve_client_ip(_headers(), "10.0.0.1") == "10.0.0.1"

    def test_blank_forwarded_for_ignored(self) -> None:
        headers = _headers(x_forwarded_for=" , 10.0.0.2")
        assert resolve_client_ip(headers, "10.0.0.1") == "10.0.0.1"

    def test_nothing_available(self) -> None:
        assert resolve_client_ip(_headers(), None) is None


class TestResolvePeerIp:
    def test_forwarded_for_ignored_from_untrusted_peer(self) -> None:
        headers = _headers(x_forwarded_for="198.51.100.77")
        assert resolve_peer_ip(headers, "203.0.113.9", []) == "203.0.113.9"

    def test_real_ip_ignored_from_untrusted_peer(self) -> None:
        headers = _headers(x_real_ip="198.51.100.77")
        assert resolve_peer_ip(headers, "203.0.113.9", ["10.0.0.1"]) == "203.0.113.9"

    def test_trusted_proxy_forwards_client(self) -> None:
        headers = _headers(x_forwarded_for="198.51.100.77, 10.0.0.1")
        assert resolve_peer_ip(headers, "10.0.0.1", ["10.0.0.1"]) == "198.51.100.77"

    def test_trusted_proxy_without_headers(self) -> None:
        assert resolve_peer_ip(_headers(), "10.0.0.1", ["10.0.0.1"]) == "10.0.0.1"

    def test_no_peer(self) -> None:
        headers = _headers(x_forwarded_for="198.51.100.77")
        assert resolve_peer_ip(headers, None, []) is None
