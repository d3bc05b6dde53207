"""Client IP resolution behind reverse proxies."""

from __future__ import annotations

from collections.abc import Collection, Mapping

FORWARDED_FOR_HEADER = "x-forwarded-for"
REAL_IP_HEADER = "x-real-ip"


def resolve_client_ip(headers: Mapping[str, str], remote_host: str | None) -> str | None:
    """Derive the client address for a request.

    Precedence: first entry of ``X-Forwarded-For``, then ``X-Real-IP``,
    then the transport peer address. Returns None when nothing usable
    is available.
    """
    forwarded_for = headers.get(FORWARDED_FOR_HEADER)
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    real_ip = headers.get(REAL_IP_HEADER)
    if real_ip and real_ip.strip():
        return real_ip.strip()

    if remote_host and remote_host.strip():
        return remote_host.strip()
    return None


def resolve_peer_ip(
    headers: Mapping[str, str],
    remote_host: str | None,
    trusted_proxies: Collection[str],
) -> str | None:
    """Client address that failures are counted against.

    Forwarding headers are honoured only when the transport peer is one
    of *trusted_proxies*; otherwise the peer address itself is returned.
    """
    peer = remote_host.strip() if remote_host and remote_host.strip() else None
    if peer is not None and peer in trusted_proxies:
        return resolve_client_ip(headers, peer)
    return peer
