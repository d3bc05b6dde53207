"""Client IP blocking and abuse detection."""

from xenon_gatekeeper.security.abuse import SecurityEventMonitor
from xenon_gatekeeper.security.blocklist import (
    BlockedIpEntry,
    InMemoryIpBlocklist,
    IpBlockChecker,
)
from xenon_gatekeeper.security.client_ip import resolve_client_ip

__all__ = [
    "BlockedIpEntry",
    "InMemoryIpBlocklist",
    "IpBlockChecker",
    "SecurityEventMonitor",
    "resolve_client_ip",
]
