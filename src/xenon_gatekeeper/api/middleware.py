"""HTTP middleware: request logging, identity/tenant context, IP block gate."""

import time
from typing import Any

import jwt
import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from xenon_gatekeeper.auth.context import TenantContext, tenant_context_store
from xenon_gatekeeper.auth.tokens import decode_access_token, extract_bearer_token
from xenon_gatekeeper.config import Settings
from xenon_gatekeeper.security.abuse import SecurityEventMonitor
from xenon_gatekeeper.security.blocklist import IpBlockChecker
from xenon_gatekeeper.security.client_ip import resolve_client_ip, resolve_peer_ip

logger = structlog.get_logger()

IP_BLOCKED_MESSAGE = (
    "Your IP address has been temporarily blocked due to suspicious activity. "
    "Please try again later."
)


def client_ip(request: Request) -> str | None:
    remote = request.client.host if request.client else None
    return resolve_client_ip(request.headers, remote)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log HTTP requests with method, path, status code, and latency."""

    SKIP_PATHS: frozenset[str] = frozenset(
        {"/health", "/docs", "/openapi.json", "/redoc"}
    )

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Process request and log timing information."""
        if request.url.path in self.SKIP_PATHS:
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        latency_ms = int((time.perf_counter() - start) * 1000)

        logger.info(
            "http_request",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            latency_ms=latency_ms,
        )
        return response


class TenantContextMiddleware(BaseHTTPMiddleware):
    """Resolve the caller's identity and hold its tenant context for the request.

    A valid bearer token populates ``request.state.claims`` and
    ``request.state.tenant_context``; anything else leaves the request
    anonymous (routes decide whether that is acceptable). Invalid tokens
    are reported to the security monitor against the transport peer;
    forwarding headers count only when that peer is a trusted proxy.
    The tenant context store is cleared when the response is produced,
    on error paths included.
    """

    def __init__(
        self,
        app: ASGIApp,
        settings: Settings,
        monitor: SecurityEventMonitor | None = None,
    ) -> None:
        super().__init__(app)
        self._settings = settings
        self._monitor = monitor

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        claims: dict[str, Any] = {}
        token = extract_bearer_token(request.headers.get("authorization"))
        if token is not None:
            try:
                claims = decode_access_token(token, self._settings)
            except jwt.InvalidTokenError as e:
                ip = resolve_peer_ip(
                    request.headers,
                    request.client.host if request.client else None,
                    self._settings.trusted_proxies,
                )
                logger.warning(
                    "invalid_bearer_token",
                    ip=ip,
                    path=request.url.path,
                    error=type(e).__name__,
                )
                if self._monitor is not None:
                    self._monitor.record_failure(ip, "invalid_token")

        context = TenantContext.from_claims(claims)
        request.state.claims = claims
        request.state.tenant_context = context

        with (
            tenant_context_store.scope(context),
            structlog.contextvars.bound_contextvars(
                tenant_id=str(context.tenant_id) if context.tenant_id else None,
                user_id=context.user_id,
            ),
        ):
            return await call_next(request)


class IpBlockMiddleware(BaseHTTPMiddleware):
    """Reject requests from blocked client addresses with 403.

    The block list is owned elsewhere; this gate only reads it.
    """

    def __init__(self, app: ASGIApp, blocklist: IpBlockChecker) -> None:
        super().__init__(app)
        self._blocklist = blocklist

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        ip = client_ip(request)
        if ip and self._blocklist.is_blocked(ip):
            logger.warning("ip_blocked", ip=ip, path=request.url.path)
            return JSONResponse(
                status_code=403,
                content={"success": False, "error": IP_BLOCKED_MESSAGE},
            )
        return await call_next(request)
