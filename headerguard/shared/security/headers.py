"""
Secure HTTP headers middleware.

Adds security-related headers to every response, driven by PolicyStore:
- Content-Security-Policy or Content-Security-Policy-Report-Only (never both)
- X-Frame-Options
- X-Content-Type-Options
- X-XSS-Protection
- Referrer-Policy
- Permissions-Policy
- Strict-Transport-Security (secure transport only)

No business logic. Pure cross-cutting concern. A broken policy never
fails the request: the response is returned without security headers
and a warning is logged. Unhandled application errors become a JSON 500
that carries the same headers as any other response.
"""

import logging
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from headerguard.domain.security.csp_builder import (
    build_csp_header,
    build_hsts_header,
    csp_header_name,
    with_nonce,
)
from headerguard.domain.security.entities import (
    CSP_HEADER,
    CSP_REPORT_ONLY_HEADER,
    HSTS_HEADER,
)
from headerguard.domain.security.nonce import NonceProvider
from headerguard.infrastructure.security.policy_store import PolicyStore
from headerguard.shared.errors.handlers import HTTP_500, error_response
from headerguard.shared.logging import SECURITY_LOGGER

logger = logging.getLogger(__name__)
security_logger = logging.getLogger(SECURITY_LOGGER)

SERVER_IDENTITY_HEADERS = ("X-Powered-By", "Server")


def is_secure_transport(request: Request, trust_forwarded_proto: bool = False) -> bool:
    """Return True when the request arrived over TLS.

    X-Forwarded-Proto is only consulted when trust_forwarded_proto is set,
    and only its first (client-most) value counts.
    """
    if request.url.scheme == "https":
        return True
    if trust_forwarded_proto:
        forwarded = request.headers.get("x-forwarded-proto", "")
        return forwarded.split(",")[0].strip().lower() == "https"
    return False


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware that adds policy-driven security headers to every response.

    Args:
        app: The wrapped ASGI application.
        policy_store: Source of the active PolicyConfig.
        nonce_provider: Reads the session nonce; None disables nonces.
        trust_forwarded_proto: Treat X-Forwarded-Proto: https as secure.
        strip_server_identity: Remove X-Powered-By and Server headers.
    """

    def __init__(
        self,
        app: ASGIApp,
        policy_store: PolicyStore,
        nonce_provider: Optional[NonceProvider] = None,
        trust_forwarded_proto: bool = False,
        strip_server_identity: bool = True,
    ) -> None:
        super().__init__(app)
        self._policy_store = policy_store
        self._nonce_provider = nonce_provider
        self._trust_forwarded_proto = trust_forwarded_proto
        self._strip_server_identity = strip_server_identity

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Process request and add security headers to response."""
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.exception(
                "Unexpected error on %s %s: %s",
                request.method,
                request.url.path,
                type(exc).__name__,
            )
            response = error_response(HTTP_500, "Internal server error")

        try:
            headers = self._resolve_headers(request, self._session_nonce(request))
        except Exception:
            security_logger.warning(
                "Security headers skipped for %s %s: policy resolution failed",
                request.method,
                request.url.path,
                exc_info=True,
            )
            return response

        # Exactly one CSP header may survive, whatever inner layers set.
        for name in (CSP_HEADER, CSP_REPORT_ONLY_HEADER):
            if name in response.headers and name not in headers:
                del response.headers[name]
        for header_name, header_value in headers.items():
            response.headers[header_name] = header_value

        if self._strip_server_identity:
            for name in SERVER_IDENTITY_HEADERS:
                if name in response.headers:
                    del response.headers[name]

        return response

    def _session_nonce(self, request: Request) -> Optional[str]:
        """Return the nonce already issued to this session, if any.

        Nonces are minted by whatever renders them (pages, templates);
        this only reads, so requests that never render inline content
        leave no state behind.
        """
        session_id = getattr(request.state, "session_id", None)
        if self._nonce_provider is None or not session_id:
            return None
        return self._nonce_provider.peek(session_id)

    def _resolve_headers(
        self, request: Request, nonce: Optional[str]
    ) -> dict[str, str]:
        """Compute every header this response should carry."""
        config = self._policy_store.get()
        headers: dict[str, str] = {}

        if config.enabled:
            if nonce:
                config = with_nonce(config, nonce)
            policy = build_csp_header(config)
            if policy:
                headers[csp_header_name(config)] = policy

        headers.update(config.aux_headers.items())

        if config.hsts.enabled:
            if is_secure_transport(request, self._trust_forwarded_proto):
                headers[HSTS_HEADER] = build_hsts_header(config.hsts)
            else:
                security_logger.debug(
                    "HSTS suppressed on insecure transport for %s", request.url.path
                )

        return headers
