"""
Session cookie middleware.

Gives every client a stable, opaque session id so session-scoped state
(the CSP nonce) can be keyed by it. The id is exposed as
request.state.session_id and round-tripped in an HttpOnly cookie.
Exempt paths (the violation report endpoint) get neither an id nor a
cookie: browsers post reports without the page's cookies.
"""

import re
import secrets
from typing import Iterable

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from headerguard.shared.security.headers import is_secure_transport

SESSION_ID_BYTES = 32
_SESSION_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{32,128}$")


def new_session_id() -> str:
    """Return a fresh random session id."""
    return secrets.token_urlsafe(SESSION_ID_BYTES)


class SessionCookieMiddleware(BaseHTTPMiddleware):
    """Assigns a session id to each request and persists it in a cookie."""

    def __init__(
        self,
        app: ASGIApp,
        cookie_name: str = "headerguard_session",
        max_age_seconds: int = 7200,
        trust_forwarded_proto: bool = False,
        exempt_paths: Iterable[str] = (),
    ) -> None:
        super().__init__(app)
        self._cookie_name = cookie_name
        self._max_age = max_age_seconds
        self._trust_forwarded_proto = trust_forwarded_proto
        self._exempt_paths = frozenset(exempt_paths)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self._exempt_paths:
            return await call_next(request)

        session_id = request.cookies.get(self._cookie_name, "")
        if not _SESSION_ID_PATTERN.match(session_id):
            session_id = new_session_id()
        request.state.session_id = session_id

        response = await call_next(request)
        response.set_cookie(
            self._cookie_name,
            session_id,
            max_age=self._max_age,
            httponly=True,
            samesite="lax",
            secure=is_secure_transport(request, self._trust_forwarded_proto),
        )
        return response
