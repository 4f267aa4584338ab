"""
Centralized error handlers for FastAPI.

Maps security domain errors to HTTP responses.
No stack traces or internal details are exposed to clients.
All error responses use the ErrorResponse schema.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from headerguard.domain.security.errors import (
    InvalidPolicyError,
    SecureRandomUnavailableError,
    SecurityDomainError,
)

logger = logging.getLogger(__name__)

HTTP_500 = 500
HTTP_503 = 503


def error_response(status_code: int, error: str, detail: str | None = None) -> JSONResponse:
    """Build a consistent JSON error response."""
    body: dict[str, str | None] = {"error": error}
    if detail:
        body["detail"] = detail
    return JSONResponse(status_code=status_code, content=body)


def register_error_handlers(app: FastAPI) -> None:
    """Register all domain error handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(SecureRandomUnavailableError)
    async def handle_secure_random_unavailable(
        _request: Request, exc: SecureRandomUnavailableError
    ) -> JSONResponse:
        """Handle nonce issuance failures. Never downgraded to weak randomness."""
        logger.error("Secure random source unavailable: %s", exc.reason)
        return error_response(HTTP_503, "Service temporarily unavailable")

    @app.exception_handler(InvalidPolicyError)
    async def handle_invalid_policy(
        _request: Request, exc: InvalidPolicyError
    ) -> JSONResponse:
        """Handle security policy configuration errors."""
        logger.error("Invalid security policy: %s", exc.message)
        return error_response(HTTP_500, "Internal server error")

    @app.exception_handler(SecurityDomainError)
    async def handle_security_domain(
        _request: Request, exc: SecurityDomainError
    ) -> JSONResponse:
        """Catch-all for unhandled security domain errors."""
        logger.error("Unhandled security domain error: %s", exc.message)
        return error_response(HTTP_500, "Internal server error")

    @app.exception_handler(Exception)
    async def handle_unexpected(
        _request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all for unexpected errors. Never exposes internals."""
        logger.exception("Unexpected error: %s", type(exc).__name__)
        return error_response(HTTP_500, "Internal server error")
