"""
Application entry point.

Creates the FastAPI application and wires together:
- Routers (pages, health, security)
- Error handlers (centralized domain-to-HTTP mapping)
- Security middleware (session cookie, security headers, rate limiting)
- Logging configuration

No business logic belongs here.
"""

import logging
import os
from typing import Optional

import uvicorn
from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded

from headerguard.core.config import Settings
from headerguard.core.config import settings as default_settings
from headerguard.domain.security.nonce import NonceProvider
from headerguard.infrastructure.security.policy_store import PolicyStore
from headerguard.infrastructure.security.session_store import InMemorySessionStore
from headerguard.interfaces.health import router as health_router
from headerguard.interfaces.pages import router as pages_router
from headerguard.interfaces.security.router import report_router
from headerguard.interfaces.security.router import router as security_router
from headerguard.shared.errors.handlers import register_error_handlers
from headerguard.shared.logging import configure_logging
from headerguard.shared.security.headers import SecurityHeadersMiddleware
from headerguard.shared.security.rate_limiting import (
    limiter,
    rate_limit_exceeded_handler,
)
from headerguard.shared.security.session import SessionCookieMiddleware

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    policy_store: Optional[PolicyStore] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Registers routers, error handlers, and security middleware.
    This is the composition root of the application.

    Args:
        settings: Settings to build from. Defaults to the environment.
        policy_store: Pre-built policy store. Defaults to one derived
            from settings.

    Returns:
        A fully configured FastAPI application instance.
    """
    settings = settings or default_settings
    configure_logging(level=settings.log_level)

    policy_store = policy_store or PolicyStore.from_settings(settings)
    session_store = InMemorySessionStore(
        ttl_seconds=settings.session_lifetime_minutes * 60,
    )
    nonce_provider = NonceProvider(session_store)

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    app.state.settings = settings
    app.state.policy_store = policy_store
    app.state.session_store = session_store
    app.state.nonce_provider = nonce_provider

    # --- Rate Limiting ---
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    # --- Security Middleware (last added runs first) ---
    app.add_middleware(
        SecurityHeadersMiddleware,
        policy_store=policy_store,
        nonce_provider=nonce_provider if settings.csp_nonce_enabled else None,
        trust_forwarded_proto=settings.trust_forwarded_proto,
        strip_server_identity=settings.strip_server_identity,
    )
    app.add_middleware(
        SessionCookieMiddleware,
        cookie_name=settings.session_cookie,
        max_age_seconds=settings.session_lifetime_minutes * 60,
        trust_forwarded_proto=settings.trust_forwarded_proto,
        exempt_paths=[settings.csp_report_path],
    )

    # --- Error Handlers ---
    register_error_handlers(app)

    # --- Routers ---
    app.include_router(pages_router)
    app.include_router(report_router)
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(security_router, prefix="/api/v1")

    logger.info("%s %s ready", settings.project_name, settings.version)
    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "headerguard.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        log_level=default_settings.log_level.lower(),
        server_header=not default_settings.strip_server_identity,
        proxy_headers=default_settings.trust_forwarded_proto,
    )
