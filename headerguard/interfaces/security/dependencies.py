"""
Dependency injection for the security bounded context.

Provides FastAPI dependency functions that hand the singletons built
by create_app() (stored on app.state) to route handlers.
"""

from fastapi import Request

from headerguard.application.security.record_violation import (
    RecordViolationReportUseCase,
)
from headerguard.core.config import Settings
from headerguard.domain.security.nonce import NonceProvider
from headerguard.infrastructure.security.policy_store import PolicyStore


def get_settings(request: Request) -> Settings:
    """Return the settings the application was built with."""
    return request.app.state.settings


def get_policy_store(request: Request) -> PolicyStore:
    """Return the application's PolicyStore."""
    return request.app.state.policy_store


def get_nonce_provider(request: Request) -> NonceProvider:
    """Return the application's NonceProvider."""
    return request.app.state.nonce_provider


def get_record_violation_use_case(request: Request) -> RecordViolationReportUseCase:
    """Build RecordViolationReportUseCase with the configured body limit."""
    return RecordViolationReportUseCase(
        max_bytes=request.app.state.settings.csp_report_max_bytes,
    )
