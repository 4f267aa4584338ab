"""
FastAPI router for the security bounded context.

Provides:
- The CSP violation report endpoint (always 204, rate limited)
- A policy diagnostics endpoint (debug mode only)

All routes delegate to use cases or pure builders. No business logic here.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from starlette.requests import ClientDisconnect

from headerguard.application.security.dtos import RecordViolationCommand
from headerguard.application.security.record_violation import (
    RecordViolationReportUseCase,
)
from headerguard.core.config import Settings, settings
from headerguard.domain.security.csp_builder import (
    build_csp_header,
    build_hsts_header,
    csp_header_name,
)
from headerguard.domain.security.errors import MalformedViolationReportError
from headerguard.infrastructure.security.policy_store import PolicyStore
from headerguard.interfaces.security.dependencies import (
    get_policy_store,
    get_record_violation_use_case,
    get_settings,
)
from headerguard.interfaces.security.schemas import (
    ErrorResponse,
    HstsSummary,
    PolicySummaryResponse,
)
from headerguard.shared.security.rate_limiting import REPORT_RATE_LIMIT, limiter

logger = logging.getLogger(__name__)

report_router = APIRouter(tags=["security"])
router = APIRouter(prefix="/security", tags=["security"])


async def _read_capped_body(request: Request, max_bytes: int) -> tuple[bytes, bool]:
    """Read at most max_bytes (+1) of the body. Returns (body, truncated)."""
    chunks: list[bytes] = []
    size = 0
    async for chunk in request.stream():
        chunks.append(chunk)
        size += len(chunk)
        if size > max_bytes:
            return b"".join(chunks)[: max_bytes + 1], True
    return b"".join(chunks), False


@report_router.post(
    settings.csp_report_path,
    status_code=204,
    response_class=Response,
    summary="Receive a CSP violation report",
    description=(
        "Accepts browser CSP violation reports (report-uri or Reporting API "
        "format). Always answers 204 No Content, even for malformed bodies."
    ),
)
@limiter.limit(REPORT_RATE_LIMIT)
async def receive_csp_report(
    request: Request,
    use_case: RecordViolationReportUseCase = Depends(get_record_violation_use_case),
    app_settings: Settings = Depends(get_settings),
) -> Response:
    """Log a CSP violation report and acknowledge it."""
    try:
        body, truncated = await _read_capped_body(
            request, app_settings.csp_report_max_bytes
        )
    except ClientDisconnect:
        logger.info("Client disconnected while sending a CSP report")
        return Response(status_code=204)

    command = RecordViolationCommand(
        body=body,
        content_type=request.headers.get("content-type"),
        user_agent=request.headers.get("user-agent"),
        truncated=truncated,
    )
    try:
        use_case.execute(command)
    except MalformedViolationReportError as exc:
        logger.info("Ignoring malformed CSP report: %s", exc.reason)

    return Response(status_code=204)


@router.get(
    "/policy",
    response_model=PolicySummaryResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Show the active security policy",
    description="Debug-only view of the resolved CSP, auxiliary and HSTS headers.",
)
def get_policy_summary(
    policy_store: PolicyStore = Depends(get_policy_store),
    app_settings: Settings = Depends(get_settings),
) -> PolicySummaryResponse:
    """Return the active policy and its rendered headers."""
    if not app_settings.debug:
        raise HTTPException(status_code=404, detail="Not Found")

    config = policy_store.get()
    return PolicySummaryResponse(
        enabled=config.enabled,
        report_only=config.report_only,
        header_name=csp_header_name(config),
        header_value=build_csp_header(config),
        directives={name: list(sources) for name, sources in config.directives.items()},
        report_uri=config.report_uri,
        report_to=config.report_to,
        aux_headers=dict(config.aux_headers.items()),
        hsts=HstsSummary(
            enabled=config.hsts.enabled,
            header=build_hsts_header(config.hsts),
        ),
    )
