"""
Pydantic schemas for security API responses.

These schemas define the API contract of the diagnostic endpoints.
Violation reports are deliberately not validated here: the report
endpoint accepts any body and never answers with 422.
No business logic belongs here.
"""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str


class ErrorResponse(BaseModel):
    """Standard error response returned by all error handlers."""

    error: str
    detail: str | None = None


class HstsSummary(BaseModel):
    """HSTS part of the policy summary."""

    enabled: bool
    header: str


class PolicySummaryResponse(BaseModel):
    """Response schema for the policy diagnostics endpoint.

    Attributes:
        enabled: Whether a CSP header is emitted at all.
        report_only: Whether the policy is sent in report-only mode.
        header_name: Name of the header carrying the policy.
        header_value: Rendered policy, without a session nonce.
        directives: Directive name -> sources, in rendering order.
        report_uri: Configured report-uri, if any.
        report_to: Configured report-to, if any.
        aux_headers: Auxiliary header name -> value.
        hsts: HSTS enable flag and rendered value.
    """

    enabled: bool
    report_only: bool
    header_name: str
    header_value: str
    directives: dict[str, list[str]]
    report_uri: str | None = None
    report_to: str | None = None
    aux_headers: dict[str, str]
    hsts: HstsSummary
