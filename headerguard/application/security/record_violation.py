"""
Use case: Record browser-submitted CSP violation reports.

Input: RecordViolationCommand (raw body, content type, user agent)
Output: list[ViolationReport]
Side effects: One WARNING log record per violation on headerguard.security.csp.
Failure cases: MalformedViolationReportError (non-JSON, unknown shape,
oversized body). Callers acknowledge the request regardless.

Accepted shapes:
    - Legacy report-uri body: {"csp-report": {"document-uri": ...}}
    - A bare legacy report object: {"document-uri": ...}
    - Reporting API batch: [{"type": "csp-violation", "body": {"documentURL": ...}}]
"""

import json
import logging
from typing import Any, Optional

from headerguard.application.security.dtos import RecordViolationCommand, ViolationReport
from headerguard.domain.security.errors import MalformedViolationReportError
from headerguard.shared.logging import SECURITY_LOGGER

csp_logger = logging.getLogger(f"{SECURITY_LOGGER}.csp")

# ViolationReport field -> (legacy report-uri key, Reporting API key)
_FIELD_KEYS = {
    "document_uri": ("document-uri", "documentURL"),
    "violated_directive": ("violated-directive", "effectiveDirective"),
    "effective_directive": ("effective-directive", "effectiveDirective"),
    "blocked_uri": ("blocked-uri", "blockedURL"),
    "source_file": ("source-file", "sourceFile"),
    "line_number": ("line-number", "lineNumber"),
    "column_number": ("column-number", "columnNumber"),
    "disposition": ("disposition", "disposition"),
    "original_policy": ("original-policy", "originalPolicy"),
}
_INT_FIELDS = frozenset({"line_number", "column_number"})
_LEGACY_KEYS = frozenset(keys[0] for keys in _FIELD_KEYS.values())
_REPORTING_API_TYPE = "csp-violation"


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text or None


class RecordViolationReportUseCase:
    """Parses violation reports and logs them for later inspection."""

    def __init__(self, max_bytes: int = 65_536) -> None:
        self._max_bytes = max_bytes

    def execute(self, command: RecordViolationCommand) -> list[ViolationReport]:
        """Parse and log every violation contained in the request body.

        Args:
            command: The raw report submission.

        Returns:
            The parsed violations, in submission order.

        Raises:
            MalformedViolationReportError: If the body cannot be interpreted.
        """
        if command.truncated or len(command.body) > self._max_bytes:
            raise MalformedViolationReportError(
                f"body exceeds {self._max_bytes} bytes"
            )

        reports = self.parse(command.body, user_agent=command.user_agent)
        for report in reports:
            csp_logger.warning(
                "CSP violation: directive=%s blocked=%s document=%s source=%s:%s:%s",
                report.violated_directive,
                report.blocked_uri,
                report.document_uri,
                report.source_file or "unknown",
                report.line_number if report.line_number is not None else "unknown",
                report.column_number if report.column_number is not None else "unknown",
            )
        return reports

    def parse(
        self, body: bytes, user_agent: Optional[str] = None
    ) -> list[ViolationReport]:
        """Decode a report body into ViolationReport objects."""
        try:
            payload = json.loads(body)
        except (ValueError, RecursionError) as exc:
            raise MalformedViolationReportError(f"invalid JSON: {exc}") from exc

        if isinstance(payload, list):
            reports = [
                self._build(item["body"], reporting_api=True, user_agent=user_agent)
                for item in payload
                if isinstance(item, dict)
                and item.get("type") == _REPORTING_API_TYPE
                and isinstance(item.get("body"), dict)
            ]
            if not reports:
                raise MalformedViolationReportError("no csp-violation entries")
            return reports

        if isinstance(payload, dict):
            report = payload.get("csp-report", payload)
            if not isinstance(report, dict) or not _LEGACY_KEYS & report.keys():
                raise MalformedViolationReportError("missing csp-report fields")
            return [self._build(report, reporting_api=False, user_agent=user_agent)]

        raise MalformedViolationReportError(
            f"unexpected JSON type {type(payload).__name__}"
        )

    def _build(
        self, report: dict[str, Any], reporting_api: bool, user_agent: Optional[str]
    ) -> ViolationReport:
        values: dict[str, Any] = {}
        for attr, keys in _FIELD_KEYS.items():
            raw = report.get(keys[1] if reporting_api else keys[0])
            value = _as_int(raw) if attr in _INT_FIELDS else _as_text(raw)
            if value is not None:
                values[attr] = value
        return ViolationReport(user_agent=user_agent, raw=report, **values)
