"""
Data Transfer Objects for the security application layer.

DTOs carry data between the interface and application layers.
They are plain dataclasses with no behavior.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class RecordViolationCommand:
    """Input DTO for a submitted CSP violation report.

    Attributes:
        body: Raw request body as received (possibly truncated).
        content_type: Request Content-Type header, if any.
        user_agent: Submitting browser's User-Agent header, if any.
        truncated: True when the body exceeded the accepted size.
    """

    body: bytes
    content_type: Optional[str] = None
    user_agent: Optional[str] = None
    truncated: bool = False


@dataclass(frozen=True)
class ViolationReport:
    """A single parsed CSP violation.

    Attributes:
        document_uri: Page on which the violation occurred.
        violated_directive: Directive that was violated.
        effective_directive: Directive actually enforced.
        blocked_uri: Resource that was blocked.
        source_file: Script or stylesheet that triggered the violation.
        line_number: Line in source_file, when reported.
        column_number: Column in source_file, when reported.
        disposition: "enforce" or "report".
        original_policy: The policy the browser evaluated.
        user_agent: Submitting browser's User-Agent header.
        raw: The report object as decoded from JSON.
    """

    document_uri: str = "unknown"
    violated_directive: str = "unknown"
    effective_directive: Optional[str] = None
    blocked_uri: str = "unknown"
    source_file: Optional[str] = None
    line_number: Optional[int] = None
    column_number: Optional[int] = None
    disposition: Optional[str] = None
    original_policy: Optional[str] = None
    user_agent: Optional[str] = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False)
