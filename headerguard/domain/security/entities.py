"""
Domain entities for the security bounded context.

PolicyConfig is the typed, validated description of every header the
middleware may emit. It is built once at load time and never mutated;
overrides produce a new instance.
They contain no framework imports and no IO operations.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, fields
from typing import Optional

from headerguard.domain.security.errors import InvalidPolicyError

SELF = "'self'"
NONE = "'none'"
WILDCARD = "*"
UNSAFE_INLINE = "'unsafe-inline'"

CSP_HEADER = "Content-Security-Policy"
CSP_REPORT_ONLY_HEADER = "Content-Security-Policy-Report-Only"
HSTS_HEADER = "Strict-Transport-Security"

DEFAULT_DIRECTIVES: dict[str, tuple[str, ...]] = {
    "default-src": (SELF,),
    "script-src": (SELF,),
    "style-src": (SELF,),
    "img-src": (SELF, "data:"),
    "font-src": (SELF,),
    "connect-src": (SELF,),
    "media-src": (SELF,),
    "object-src": (NONE,),
    "frame-src": (SELF,),
    "child-src": (SELF,),
    "form-action": (SELF,),
    "frame-ancestors": (SELF,),
    "base-uri": (SELF,),
    "manifest-src": (SELF,),
    "worker-src": (SELF, "blob:"),
}

DEFAULT_NONCE_DIRECTIVES: tuple[str, ...] = ("script-src", "style-src")


def _optional_str(value: Optional[str]) -> Optional[str]:
    """Normalize blank strings to None."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _normalize_directives(
    directives: Mapping[str, object],
) -> dict[str, tuple[str, ...]]:
    """Validate a directive map and freeze every source list into a tuple."""
    if not isinstance(directives, Mapping):
        raise InvalidPolicyError("directives", "must be a mapping")

    normalized: dict[str, tuple[str, ...]] = {}
    for name, sources in directives.items():
        if not isinstance(name, str) or not name.strip():
            raise InvalidPolicyError("directives", "directive names must be non-empty strings")
        # A bare string is a sequence too, but never a list of tokens.
        if isinstance(sources, (str, bytes)) or not isinstance(sources, (list, tuple)):
            raise InvalidPolicyError(
                f"directives.{name}",
                f"expected a list of source tokens, got {type(sources).__name__}",
            )
        tokens = []
        for token in sources:
            if not isinstance(token, str) or not token.strip():
                raise InvalidPolicyError(
                    f"directives.{name}", "source tokens must be non-empty strings"
                )
            tokens.append(token.strip())
        normalized[name.strip()] = tuple(tokens)
    return normalized


@dataclass(frozen=True)
class AuxHeaders:
    """Auxiliary security header values. None disables a header."""

    x_frame_options: Optional[str] = "SAMEORIGIN"
    x_content_type_options: Optional[str] = "nosniff"
    x_xss_protection: Optional[str] = "1; mode=block"
    referrer_policy: Optional[str] = "strict-origin-when-cross-origin"
    permissions_policy: Optional[str] = "camera=(), microphone=(), geolocation=()"

    HEADER_NAMES = {
        "x_frame_options": "X-Frame-Options",
        "x_content_type_options": "X-Content-Type-Options",
        "x_xss_protection": "X-XSS-Protection",
        "referrer_policy": "Referrer-Policy",
        "permissions_policy": "Permissions-Policy",
    }

    def __post_init__(self) -> None:
        for f in fields(self):
            object.__setattr__(self, f.name, _optional_str(getattr(self, f.name)))

    def items(self) -> Iterator[tuple[str, str]]:
        """Yield (header name, value) for every configured header."""
        for attr, header_name in self.HEADER_NAMES.items():
            value = getattr(self, attr)
            if value is not None:
                yield header_name, value


@dataclass(frozen=True)
class HstsConfig:
    """Strict-Transport-Security parameters."""

    enabled: bool = False
    max_age_seconds: int = 31_536_000
    include_subdomains: bool = True
    preload: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.max_age_seconds, bool) or not isinstance(self.max_age_seconds, int):
            raise InvalidPolicyError("hsts.max_age_seconds", "must be an integer")
        if self.max_age_seconds < 0:
            raise InvalidPolicyError("hsts.max_age_seconds", "must be >= 0")


@dataclass(frozen=True)
class PolicyConfig:
    """The resolved security header policy.

    Attributes:
        enabled: Master CSP switch. False means no CSP header of either kind.
        report_only: Emit the policy as Content-Security-Policy-Report-Only
            instead of Content-Security-Policy. Never both.
        directives: Directive name -> source tokens, rendered in insertion order.
        report_uri: Appended as a synthetic report-uri directive when set.
        report_to: Appended as a synthetic report-to directive when set.
        aux_headers: Frame, content-type, XSS, referrer and permissions headers.
        hsts: Strict-Transport-Security parameters.
        nonce_directives: Directives that receive the session nonce.
    """

    enabled: bool = True
    report_only: bool = False
    directives: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: dict(DEFAULT_DIRECTIVES)
    )
    report_uri: Optional[str] = "/csp-report"
    report_to: Optional[str] = None
    aux_headers: AuxHeaders = field(default_factory=AuxHeaders)
    hsts: HstsConfig = field(default_factory=HstsConfig)
    nonce_directives: tuple[str, ...] = DEFAULT_NONCE_DIRECTIVES

    def __post_init__(self) -> None:
        object.__setattr__(self, "directives", _normalize_directives(self.directives))
        object.__setattr__(self, "report_uri", _optional_str(self.report_uri))
        object.__setattr__(self, "report_to", _optional_str(self.report_to))
        if isinstance(self.nonce_directives, str):
            raise InvalidPolicyError("nonce_directives", "expected a list of directive names")
        object.__setattr__(self, "nonce_directives", tuple(self.nonce_directives))
        if not isinstance(self.aux_headers, AuxHeaders):
            raise InvalidPolicyError("aux_headers", "expected AuxHeaders")
        if not isinstance(self.hsts, HstsConfig):
            raise InvalidPolicyError("hsts", "expected HstsConfig")

    def sources(self, directive: str) -> tuple[str, ...]:
        """Return the configured sources for a directive (empty if unknown)."""
        return self.directives.get(directive, ())

    def allows(self, directive: str, source: str) -> bool:
        """Check whether a source is listed for a directive, or wildcarded."""
        allowed = self.sources(directive)
        return source in allowed or WILDCARD in allowed
