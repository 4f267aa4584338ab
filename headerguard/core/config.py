"""
Application configuration.

Loads settings from environment variables and .env file.
All configuration is centralized here — no scattered magic strings.
The security policy itself is derived from these settings once, at
startup, by PolicyStore.from_settings().
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment.

    Attributes:
        project_name: Display name for the API.
        version: Current API version string.
        debug: Enable debug mode. Must be False in production.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        rate_limit_default: Default rate limit for all endpoints.
        csp_enabled: Master switch for the Content-Security-Policy header.
        csp_report_only: Send the policy as Content-Security-Policy-Report-Only.
        csp_directives: Directive name -> source list. None keeps the
            built-in self-only baseline.
        csp_report_uri: Value of the report-uri directive.
        csp_report_to: Value of the report-to directive.
        csp_nonce_enabled: Opt in to threading a per-session nonce into nonce
            directives of pages that render one.
        csp_nonce_directives: Directives that receive the session nonce.
        csp_report_path: Route path of the violation report endpoint.
        csp_report_rate_limit: Rate limit for the violation report endpoint.
        csp_report_max_bytes: Largest report body that is parsed.
        hsts_*: Strict-Transport-Security parameters.
        trust_forwarded_proto: Honor X-Forwarded-Proto when deciding
            whether the transport is secure (only behind a trusted proxy).
        strip_server_identity: Remove X-Powered-By / Server headers.
        session_cookie: Name of the session id cookie.
        session_lifetime_minutes: Session (and nonce) lifetime.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    project_name: str = "HeaderGuard"
    version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    rate_limit_default: str = "60/minute"

    # Content Security Policy
    csp_enabled: bool = True
    csp_report_only: bool = False
    csp_directives: Optional[dict[str, list[str]]] = None
    csp_report_uri: Optional[str] = "/csp-report"
    csp_report_to: Optional[str] = None
    csp_nonce_enabled: bool = False
    csp_nonce_directives: list[str] = Field(
        default_factory=lambda: ["script-src", "style-src"]
    )

    # Violation report endpoint
    csp_report_path: str = "/csp-report"
    csp_report_rate_limit: str = "60/minute"
    csp_report_max_bytes: int = 65_536  # 64 KiB

    # Auxiliary headers (empty string disables a header)
    x_frame_options: Optional[str] = "SAMEORIGIN"
    x_content_type_options: Optional[str] = "nosniff"
    x_xss_protection: Optional[str] = "1; mode=block"
    referrer_policy: Optional[str] = "strict-origin-when-cross-origin"
    permissions_policy: Optional[str] = "camera=(), microphone=(), geolocation=()"

    # Strict-Transport-Security
    hsts_enabled: bool = False
    hsts_max_age: int = Field(default=31_536_000, ge=0)  # 1 year
    hsts_include_subdomains: bool = True
    hsts_preload: bool = False

    trust_forwarded_proto: bool = False
    strip_server_identity: bool = True

    # Sessions
    session_cookie: str = "headerguard_session"
    session_lifetime_minutes: int = Field(default=120, gt=0)


settings = Settings()
