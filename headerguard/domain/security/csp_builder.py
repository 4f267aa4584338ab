"""
Header value rendering for the security policy.

Pure functions: PolicyConfig in, header string out. No IO, no randomness.
A nonce must be threaded into the config with with_nonce() before
build_csp_header() is called; the builder never generates one itself.
"""

from dataclasses import replace

from headerguard.domain.security.entities import (
    CSP_HEADER,
    CSP_REPORT_ONLY_HEADER,
    HstsConfig,
    PolicyConfig,
    UNSAFE_INLINE,
)

DIRECTIVE_SEPARATOR = "; "


def build_csp_header(config: PolicyConfig) -> str:
    """Render the Content-Security-Policy value for a config.

    Directives are emitted in insertion order; directives with no sources
    are skipped. report-uri and report-to are appended last, in that order.

    Args:
        config: The policy to render.

    Returns:
        The header value, or an empty string when CSP is disabled or
        nothing would be emitted. An empty string must never be sent.
    """
    if not config.enabled:
        return ""

    segments = [
        f"{name} {' '.join(sources)}"
        for name, sources in config.directives.items()
        if sources
    ]
    if config.report_uri:
        segments.append(f"report-uri {config.report_uri}")
    if config.report_to:
        segments.append(f"report-to {config.report_to}")

    return DIRECTIVE_SEPARATOR.join(segments)


def csp_header_name(config: PolicyConfig) -> str:
    """Return the header name that carries the policy for this config."""
    return CSP_REPORT_ONLY_HEADER if config.report_only else CSP_HEADER


def nonce_source(nonce: str) -> str:
    """Format a nonce as a CSP source token."""
    return f"'nonce-{nonce}'"


def with_nonce(config: PolicyConfig, nonce: str) -> PolicyConfig:
    """Return a copy of config with the nonce added to its nonce directives.

    Only directives that already exist with at least one source receive
    the nonce. Directives that contain 'unsafe-inline' stay unchanged, so
    they keep allowing inline content. The directive order is preserved.
    """
    if not nonce or not config.nonce_directives:
        return config

    token = nonce_source(nonce)
    directives = dict(config.directives)
    for name in config.nonce_directives:
        sources = directives.get(name)
        if sources and token not in sources and UNSAFE_INLINE not in sources:
            directives[name] = sources + (token,)
    return replace(config, directives=directives)


def build_hsts_header(hsts: HstsConfig) -> str:
    """Render max-age=N[; includeSubDomains][; preload]."""
    value = f"max-age={hsts.max_age_seconds}"
    if hsts.include_subdomains:
        value += "; includeSubDomains"
    if hsts.preload:
        value += "; preload"
    return value
