"""
PolicyStore: holder of the process-wide security policy.

The policy is resolved once from Settings at startup and handed to the
middleware by reference. Reads need no locking because PolicyConfig is
frozen and replaced wholesale. override()/reset() are meant for tests
and must not race live traffic.
"""

import logging
from contextlib import contextmanager
from dataclasses import fields, replace
from typing import Iterator, Optional

from headerguard.core.config import Settings
from headerguard.domain.security.entities import (
    DEFAULT_DIRECTIVES,
    AuxHeaders,
    HstsConfig,
    PolicyConfig,
)
from headerguard.domain.security.errors import InvalidPolicyError

logger = logging.getLogger(__name__)

_POLICY_FIELDS = frozenset(f.name for f in fields(PolicyConfig))


class PolicyStore:
    """Holds the effective PolicyConfig for the lifetime of the process."""

    def __init__(self, config: Optional[PolicyConfig] = None) -> None:
        if config is None:
            logger.info("No security policy configured; using built-in defaults")
            config = PolicyConfig()
        self._initial = config
        self._current = config

    @classmethod
    def from_settings(cls, settings: Settings) -> "PolicyStore":
        """Build a store from application settings.

        Raises:
            InvalidPolicyError: If a directive or HSTS value is malformed.
        """
        directives = settings.csp_directives
        if directives is None:
            directives = dict(DEFAULT_DIRECTIVES)

        config = PolicyConfig(
            enabled=settings.csp_enabled,
            report_only=settings.csp_report_only,
            directives=directives,
            report_uri=settings.csp_report_uri,
            report_to=settings.csp_report_to,
            aux_headers=AuxHeaders(
                x_frame_options=settings.x_frame_options,
                x_content_type_options=settings.x_content_type_options,
                x_xss_protection=settings.x_xss_protection,
                referrer_policy=settings.referrer_policy,
                permissions_policy=settings.permissions_policy,
            ),
            hsts=HstsConfig(
                enabled=settings.hsts_enabled,
                max_age_seconds=settings.hsts_max_age,
                include_subdomains=settings.hsts_include_subdomains,
                preload=settings.hsts_preload,
            ),
            nonce_directives=tuple(settings.csp_nonce_directives),
        )
        logger.info(
            "Security policy loaded: csp_enabled=%s report_only=%s directives=%d hsts=%s",
            config.enabled,
            config.report_only,
            len(config.directives),
            config.hsts.enabled,
        )
        return cls(config)

    def get(self) -> PolicyConfig:
        """Return the current effective configuration."""
        return self._current

    def override(self, **changes: object) -> PolicyConfig:
        """Replace named fields of the current configuration.

        Fields are replaced wholesale; a new directives map replaces the
        old one entirely.

        Raises:
            InvalidPolicyError: On an unknown field or an invalid value.
        """
        unknown = set(changes) - _POLICY_FIELDS
        if unknown:
            raise InvalidPolicyError(", ".join(sorted(unknown)), "unknown policy field")
        self._current = replace(self._current, **changes)
        logger.debug("Security policy overridden: %s", ", ".join(sorted(changes)))
        return self._current

    def reset(self) -> None:
        """Restore the configuration the store was created with."""
        self._current = self._initial

    @contextmanager
    def overridden(self, **changes: object) -> Iterator[PolicyConfig]:
        """Apply override() for the duration of a with-block."""
        previous = self._current
        try:
            yield self.override(**changes)
        finally:
            self._current = previous
