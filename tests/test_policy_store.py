"""
Tests for PolicyStore and settings-driven policy loading.
"""

import pytest
from pydantic import ValidationError

from headerguard.domain.security.csp_builder import build_csp_header
from headerguard.domain.security.entities import DEFAULT_DIRECTIVES, PolicyConfig
from headerguard.domain.security.errors import InvalidPolicyError
from headerguard.infrastructure.security.policy_store import PolicyStore
from tests.conftest import make_settings


class TestPolicyStoreDefaults:
    """Tests for the built-in fallback policy."""

    def test_missing_configuration_uses_defaults(self) -> None:
        config = PolicyStore().get()
        assert config.enabled is True
        assert config.report_only is False
        assert config.sources("default-src") == ("'self'",)

    def test_from_default_settings(self) -> None:
        config = PolicyStore.from_settings(make_settings()).get()
        assert dict(config.directives) == DEFAULT_DIRECTIVES
        assert config.report_uri == "/csp-report"
        assert config.aux_headers.x_frame_options == "SAMEORIGIN"
        assert config.hsts.enabled is False
        assert config.hsts.max_age_seconds == 31_536_000


class TestPolicyStoreFromSettings:
    """Tests for mapping Settings onto PolicyConfig."""

    def test_custom_directives_keep_order(self) -> None:
        settings = make_settings(
            csp_directives={
                "script-src": ["'self'", "https://cdn.example.com"],
                "default-src": ["'self'"],
            },
            csp_report_uri="",
        )
        config = PolicyStore.from_settings(settings).get()
        assert build_csp_header(config) == (
            "script-src 'self' https://cdn.example.com; default-src 'self'"
        )

    def test_flags_and_report_targets(self) -> None:
        settings = make_settings(
            csp_enabled=False,
            csp_report_only=True,
            csp_report_to="csp-endpoint",
        )
        config = PolicyStore.from_settings(settings).get()
        assert config.enabled is False
        assert config.report_only is True
        assert config.report_to == "csp-endpoint"

    def test_hsts_settings(self) -> None:
        settings = make_settings(
            hsts_enabled=True,
            hsts_max_age=600,
            hsts_include_subdomains=False,
            hsts_preload=True,
        )
        hsts = PolicyStore.from_settings(settings).get().hsts
        assert (hsts.enabled, hsts.max_age_seconds) == (True, 600)
        assert (hsts.include_subdomains, hsts.preload) == (False, True)

    def test_blank_aux_header_disabled(self) -> None:
        config = PolicyStore.from_settings(make_settings(x_xss_protection="")).get()
        assert "X-XSS-Protection" not in dict(config.aux_headers.items())

    def test_string_directive_rejected_at_load(self) -> None:
        with pytest.raises(ValidationError):
            make_settings(csp_directives={"script-src": "'self'"})

    def test_directives_from_environment_json(self, monkeypatch) -> None:
        monkeypatch.setenv("CSP_DIRECTIVES", '{"default-src": ["\'none\'"]}')
        config = PolicyStore.from_settings(make_settings()).get()
        assert list(config.directives) == ["default-src"]
        assert config.sources("default-src") == ("'none'",)

    def test_negative_hsts_max_age_rejected(self) -> None:
        with pytest.raises(ValidationError):
            make_settings(hsts_max_age=-5)


class TestPolicyStoreOverride:
    """Tests for runtime overrides used by tests."""

    def test_override_replaces_fields(self) -> None:
        store = PolicyStore()
        store.override(report_only=True)
        assert store.get().report_only is True

    def test_override_replaces_directive_map_wholesale(self) -> None:
        store = PolicyStore()
        store.override(directives={"script-src": ["'self'"]})
        assert list(store.get().directives) == ["script-src"]

    def test_override_validates(self) -> None:
        store = PolicyStore()
        with pytest.raises(InvalidPolicyError):
            store.override(directives={"script-src": "'self'"})
        assert store.get() == PolicyConfig()

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(InvalidPolicyError, match="unknown policy field"):
            PolicyStore().override(report_only_mode=True)

    def test_reset_restores_initial_config(self) -> None:
        initial = PolicyConfig(report_to="csp")
        store = PolicyStore(initial)
        store.override(enabled=False)
        store.reset()
        assert store.get() is initial

    def test_overridden_context_manager(self) -> None:
        store = PolicyStore()
        with store.overridden(enabled=False) as config:
            assert config.enabled is False
            assert store.get().enabled is False
        assert store.get().enabled is True
