"""
End-to-end tests for the security header middleware.

Each test drives a freshly built application through TestClient and
inspects the response headers.
"""

import re
from unittest.mock import MagicMock

from fastapi.responses import PlainTextResponse
from fastapi.testclient import TestClient

from headerguard.domain.security.errors import SecureRandomUnavailableError
from headerguard.infrastructure.security.policy_store import PolicyStore
from headerguard.main import create_app
from tests.conftest import make_settings

CSP = "content-security-policy"
CSP_RO = "content-security-policy-report-only"
HSTS = "strict-transport-security"

NONCE_PATTERN = re.compile(r"'nonce-([A-Za-z0-9+/=]+)'")


def _nonce_from_header(header: str) -> str:
    match = NONCE_PATTERN.search(header)
    assert match is not None, header
    return match.group(1)


class TestContentSecurityPolicy:
    """Tests for CSP header selection and content."""

    def test_default_policy_on_index(self, client) -> None:
        response = client.get("/")
        assert response.status_code == 200
        assert "default-src 'self'" in response.headers[CSP]
        assert "object-src 'none'" in response.headers[CSP]
        assert CSP_RO not in response.headers

    def test_report_only_mode(self, app_factory) -> None:
        client = TestClient(app_factory(csp_report_only=True))
        response = client.get("/")
        assert CSP_RO in response.headers
        assert CSP not in response.headers

    def test_disabled_emits_no_csp_header(self, app_factory) -> None:
        client = TestClient(app_factory(csp_enabled=False))
        response = client.get("/")
        assert response.status_code == 200
        assert CSP not in response.headers
        assert CSP_RO not in response.headers
        assert response.headers["x-frame-options"] == "SAMEORIGIN"

    def test_custom_script_src_fragment(self, app_factory) -> None:
        client = TestClient(
            app_factory(csp_directives={"script-src": ["'self'", "https://cdn.example.com"]})
        )
        header = client.get("/").headers[CSP]
        assert "script-src 'self' https://cdn.example.com" in header.split("; ")

    def test_header_present_on_every_route(self, client) -> None:
        for path in ("/", "/api/v1/health", "/does-not-exist"):
            response = client.get(path)
            assert CSP in response.headers, path

    def test_runtime_override_through_policy_store(self) -> None:
        store = PolicyStore.from_settings(make_settings())
        client = TestClient(create_app(settings=make_settings(), policy_store=store))
        with store.overridden(report_only=True):
            response = client.get("/api/v1/health")
            assert CSP_RO in response.headers
            assert CSP not in response.headers
        assert CSP in client.get("/api/v1/health").headers

    def test_empty_policy_sends_no_header(self, app_factory) -> None:
        client = TestClient(app_factory(csp_directives={}, csp_report_uri=""))
        response = client.get("/")
        assert CSP not in response.headers
        assert CSP_RO not in response.headers

    def test_inner_csp_header_replaced_not_duplicated(self, app_factory) -> None:
        app = app_factory(csp_report_only=True)

        @app.get("/legacy")
        def legacy() -> PlainTextResponse:
            return PlainTextResponse(
                "legacy",
                headers={"Content-Security-Policy": "default-src *", "X-Powered-By": "PHP/8.2"},
            )

        response = TestClient(app).get("/legacy")
        assert CSP not in response.headers
        assert "default-src 'self'" in response.headers[CSP_RO]
        assert "x-powered-by" not in response.headers
        assert response.text == "legacy"


class TestNonces:
    """Tests for session nonces threaded into the policy."""

    @staticmethod
    def _nonce_client(app_factory, **overrides) -> TestClient:
        return TestClient(app_factory(csp_nonce_enabled=True, **overrides))

    def test_nonces_off_by_default(self, client) -> None:
        response = client.get("/")
        assert "'nonce-" not in response.headers[CSP]
        assert 'nonce="' not in response.text

    def test_nonce_in_header_matches_page(self, app_factory) -> None:
        response = self._nonce_client(app_factory).get("/")
        nonce = _nonce_from_header(response.headers[CSP])
        assert f'<script nonce="{nonce}">' in response.text
        assert f"script-src 'self' 'nonce-{nonce}'" in response.headers[CSP]
        assert f"style-src 'self' 'nonce-{nonce}'" in response.headers[CSP]

    def test_nonce_stable_across_session(self, app_factory) -> None:
        client = self._nonce_client(app_factory)
        first = _nonce_from_header(client.get("/").headers[CSP])
        second = _nonce_from_header(client.get("/api/v1/health").headers[CSP])
        assert first == second

    def test_new_session_gets_new_nonce(self, app_factory) -> None:
        app = app_factory(csp_nonce_enabled=True)
        first = _nonce_from_header(TestClient(app).get("/").headers[CSP])
        second = _nonce_from_header(TestClient(app).get("/").headers[CSP])
        assert first != second

    def test_nonce_only_issued_when_rendered(self, app_factory) -> None:
        app = app_factory(csp_nonce_enabled=True)
        response = TestClient(app).get("/api/v1/health")
        assert "'nonce-" not in response.headers[CSP]
        assert len(app.state.session_store) == 0

    def test_unsafe_inline_style_keeps_working(self, app_factory) -> None:
        client = self._nonce_client(
            app_factory,
            csp_directives={
                "script-src": ["'self'"],
                "style-src": ["'self'", "'unsafe-inline'"],
            },
        )
        header = client.get("/").headers[CSP]
        assert "style-src 'self' 'unsafe-inline'" in header.split("; ")
        _nonce_from_header(header)

    def test_random_failure_not_touched_without_page(self, app_factory) -> None:
        app = app_factory(csp_nonce_enabled=True)
        app.state.nonce_provider._random_bytes = MagicMock(
            side_effect=OSError("no entropy")
        )
        response = TestClient(app).get("/api/v1/health")
        assert response.status_code == 200
        assert "'nonce-" not in response.headers[CSP]
        app.state.nonce_provider._random_bytes.assert_not_called()

    def test_page_requiring_nonce_fails_closed(self, app_factory) -> None:
        app = app_factory(csp_nonce_enabled=True)
        app.state.nonce_provider._random_bytes = MagicMock(
            side_effect=SecureRandomUnavailableError("no entropy")
        )
        response = TestClient(app).get("/")
        assert response.status_code == 503
        assert response.json() == {"error": "Service temporarily unavailable"}
        assert "'nonce-" not in response.headers[CSP]


class TestSessionCookie:
    """Tests for the session id cookie."""

    def test_session_cookie_issued(self, client) -> None:
        response = client.get("/")
        cookie = response.headers["set-cookie"]
        assert cookie.startswith("headerguard_session=")
        assert "httponly" in cookie.lower()
        assert "; secure" not in cookie.lower()

    def test_cookie_secure_over_https(self, secure_client) -> None:
        cookie = secure_client.get("/").headers["set-cookie"]
        assert "; secure" in cookie.lower()

    def test_cookie_secure_behind_trusted_proxy(self, app_factory) -> None:
        client = TestClient(app_factory(trust_forwarded_proto=True))
        response = client.get("/", headers={"X-Forwarded-Proto": "https"})
        assert "; secure" in response.headers["set-cookie"].lower()

    def test_forwarded_proto_ignored_for_cookie_by_default(self, client) -> None:
        response = client.get("/", headers={"X-Forwarded-Proto": "https"})
        assert "; secure" not in response.headers["set-cookie"].lower()

    def test_report_endpoint_gets_no_session(self, client) -> None:
        response = client.post("/csp-report", content=b"{}")
        assert response.status_code == 204
        assert "set-cookie" not in response.headers

    def test_cookieless_traffic_leaves_store_empty(self, app_factory) -> None:
        app = app_factory(csp_nonce_enabled=True)
        client = TestClient(app)
        for _ in range(50):
            client.cookies.clear()
            client.get("/api/v1/health")
            client.post("/csp-report", content=b"{not json")
        assert len(app.state.session_store) == 0


class TestAuxiliaryHeaders:
    """Tests for the fixed-value security headers."""

    def test_default_values(self, client) -> None:
        headers = client.get("/").headers
        assert headers["x-frame-options"] == "SAMEORIGIN"
        assert headers["x-content-type-options"] == "nosniff"
        assert headers["x-xss-protection"] == "1; mode=block"
        assert headers["referrer-policy"] == "strict-origin-when-cross-origin"
        assert headers["permissions-policy"] == "camera=(), microphone=(), geolocation=()"

    def test_configured_values_set_verbatim(self, app_factory) -> None:
        client = TestClient(
            app_factory(x_frame_options="DENY", referrer_policy="no-referrer")
        )
        headers = client.get("/").headers
        assert headers["x-frame-options"] == "DENY"
        assert headers["referrer-policy"] == "no-referrer"

    def test_unconfigured_header_absent(self, app_factory) -> None:
        client = TestClient(app_factory(permissions_policy=""))
        assert "permissions-policy" not in client.get("/").headers


class TestStrictTransportSecurity:
    """Tests for HSTS gating on secure transport."""

    def test_suppressed_over_http(self, app_factory) -> None:
        client = TestClient(app_factory(hsts_enabled=True))
        assert HSTS not in client.get("/").headers

    def test_present_over_https(self, app_factory) -> None:
        client = TestClient(
            app_factory(hsts_enabled=True, hsts_max_age=86400),
            base_url="https://testserver",
        )
        assert client.get("/").headers[HSTS] == "max-age=86400; includeSubDomains"

    def test_disabled_over_https(self, secure_client) -> None:
        assert HSTS not in secure_client.get("/").headers

    def test_forwarded_proto_ignored_by_default(self, app_factory) -> None:
        client = TestClient(app_factory(hsts_enabled=True))
        response = client.get("/", headers={"X-Forwarded-Proto": "https"})
        assert HSTS not in response.headers

    def test_forwarded_proto_trusted_when_enabled(self, app_factory) -> None:
        client = TestClient(
            app_factory(hsts_enabled=True, hsts_preload=True, trust_forwarded_proto=True)
        )
        response = client.get("/", headers={"X-Forwarded-Proto": "https"})
        assert response.headers[HSTS] == "max-age=31536000; includeSubDomains; preload"


class TestDegradation:
    """Tests for the never-fail-the-request guarantee."""

    def test_policy_failure_returns_response_without_headers(self) -> None:
        store = MagicMock(spec=PolicyStore)
        store.get.side_effect = RuntimeError("config backend down")
        client = TestClient(create_app(settings=make_settings(), policy_store=store))

        response = client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert CSP not in response.headers
        assert "x-frame-options" not in response.headers

    def test_unhandled_error_response_carries_headers(self, app_factory) -> None:
        app = app_factory(x_frame_options="DENY")

        @app.get("/boom")
        def boom() -> None:
            raise RuntimeError("handler bug")

        response = TestClient(app, raise_server_exceptions=False).get("/boom")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
        assert "default-src 'self'" in response.headers[CSP]
        assert response.headers["x-frame-options"] == "DENY"
        assert "handler bug" not in response.text

    def test_security_loggers_share_one_channel(self) -> None:
        from headerguard.application.security import record_violation
        from headerguard.shared.logging import SECURITY_LOGGER
        from headerguard.shared.security import headers

        assert headers.security_logger.name == SECURITY_LOGGER
        assert record_violation.csp_logger.name == f"{SECURITY_LOGGER}.csp"
