"""
HTML pages router.

Serves the landing page. Inline <style> and <script> blocks carry the
session nonce, so they run under a policy that forbids 'unsafe-inline'.
"""

import html

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from headerguard.core.config import Settings
from headerguard.domain.security.nonce import NonceProvider
from headerguard.interfaces.security.dependencies import get_nonce_provider, get_settings

router = APIRouter(tags=["pages"])

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>{title}</title>
  <style {nonce_attr}>body {{ font-family: sans-serif; margin: 2rem; }}</style>
</head>
<body>
  <h1>{title}</h1>
  <p id="status">Loading&hellip;</p>
  <script {nonce_attr}>document.getElementById("status").textContent = "Ready";</script>
</body>
</html>
"""


def _nonce_attribute(request: Request, provider: NonceProvider) -> str:
    """Return nonce="..." for the current session, or "" without a session."""
    session_id = getattr(request.state, "session_id", None)
    if not session_id:
        return ""
    return provider.nonce_attribute(session_id)


@router.get("/", response_class=HTMLResponse, summary="Landing page")
def index(
    request: Request,
    provider: NonceProvider = Depends(get_nonce_provider),
    app_settings: Settings = Depends(get_settings),
) -> HTMLResponse:
    """Render the landing page with nonce-tagged inline content."""
    nonce_attr = _nonce_attribute(request, provider) if app_settings.csp_nonce_enabled else ""
    return HTMLResponse(
        PAGE_TEMPLATE.format(
            title=html.escape(app_settings.project_name),
            nonce_attr=nonce_attr,
        )
    )
