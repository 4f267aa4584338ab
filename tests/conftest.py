"""
Shared fixtures for the test suite.

Every test builds its own application from explicit Settings, so policy
overrides and session state never leak between tests.
"""

from typing import Callable

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from headerguard.core.config import Settings
from headerguard.main import create_app
from headerguard.shared.security.rate_limiting import limiter


def make_settings(**overrides) -> Settings:
    """Build Settings that ignore any local .env file."""
    return Settings(_env_file=None, **overrides)


@pytest.fixture(autouse=True)
def _reset_rate_limits() -> None:
    limiter.reset()


@pytest.fixture
def app_factory() -> Callable[..., FastAPI]:
    """Return a factory building an app from settings overrides."""

    def _build(**overrides) -> FastAPI:
        return create_app(settings=make_settings(**overrides))

    return _build


@pytest.fixture
def client(app_factory) -> TestClient:
    """Plain-HTTP client against a default-configured app."""
    return TestClient(app_factory())


@pytest.fixture
def secure_client(app_factory) -> TestClient:
    """HTTPS client against a default-configured app."""
    return TestClient(app_factory(), base_url="https://testserver")
