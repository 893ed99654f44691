"""Pytest configuration shared across the suite."""

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover
    import _bootstrap  # type: ignore # noqa: F401

import sys

import pytest


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO-powered tests to run against asyncio backend only."""
    return "asyncio"


@pytest.fixture(autouse=True)
def _reset_dependency_overrides():
    """Keep FastAPI dependency overrides from leaking between tests."""
    yield
    main = sys.modules.get("oauth_relay.main")
    if main is not None:
        main.app.dependency_overrides.clear()
