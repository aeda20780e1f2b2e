"""
Pytest configuration and shared fixtures for the empanelment engine tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

# Get the project root (parent of tests/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

# Add both project root and tests root to sys.path
for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

# =============================================================================
# Import fixtures using importlib
# =============================================================================

import importlib

_common = importlib.import_module("fixtures.common")

make_application = _common.make_application
make_registry = _common.make_registry
make_context = _common.make_context


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch):
    """Keep APCD_* variables from the developer's shell out of every test."""
    import os

    from core.config.runtime import set_default_config

    for key in list(os.environ):
        if key.startswith("APCD_"):
            monkeypatch.delenv(key, raising=False)
    set_default_config(None)
    yield
    set_default_config(None)


@pytest.fixture
def registry():
    """Provide the default rubric."""
    return make_registry()


@pytest.fixture
def context(registry):
    """Provide a TransitionContext over the default rubric and catalogue."""
    return make_context(registry=registry)


@pytest.fixture
def draft_application():
    """Provide a fresh DRAFT application."""
    return make_application()


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


# =============================================================================
# Test Helpers (available to all tests via fixtures)
# =============================================================================

@pytest.fixture
def assert_rejected():
    """Helper to assert an engine call fails with a given error code."""
    def _assert(call, code: str):
        from core.schemas.errors import EmpanelmentException

        with pytest.raises(EmpanelmentException) as exc_info:
            call()
        assert exc_info.value.code == code, (
            f"Expected {code}, got {exc_info.value.code}: {exc_info.value.message}"
        )
        return exc_info.value
    return _assert
