"""Pytest configuration and fixtures."""

import os

import pytest

# Set before any activation_engine import so module-level loggers and the
# cached settings see the test environment.
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-key")
os.environ.setdefault("ACTIVATION_ENGINE_ENV", "test")


@pytest.fixture(autouse=True)
def fresh_settings():
    """Clear the settings cache so monkeypatched env vars take effect."""
    from activation_engine.core.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
