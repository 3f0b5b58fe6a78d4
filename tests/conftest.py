"""Shared fixtures."""

import pytest

from fnguard.configs.config import get_app_config


@pytest.fixture(autouse=True)
def fresh_app_config():
    """Every test reads configuration from scratch."""
    get_app_config.cache_clear()
    yield
    get_app_config.cache_clear()
