import pytest
from unittest.mock import AsyncMock
from coralls.lsp.utils.capabilities import SessionConfig
from coralls.lsp.utils.settings_cache import SettingsCache


@pytest.fixture
def fetcher():
    return AsyncMock(return_value={"maxNumberOfProblems": 5})


@pytest.fixture
def cache_with_configuration(fetcher):
    """Cache for a host that answers workspace/configuration."""
    return SettingsCache(SessionConfig(has_configuration_capability=True), fetcher)


@pytest.fixture
def cache_without_configuration(fetcher):
    """Cache for a host that only pushes global settings."""
    return SettingsCache(SessionConfig(), fetcher)
