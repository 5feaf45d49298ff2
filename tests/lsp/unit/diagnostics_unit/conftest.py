import pytest
from unittest.mock import AsyncMock
from coralls.lsp.features.diagnostics.diagnostics import DiagnosticsService
from coralls.lsp.utils.capabilities import SessionConfig
from coralls.lsp.utils.settings_cache import SettingsCache


@pytest.fixture
def settings_fetcher():
    return AsyncMock(return_value=None)


@pytest.fixture
def make_service(mock_server, settings_fetcher):
    """Build a diagnostics service bound to the mock server."""
    def _make(session_config: SessionConfig = SessionConfig(), drop_stale: bool = False):
        cache = SettingsCache(session_config, settings_fetcher)
        service = DiagnosticsService(session_config, cache, drop_stale=drop_stale)
        service.set_server(mock_server)
        return service
    return _make


@pytest.fixture
def diagnostics_service(make_service):
    return make_service()


@pytest.fixture
def related_information_service(make_service):
    return make_service(SessionConfig(has_diagnostic_related_information_capability=True))
