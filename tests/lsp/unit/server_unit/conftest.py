import pytest
from coralls.lsp.server import CoralLSPServer


@pytest.fixture
def make_server(mock_server):
    """Build a Coral server whose pygls server is replaced by the mock after registration."""
    def _make(session_config=None, drop_stale=False):
        server = CoralLSPServer(drop_stale=drop_stale)
        server.ls = mock_server
        if session_config is not None:
            server.start_session(session_config)
        return server
    return _make
