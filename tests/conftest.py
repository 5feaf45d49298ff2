"""
Global pytest configuration and fixtures.
"""

from types import SimpleNamespace
from unittest.mock import Mock

import pytest


def make_document(uri: str, source: str, version: int = 1):
    """A stand-in for pygls' TextDocument."""
    return SimpleNamespace(uri=uri, source=source, version=version)


@pytest.fixture
def mock_server():
    """A language server double with an in-memory document store."""
    server = Mock()
    server.workspace.text_documents = {}
    server.workspace.get_text_document.side_effect = lambda uri: server.workspace.text_documents[uri]
    return server


@pytest.fixture
def open_document(mock_server):
    """Open a document in the mock server's workspace."""
    def _open(uri: str, source: str, version: int = 1):
        document = make_document(uri, source, version)
        mock_server.workspace.text_documents[uri] = document
        return document
    return _open


@pytest.fixture
def published_diagnostics(mock_server):
    """All diagnostic lists published for a URI, oldest first."""
    def _published(uri: str):
        return [
            call.kwargs["diagnostics"]
            for call in mock_server.publish_diagnostics.call_args_list
            if call.kwargs["uri"] == uri
        ]
    return _published
