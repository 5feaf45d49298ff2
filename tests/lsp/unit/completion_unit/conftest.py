import pytest
from coralls.lsp.features.completion.completion import CompletionService


@pytest.fixture
def completion_service():
    return CompletionService()
