import sys

import pytest_lsp
from lsprotocol.types import (
    ClientCapabilities,
    InitializeParams,
    PublishDiagnosticsClientCapabilities,
    TextDocumentClientCapabilities,
)
from pytest_lsp import ClientServerConfig, LanguageClient

SERVER_COMMAND = [sys.executable, "-m", "coralls", "lsp"]


@pytest_lsp.fixture(
    config=ClientServerConfig(
        server_command=SERVER_COMMAND,
    ),
)
async def client(lsp_client: LanguageClient):
    # Setup
    params = InitializeParams(capabilities=ClientCapabilities())
    await lsp_client.initialize_session(params)

    yield

    # Teardown
    await lsp_client.shutdown_session()


@pytest_lsp.fixture(
    config=ClientServerConfig(
        server_command=SERVER_COMMAND,
    ),
)
async def related_information_client(lsp_client: LanguageClient):
    params = InitializeParams(
        capabilities=ClientCapabilities(
            text_document=TextDocumentClientCapabilities(
                publish_diagnostics=PublishDiagnosticsClientCapabilities(related_information=True)
            )
        )
    )
    await lsp_client.initialize_session(params)

    yield

    await lsp_client.shutdown_session()
