"""Main diagnostics functionality for the LSP server."""

import asyncio
import logging
from typing import Dict, Iterable, List, Optional

from lsprotocol import types
from pygls.server import LanguageServer

from coralls.lsp.features.diagnostics.rules import UPPERCASE_WORD_RULE, PatternRule
from coralls.lsp.utils.capabilities import SessionConfig
from coralls.lsp.utils.coordinate_transformer import CoordinateTransformer
from coralls.lsp.utils.models import ExampleSettings
from coralls.lsp.utils.settings_cache import SettingsCache, SettingsFetchError


logger = logging.getLogger(__name__)


class DiagnosticsService:
    """
    Validates open documents and publishes their diagnostics.

    Each validation resolves the document's settings, scans its current text
    with the configured pattern rule and publishes the complete result,
    replacing whatever was published for the document before.

    Overlapping validations of the same document are not ordered: the last one
    to publish wins. With ``drop_stale`` enabled, a validation that has been
    superseded by a newer one for the same document skips publication instead.
    """

    def __init__(
        self,
        session_config: SessionConfig,
        settings_cache: SettingsCache,
        rule: PatternRule = UPPERCASE_WORD_RULE,
        drop_stale: bool = False,
    ):
        """
        Initialize the diagnostics service.

        Args:
            session_config: Negotiated host capabilities
            settings_cache: Source of per-document settings
            rule: Pattern rule producing the diagnostics
            drop_stale: Skip publishing results of superseded validations
        """
        self._session_config = session_config
        self._settings_cache = settings_cache
        self._rule = rule
        self._drop_stale = drop_stale
        self._sequence: Dict[str, int] = {}
        self._server: Optional[LanguageServer] = None

    def set_server(self, server: LanguageServer) -> None:
        """Set the server instance for reading documents and publishing diagnostics."""
        self._server = server

    async def handle_document_open(self, params: types.DidOpenTextDocumentParams) -> None:
        """Validate each document when it is opened."""
        await self.validate(params.text_document.uri)

    async def handle_document_change(self, params: types.DidChangeTextDocumentParams) -> None:
        """Validate each document when its content changes."""
        await self.validate(params.text_document.uri)

    def handle_document_close(self, params: types.DidCloseTextDocumentParams) -> None:
        self._sequence.pop(params.text_document.uri, None)

    def build_diagnostics(
        self, document_uri: str, text: str, settings: ExampleSettings
    ) -> List[types.Diagnostic]:
        """
        Produce the diagnostics for a document text.

        At most ``settings.max_number_of_problems`` diagnostics are produced;
        further matches are dropped.

        Args:
            document_uri: URI of the document, used for related information
            text: Full document text
            settings: Settings applying to the document

        Returns:
            Diagnostics ordered by match position
        """
        limit = settings.max_number_of_problems
        diagnostics: List[types.Diagnostic] = []
        if limit <= 0:
            return diagnostics

        transformer = CoordinateTransformer(text)
        for match in self._rule.matches(text):
            if len(diagnostics) >= limit:
                break

            diagnostic_range = transformer.range_at(match.start(), match.end())
            diagnostic = types.Diagnostic(
                range=diagnostic_range,
                message=self._rule.message_for(match.group(0)),
                severity=self._rule.severity,
                source=self._rule.source,
            )
            if self._session_config.has_diagnostic_related_information_capability:
                diagnostic.related_information = [
                    types.DiagnosticRelatedInformation(
                        location=types.Location(
                            uri=document_uri,
                            range=transformer.range_at(match.start(), match.end()),
                        ),
                        message=message,
                    )
                    for message in self._rule.related_messages
                ]
            diagnostics.append(diagnostic)

        return diagnostics

    async def validate(self, document_uri: str) -> None:
        """
        Validate one document and publish its diagnostics.

        Publication is skipped when the document's settings cannot be fetched.

        Args:
            document_uri: URI of the document
        """
        if not self._server:
            logger.error("Server not set - cannot validate documents")
            return

        sequence = self._sequence.get(document_uri, 0) + 1
        self._sequence[document_uri] = sequence

        try:
            settings = await self._settings_cache.get(document_uri)
        except SettingsFetchError as e:
            logger.error(f"Skipping diagnostics for {document_uri}: {e}")
            return

        if self._drop_stale and self._sequence.get(document_uri) != sequence:
            logger.debug(f"Dropping superseded validation #{sequence} of {document_uri}")
            return

        if document_uri not in self._server.workspace.text_documents:
            logger.debug(f"{document_uri} was closed before validation finished")
            return

        document = self._server.workspace.get_text_document(document_uri)
        diagnostics = self.build_diagnostics(document_uri, document.source, settings)

        logger.debug(f"Publishing {len(diagnostics)} diagnostics for {document_uri}")
        self._server.publish_diagnostics(
            uri=document_uri,
            diagnostics=diagnostics,
            version=document.version,
        )

    async def validate_all(self, document_uris: Iterable[str]) -> None:
        """Validate several documents concurrently."""
        await asyncio.gather(*(self.validate(uri) for uri in list(document_uris)))


def register_diagnostics(
    server: LanguageServer,
    session_config: SessionConfig,
    settings_cache: SettingsCache,
    drop_stale: bool = False,
) -> DiagnosticsService:
    """
    Create the diagnostics service for a negotiated session.

    Document events reach the service through the document event coordinator.

    Args:
        server: The language server instance
        session_config: Negotiated host capabilities
        settings_cache: Source of per-document settings
        drop_stale: Skip publishing results of superseded validations

    Returns:
        The diagnostics service instance
    """
    service = DiagnosticsService(session_config, settings_cache, drop_stale=drop_stale)
    service.set_server(server)
    logger.info("Diagnostics functionality registered successfully")
    return service
