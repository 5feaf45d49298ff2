import logging
import traceback
import uuid
from typing import Any, Optional

from pygls.server import LanguageServer
from pygls.protocol import LanguageServerProtocol
from lsprotocol import types

from coralls import __version__
from .features.completion.completion import CompletionService, register_completion
from .features.diagnostics.diagnostics import DiagnosticsService, register_diagnostics
from .utils.capabilities import SessionConfig, negotiate
from .utils.document_event_coordinator import DocumentEventCoordinator
from .utils.models import SETTINGS_SECTION
from .utils.settings_cache import SettingsCache

logger = logging.getLogger(__name__)


class ServerInitializationState:
    """Tracks the initialization state of the LSP server components."""

    def __init__(self):
        self.handlers_registered = False
        self.session_started = False
        self.initialization_errors = []

    def add_error(self, component: str, error: Exception):
        """Add an initialization error for tracking."""
        self.initialization_errors.append((component, str(error)))
        logger.error(f"Initialization error in {component}: {error}")

    def is_ready_for_documents(self) -> bool:
        """Check if document events can be served."""
        return self.handlers_registered and self.session_started

    def get_error_summary(self) -> str:
        """Get a summary of initialization errors."""
        if not self.initialization_errors:
            return "No initialization errors"

        return f"Initialization errors: {'; '.join([f'{comp}: {err}' for comp, err in self.initialization_errors])}"


class PatchedLanguageServerProtocol(LanguageServerProtocol):
    """A patched language server protocol that negotiates session capabilities during ``initialize``."""

    def __init__(self, *args, **kwargs):
        self._server_capabilities = types.ServerCapabilities()
        self.session_config = SessionConfig()
        super().__init__(*args, **kwargs)

    @property
    def server_capabilities(self):
        return self._server_capabilities

    @server_capabilities.setter
    def server_capabilities(self, value: types.ServerCapabilities):
        # Assigned once while handling ``initialize``, after the client capabilities are stored
        self.session_config = negotiate(getattr(self, "client_capabilities", None))
        self._server_capabilities = self.session_config.restrict(value)


class CoralLSPServer:
    """
    LSP Server implementation for the Coral language.

    The server owns the session components and registers one handler per
    protocol event:
    - Capability negotiation on ``initialize``
    - Per-document settings with invalidation on configuration changes
    - Diagnostics recomputed on every open/change
    - A static completion catalog with lazy item resolution

    Components that depend on the host's capabilities are created once the
    ``initialize`` request has been negotiated.
    """

    def __init__(self, port: Optional[int] = None, drop_stale: bool = False):
        """
        Initialize the Coral LSP Server.

        Args:
            port: Port number for LSP server when using TCP
            drop_stale: Skip publishing diagnostics of superseded validations
        """
        # Configuration
        self.port = port or 3000
        self.drop_stale = drop_stale

        # Core components
        self.session_config: Optional[SessionConfig] = None
        self.settings_cache: Optional[SettingsCache] = None
        self.diagnostics_service: Optional[DiagnosticsService] = None
        self.completion_service = CompletionService()
        self.ls = LanguageServer(
            'coralls',
            f'v{__version__}',
            protocol_cls=PatchedLanguageServerProtocol,
            text_document_sync_kind=types.TextDocumentSyncKind.Incremental,
        )
        self.document_coordinator = DocumentEventCoordinator()

        # Initialization state tracking
        self.init_state = ServerInitializationState()

        self._setup_server()

        logger.info(f"Coral LSP Server initialized on port {self.port}")
        if drop_stale:
            logger.info("Superseded validations will not publish diagnostics")

    def _setup_server(self):
        """Register protocol handlers and features."""
        try:
            self._register_handlers()
            register_completion(self.ls, self.completion_service)
            self.document_coordinator.register_with_server(self.ls)
            self.init_state.handlers_registered = True
        except Exception as e:
            self.init_state.add_error("Handler Registration", e)
            raise

    def start_session(self, session_config: SessionConfig):
        """
        Create the capability-dependent components for a negotiated session.

        Args:
            session_config: Capabilities negotiated with the host
        """
        if self.init_state.session_started:
            logger.warning("Session already started - ignoring repeated initialize")
            return

        self.session_config = session_config
        self.settings_cache = SettingsCache(session_config, self._fetch_settings)
        self.diagnostics_service = register_diagnostics(
            self.ls, session_config, self.settings_cache, drop_stale=self.drop_stale
        )

        self.document_coordinator.register_handler(self.diagnostics_service)
        self.document_coordinator.register_handler(self.settings_cache)
        self.init_state.session_started = True
        logger.info("LSP: Session started")

    async def _fetch_settings(self, resource: str) -> Any:
        """Ask the host for the settings section scoped to one document."""
        result = await self.ls.get_configuration_async(
            types.ConfigurationParams(
                items=[types.ConfigurationItem(scope_uri=resource, section=SETTINGS_SECTION)]
            )
        )
        return result[0] if result else None

    def _register_handlers(self):
        """Register LSP protocol handlers."""

        @self.ls.feature(types.INITIALIZE)
        def initialize(ls: LanguageServer, params: types.InitializeParams):
            """Start the session once capabilities are negotiated."""
            self.start_session(ls.lsp.session_config)

        @self.ls.feature(types.INITIALIZED)
        async def initialized(ls: LanguageServer, params: types.InitializedParams):
            """Handle the initialized notification."""
            logger.info("LSP: Server initialized successfully")
            await self.on_initialized()

        @self.ls.feature(types.WORKSPACE_DID_CHANGE_CONFIGURATION)
        async def did_change_configuration(ls: LanguageServer, params: types.DidChangeConfigurationParams):
            """Refresh settings and revalidate every open document."""
            await self.on_configuration_changed(params.settings)

        @self.ls.feature(types.WORKSPACE_DID_CHANGE_WATCHED_FILES)
        def did_change_watched_files(ls: LanguageServer, params: types.DidChangeWatchedFilesParams):
            """Monitored files changed outside the editor."""
            self.on_watched_files_changed(params)

        @self.ls.feature(types.WORKSPACE_DID_CHANGE_WORKSPACE_FOLDERS)
        def did_change_workspace_folders(ls: LanguageServer, params: types.DidChangeWorkspaceFoldersParams):
            """Workspace folders were added or removed."""
            self.on_workspace_folders_changed(params)

        @self.ls.feature(types.SHUTDOWN)
        def shutdown(params=None):
            """Handle LSP shutdown request."""
            logger.info("LSP: Handling shutdown request")
            self._cleanup_resources()
            return None

        @self.ls.feature(types.EXIT)
        def exit_handler(params=None):
            """Handle exit notification."""
            logger.info("LSP: Server exiting")

    async def on_initialized(self):
        """Register for configuration change notifications when the host supports it."""
        if not self.session_config or not self.session_config.has_configuration_capability:
            return

        try:
            await self.ls.register_capability_async(
                types.RegistrationParams(
                    registrations=[
                        types.Registration(
                            id=str(uuid.uuid4()),
                            method=types.WORKSPACE_DID_CHANGE_CONFIGURATION,
                        )
                    ]
                )
            )
            logger.info("LSP: Registered for configuration changes")
        except Exception as e:
            logger.error(f"Failed to register for configuration changes: {e}")

    async def on_configuration_changed(self, settings: Any):
        if not self.init_state.session_started:
            logger.warning("Configuration change received before initialize - ignored")
            return

        self.settings_cache.on_configuration_changed(settings)
        await self.diagnostics_service.validate_all(self.ls.workspace.text_documents.keys())

    def on_watched_files_changed(self, params: types.DidChangeWatchedFilesParams):
        logger.info(f"Received file change event for {len(params.changes)} file(s)")
        self.ls.show_message_log("We received a file change event")

    def on_workspace_folders_changed(self, params: types.DidChangeWorkspaceFoldersParams):
        if not self.session_config or not self.session_config.has_workspace_folder_capability:
            return
        logger.info(
            f"Workspace folders changed: {len(params.event.added)} added, {len(params.event.removed)} removed"
        )
        self.ls.show_message_log("Workspace folder change event received.")

    def _cleanup_resources(self):
        """Clean up server resources in reverse order of initialization."""
        logger.info("Cleaning up LSP server resources...")

        try:
            if self.document_coordinator:
                self.document_coordinator.clear_handlers()
        except Exception as e:
            logger.error(f"Error clearing document handlers: {e}")

        if self.settings_cache:
            self.settings_cache.clear()

        logger.info("LSP server resource cleanup completed")

    def start(self, host: str = "localhost", use_tcp: bool = False):
        """Start the LSP server

        Args:
            host: Host to bind to when using TCP (default: localhost)
            use_tcp: Whether to use TCP instead of stdio (default: False)
        """
        logger.info("Starting Coral LSP Server...")

        try:
            if use_tcp:
                logger.info(f"Starting LSP TCP server on {host}:{self.port}...")
                self.ls.start_tcp(host, self.port)
                logger.info("LSP TCP server finished")
            else:
                logger.info("Starting LSP IO server...")
                self.ls.start_io()
                logger.info("LSP IO server finished")
        except KeyboardInterrupt:
            logger.info("Received shutdown signal")
        except BrokenPipeError:
            logger.info("Broken pipe - client disconnected")
        except EOFError:
            logger.info("EOF - no more input from client")
        except Exception as e:
            logger.error(f"Error in LSP server: {e}")
            logger.error(traceback.format_exc())
        finally:
            self.shutdown()

    def shutdown(self):
        """Shutdown the LSP server and cleanup resources"""
        logger.info("Shutting down Coral LSP Server...")
        self._cleanup_resources()
