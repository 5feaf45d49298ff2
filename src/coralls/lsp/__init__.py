"""
LSP server implementation for the Coral language.

This package provides a Language Server Protocol implementation offering
pattern-rule diagnostics and keyword completion for Coral source files.

Key Components:
- CoralLSPServer: Session object owning every component and protocol handler
- Feature modules: Completion catalog/resolution and diagnostics
- Utility modules: Capability negotiation, settings cache, document events
  and coordinate transformation

Usage Example:
    from coralls.lsp import CoralLSPServer

    server = CoralLSPServer()

    # Start server (stdio mode for IDE integration)
    server.start()

    # Or start in TCP mode for testing
    server.start(use_tcp=True, host="localhost")
"""

from .server import CoralLSPServer, ServerInitializationState

from .features import (
    CompletionService,
    DiagnosticsService,
    register_completion,
    register_diagnostics,
)

from .utils import (
    CoordinateTransformer,
    DocumentEventCoordinator,
    ExampleSettings,
    SessionConfig,
    SettingsCache,
    SettingsFetchError,
    negotiate,
)

__all__ = [
    # Main server
    "CoralLSPServer",
    "ServerInitializationState",

    # Features
    "CompletionService",
    "DiagnosticsService",
    "register_completion",
    "register_diagnostics",

    # Utilities
    "CoordinateTransformer",
    "DocumentEventCoordinator",
    "ExampleSettings",
    "SessionConfig",
    "SettingsCache",
    "SettingsFetchError",
    "negotiate",
]
