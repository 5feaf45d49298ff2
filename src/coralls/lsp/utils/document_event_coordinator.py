"""
Document Event Coordinator - Centralized document event handling for LSP features.

pygls keeps the open text documents in its workspace and applies every
open/change/close notification to them. This coordinator registers once with
the server for those notifications and forwards each event, unchanged, to the
features that subscribed to it.

Architecture:
- Single registration point for document events with the LSP server
- Multiple feature handlers can subscribe to receive events
- Handlers may be plain functions or coroutines
- Error isolation - if one handler fails, others continue to work

Usage Pattern:
1. Create coordinator instance and register it with the LSP server
2. Features register their handlers with the coordinator once the session
   capabilities are known
3. LSP server sends events to coordinator
4. Coordinator distributes events to all registered handlers
"""

import inspect
import logging
from typing import Any, List, Protocol

from lsprotocol import types
from pygls.server import LanguageServer


logger = logging.getLogger(__name__)


class DocumentEventHandler(Protocol):
    """
    Protocol defining the interface for document event handlers.

    All methods are optional - handlers only need to implement methods for
    events they care about. Any of them may be a coroutine function.
    """

    def handle_document_open(self, params: types.DidOpenTextDocumentParams) -> Any:
        """Called when a document is opened in the editor."""
        ...

    def handle_document_change(self, params: types.DidChangeTextDocumentParams) -> Any:
        """Called when a document's content changes in the editor."""
        ...

    def handle_document_close(self, params: types.DidCloseTextDocumentParams) -> Any:
        """Called when a document is closed in the editor."""
        ...


class DocumentEventCoordinator:
    """
    Coordinates document events between the LSP server and multiple feature handlers.

    All events are delivered on the server's event loop, so no locking is needed.
    """

    def __init__(self):
        """Initialize the document event coordinator."""
        self._handlers: List[DocumentEventHandler] = []
        self._registered_with_server = False

    def register_handler(self, handler: DocumentEventHandler) -> None:
        """
        Register a document event handler.

        Handlers are called in the order they were registered.

        Args:
            handler: Handler that implements DocumentEventHandler protocol

        Raises:
            ValueError: If handler is None
        """
        if handler is None:
            raise ValueError("Handler cannot be None")

        if handler in self._handlers:
            logger.warning(f"Handler {type(handler).__name__} is already registered")
            return

        self._handlers.append(handler)
        logger.info(f"Registered document event handler: {type(handler).__name__}")

    def unregister_handler(self, handler: DocumentEventHandler) -> bool:
        """
        Unregister a document event handler.

        Returns:
            True if handler was found and removed, False otherwise
        """
        try:
            self._handlers.remove(handler)
            logger.info(f"Unregistered document event handler: {type(handler).__name__}")
            return True
        except ValueError:
            logger.warning(f"Handler {type(handler).__name__} was not registered")
            return False

    def get_handler_count(self) -> int:
        """Get the number of registered handlers."""
        return len(self._handlers)

    def register_with_server(self, server: LanguageServer) -> None:
        """
        Register document events with the LSP server.

        Subsequent calls are ignored with a warning.

        Raises:
            ValueError: If server is None
        """
        if server is None:
            raise ValueError("Server cannot be None")

        if self._registered_with_server:
            logger.warning("Document events already registered with server")
            return

        self._register_server_events(server)
        self._registered_with_server = True
        logger.info("Document events registered with server")

    def _register_server_events(self, server: LanguageServer) -> None:
        """Register the actual LSP event handlers with the server."""

        @server.feature(types.TEXT_DOCUMENT_DID_OPEN)
        async def did_open(params: types.DidOpenTextDocumentParams):
            """Distribute document open events to all handlers."""
            await self.distribute_event("handle_document_open", params)

        @server.feature(types.TEXT_DOCUMENT_DID_CHANGE)
        async def did_change(params: types.DidChangeTextDocumentParams):
            """Distribute document change events to all handlers."""
            await self.distribute_event("handle_document_change", params)

        @server.feature(types.TEXT_DOCUMENT_DID_CLOSE)
        async def did_close(params: types.DidCloseTextDocumentParams):
            """Distribute document close events to all handlers."""
            await self.distribute_event("handle_document_close", params)

    async def distribute_event(self, method_name: str, params) -> None:
        """
        Distribute an event to all registered handlers.

        Errors in individual handlers are caught and logged but don't
        affect other handlers or the overall event processing.

        Args:
            method_name: Name of the handler method to call
            params: Event parameters to pass to handlers
        """
        for handler in list(self._handlers):
            try:
                method = getattr(handler, method_name, None)
                if method and callable(method):
                    result = method(params)
                    if inspect.isawaitable(result):
                        await result
            except Exception as e:
                logger.error(f"Error in {method_name} handler {type(handler).__name__}: {e}")

    def clear_handlers(self) -> None:
        """
        Clear all registered handlers.

        This is primarily used for cleanup during server shutdown.
        """
        handler_count = len(self._handlers)
        self._handlers.clear()
        logger.info(f"Cleared {handler_count} document event handlers")
