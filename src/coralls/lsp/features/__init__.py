"""LSP features for the Coral language server."""

from .completion.completion import CompletionService, register_completion
from .diagnostics.diagnostics import DiagnosticsService, register_diagnostics

__all__ = [
    "CompletionService",
    "DiagnosticsService",
    "register_completion",
    "register_diagnostics",
]
