"""LSP utility modules for the Coral language server."""

from .capabilities import SessionConfig, negotiate
from .coordinate_transformer import CoordinateTransformer
from .document_event_coordinator import DocumentEventCoordinator
from .models import DEFAULT_SETTINGS, SETTINGS_SECTION, ExampleSettings, Pending, Resolved
from .settings_cache import SettingsCache, SettingsFetchError

__all__ = [
    "SessionConfig",
    "negotiate",
    "CoordinateTransformer",
    "DocumentEventCoordinator",
    "DEFAULT_SETTINGS",
    "SETTINGS_SECTION",
    "ExampleSettings",
    "Pending",
    "Resolved",
    "SettingsCache",
    "SettingsFetchError",
]
