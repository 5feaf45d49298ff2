"""
Per-document settings cache.

When the host supports ``workspace/configuration`` the settings of each open
document are fetched lazily and cached per resource. Otherwise a single global
value, replaced on every configuration change, is used for all documents.

Cache entries move through ``Pending`` (a fetch in flight, shared by every
caller for the same resource) to ``Resolved``. Failed fetches leave no entry
behind so the next request retries.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from lsprotocol import types
from pydantic import ValidationError

from .capabilities import SessionConfig
from .models import (
    DEFAULT_SETTINGS,
    SETTINGS_SECTION,
    ExampleSettings,
    Pending,
    Resolved,
    SettingsEntry,
)

logger = logging.getLogger(__name__)


# Returns the raw section value sent by the host
SettingsFetcher = Callable[[str], Awaitable[Any]]


class SettingsFetchError(Exception):
    """Raised when the settings of a resource could not be retrieved from the host."""
    pass


def parse_settings(raw: Any) -> ExampleSettings:
    """
    Validate a settings payload received from the host.

    A missing section (``None``) yields the defaults.

    Raises:
        SettingsFetchError: If the payload does not describe valid settings
    """
    if raw is None:
        return DEFAULT_SETTINGS
    if isinstance(raw, ExampleSettings):
        return raw
    try:
        return ExampleSettings.model_validate(raw)
    except ValidationError as e:
        raise SettingsFetchError(f"Invalid {SETTINGS_SECTION} settings: {e}") from e


class SettingsCache:
    """Resolves the settings that apply to a given document."""

    def __init__(self, session_config: SessionConfig, fetcher: SettingsFetcher):
        """
        Initialize the settings cache.

        Args:
            session_config: Negotiated host capabilities
            fetcher: Coroutine function retrieving the settings of one resource
        """
        self._session_config = session_config
        self._fetcher = fetcher
        self._global_settings: ExampleSettings = DEFAULT_SETTINGS
        self._entries: Dict[str, SettingsEntry] = {}

    @property
    def global_settings(self) -> ExampleSettings:
        return self._global_settings

    def get_entry(self, resource: str) -> Optional[SettingsEntry]:
        """Return the cache entry for a resource, if any."""
        return self._entries.get(resource)

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, resource: str) -> ExampleSettings:
        """
        Get the settings for a resource.

        Args:
            resource: Document URI

        Returns:
            The settings applying to the document

        Raises:
            SettingsFetchError: If the host request failed
        """
        if not self._session_config.has_configuration_capability:
            return self._global_settings

        entry = self._entries.get(resource)
        if isinstance(entry, Resolved):
            return entry.value

        if entry is None:
            entry = Pending(asyncio.ensure_future(self._fetch(resource)))
            self._entries[resource] = entry
            entry.task.add_done_callback(
                lambda task, pending=entry: self._settle(resource, pending, task)
            )
            logger.debug(f"Requested settings for {resource}")

        # Shielded so a cancelled caller does not cancel the fetch shared with others
        return await asyncio.shield(entry.task)

    async def _fetch(self, resource: str) -> ExampleSettings:
        try:
            raw = await self._fetcher(resource)
        except SettingsFetchError:
            raise
        except Exception as e:
            raise SettingsFetchError(f"Failed to fetch settings for {resource}: {e}") from e
        return parse_settings(raw)

    def _settle(self, resource: str, pending: Pending, task: "asyncio.Task[ExampleSettings]") -> None:
        # The entry may have been invalidated or replaced while the fetch was in flight
        if self._entries.get(resource) is not pending:
            return

        if task.cancelled() or task.exception() is not None:
            del self._entries[resource]
            logger.warning(f"Settings fetch for {resource} failed; entry dropped")
        else:
            self._entries[resource] = Resolved(task.result())

    def on_configuration_changed(self, settings: Any = None) -> None:
        """
        React to a ``workspace/didChangeConfiguration`` notification.

        Args:
            settings: The notification's ``settings`` payload
        """
        if self._session_config.has_configuration_capability:
            count = len(self._entries)
            self._entries.clear()
            logger.info(f"Cleared {count} cached document settings")
            return

        section = settings.get(SETTINGS_SECTION) if isinstance(settings, dict) else None
        try:
            self._global_settings = parse_settings(section)
        except SettingsFetchError as e:
            logger.error(f"Ignoring configuration change: {e}")
            self._global_settings = DEFAULT_SETTINGS
        logger.info(f"Global settings now {self._global_settings}")

    def on_document_closed(self, resource: str) -> None:
        """Forget the settings of a closed document."""
        if self._entries.pop(resource, None) is not None:
            logger.debug(f"Dropped cached settings for {resource}")

    def handle_document_close(self, params: types.DidCloseTextDocumentParams) -> None:
        """Document event handler entry point for ``textDocument/didClose``."""
        self.on_document_closed(params.text_document.uri)

    def clear(self) -> None:
        self._entries.clear()
