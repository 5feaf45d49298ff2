"""
Capability negotiation for the Coral language server.

The host declares its optional features in the ``initialize`` request. They are
read once into an immutable :class:`SessionConfig` which is handed to every
component of the session instead of being kept in module-level flags.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from lsprotocol import types

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionConfig:
    """
    Host capabilities that gate optional server behavior.

    Attributes:
        has_configuration_capability: Host answers ``workspace/configuration``
        has_workspace_folder_capability: Host supports workspace folders
        has_diagnostic_related_information_capability: Host renders
            ``relatedInformation`` on diagnostics
    """
    has_configuration_capability: bool = False
    has_workspace_folder_capability: bool = False
    has_diagnostic_related_information_capability: bool = False

    def restrict(self, capabilities: types.ServerCapabilities) -> types.ServerCapabilities:
        """
        Shape the server capabilities declared back to the host.

        Workspace-folder support is only echoed back when the host supports it.

        Args:
            capabilities: Capabilities built from the registered features

        Returns:
            The same capabilities object, adjusted in place
        """
        if not self.has_workspace_folder_capability and capabilities.workspace is not None:
            capabilities.workspace.workspace_folders = None
            if capabilities.workspace.file_operations is None:
                capabilities.workspace = None
        return capabilities


def negotiate(client_capabilities: Optional[types.ClientCapabilities]) -> SessionConfig:
    """
    Derive the session configuration from the host's declared capabilities.

    Absent or falsy fields count as unsupported.

    Args:
        client_capabilities: Capabilities from the ``initialize`` request

    Returns:
        The negotiated session configuration
    """
    workspace = client_capabilities.workspace if client_capabilities else None
    text_document = client_capabilities.text_document if client_capabilities else None
    publish_diagnostics = text_document.publish_diagnostics if text_document else None

    config = SessionConfig(
        has_configuration_capability=bool(workspace and workspace.configuration),
        has_workspace_folder_capability=bool(workspace and workspace.workspace_folders),
        has_diagnostic_related_information_capability=bool(
            publish_diagnostics and publish_diagnostics.related_information
        ),
    )
    logger.info(f"Negotiated session capabilities: {config}")
    return config
