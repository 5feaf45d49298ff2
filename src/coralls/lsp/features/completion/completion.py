from lsprotocol import types
from coralls.lsp.features.completion.catalog import CATALOG, COMPLETION_DETAILS, CompletionDetail
from pygls.server import LanguageServer
from typing import List, Mapping, Optional, Tuple
import logging

logger = logging.getLogger(__name__)


class CompletionService:
    """
    Serves the static completion catalog and resolves item details on demand.

    The catalog does not depend on the document or the cursor position.
    """

    def __init__(
        self,
        catalog: Tuple[Tuple[int, str, str], ...] = CATALOG,
        details: Mapping[int, CompletionDetail] = COMPLETION_DETAILS,
    ):
        self._catalog = catalog
        self._details = details

    def list_completions(self, params: Optional[types.CompletionParams] = None) -> List[types.CompletionItem]:
        """Return the full catalog, in catalog order, with item ids in ``data``."""
        return [
            types.CompletionItem(label=label, kind=types.CompletionItemKind.Text, data=item_id)
            for item_id, label, _ in self._catalog
        ]

    def resolve(self, item: types.CompletionItem) -> types.CompletionItem:
        """
        Attach detail and documentation to a completion item.

        Items whose ``data`` is not a known id are returned unchanged.
        """
        item_id = item.data
        if not isinstance(item_id, int) or isinstance(item_id, bool):
            return item

        detail = self._details.get(item_id)
        if detail is None:
            logger.debug(f"No completion details for id {item_id}")
            return item

        item.detail = detail.detail
        item.documentation = detail.documentation
        return item


def register_completion(server: LanguageServer, service: CompletionService):
    """
    Register completion functionality with the LSP server.

    Args:
        server: The language server instance
        service: Completion service answering the requests
    """

    # resolve_provider makes the host ask for details of the highlighted item
    completion_options = types.CompletionOptions(resolve_provider=True)

    @server.feature(types.TEXT_DOCUMENT_COMPLETION, completion_options)
    def completions(ls: LanguageServer, params: types.CompletionParams) -> List[types.CompletionItem]:
        """Provide the completion catalog, whatever the document position."""
        logger.debug(f"Completion request received for {params.text_document.uri} at position {params.position}")
        return service.list_completions(params)

    @server.feature(types.COMPLETION_ITEM_RESOLVE)
    def completion_resolve(ls: LanguageServer, item: types.CompletionItem) -> types.CompletionItem:
        """Resolve details of the item selected in the completion list."""
        return service.resolve(item)
