"""
Composition Root

Wires the infrastructure adapters into the application services, the way the
API layer's dependency providers do for request handlers.
"""

import logging
from typing import Optional

from src.application.ports import (
    CatalogImportClientProtocol,
    ConfirmationPromptProtocol,
    ProcessingChannelFactory,
)
from src.application.services import (
    FileGate,
    HistoryStore,
    PreviewService,
    SheetCatalog,
    UploadOrchestrator,
)
from src.cli.prompts import ConsoleConfirmationPrompt
from src.domain.catalog_import.repositories import HistorySlotProtocol
from src.infrastructure.http import HttpCatalogImportClient
from src.infrastructure.persistence import create_history_slot
from src.infrastructure.websocket import WebSocketProcessingChannel

logger = logging.getLogger(__name__)


def build_orchestrator(
    assume_yes: bool = False,
    import_client: Optional[CatalogImportClientProtocol] = None,
    channel_factory: Optional[ProcessingChannelFactory] = None,
    history_slot: Optional[HistorySlotProtocol] = None,
    confirmation_prompt: Optional[ConfirmationPromptProtocol] = None,
) -> UploadOrchestrator:
    """
    Build a ready-to-use orchestrator with its history restored.

    Every collaborator defaults to the production adapter configured from the
    environment; tests pass fakes instead.
    """
    client = import_client or HttpCatalogImportClient()
    store = HistoryStore(history_slot or create_history_slot())
    store.load()

    orchestrator = UploadOrchestrator(
        file_gate=FileGate(),
        sheet_catalog=SheetCatalog(client),
        preview_service=PreviewService(client),
        history_store=store,
        import_client=client,
        channel_factory=channel_factory or WebSocketProcessingChannel,
        confirmation_prompt=confirmation_prompt
        or ConsoleConfirmationPrompt(assume_yes=assume_yes),
    )
    logger.debug("Upload orchestrator ready")
    return orchestrator
