"""
Application Layer Ports (Interfaces)

Contains Protocol definitions for dependency inversion.
Infrastructure Layer and front ends implement these protocols.
"""

from src.application.ports.catalog_import_client import (
    CatalogImportClientProtocol,
    ImportFailure,
    ImportResponse,
    ImportResult,
    PreviewResult,
    SheetListResult,
    TransferProgressCallback,
)
from src.application.ports.confirmation import (
    ConfirmationPromptProtocol,
    DeferredConfirmation,
)
from src.application.ports.processing_channel import (
    ProcessingChannelFactory,
    ProcessingChannelProtocol,
    ProcessingMessageCallback,
)

__all__ = [
    "CatalogImportClientProtocol",
    "SheetListResult",
    "PreviewResult",
    "ImportResult",
    "ImportFailure",
    "ImportResponse",
    "TransferProgressCallback",
    "ProcessingChannelProtocol",
    "ProcessingChannelFactory",
    "ProcessingMessageCallback",
    "ConfirmationPromptProtocol",
    "DeferredConfirmation",
]
