"""
Application Layer Package

Responsibility:
    Coordinates the import workflow between the operator front end and the
    infrastructure adapters (HTTP backend, processing channel, history slot).

Contains:
    - ports/: Protocols implemented by Infrastructure Layer and front ends
    - services/: FileGate, SheetCatalog, PreviewService, HistoryStore,
      UploadOrchestrator
    - models: Shared Application Layer models (UploadState)

Does NOT contain:
    - Domain concepts (in Domain Layer)
    - Terminal handling (in CLI)
    - Infrastructure details (in Infrastructure Layer)
"""

# Re-export commonly used models for convenience
from src.application.models import UploadState

__all__ = [
    "UploadState",
]
