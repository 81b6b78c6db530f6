"""
Application Services

Responsibility:
    Orchestration services of the catalog import workflow.

Contains:
    - FileGate: file validation (extension allow-list, size)
    - SheetCatalog: sheet listing
    - PreviewService: sheet preview and column headers
    - HistoryStore: persisted, append-only import history
    - UploadSession: working state of one file's workflow
    - UploadOrchestrator: upload lifecycle state machine

Does NOT contain:
    - Transport details (httpx, websockets live in Infrastructure Layer)
    - Terminal I/O (lives in the CLI)
"""

from src.application.services.file_gate import FileGate
from src.application.services.history_store import HistoryStore
from src.application.services.preview_service import PreviewService
from src.application.services.sheet_catalog import SheetCatalog
from src.application.services.upload_orchestrator import UploadOrchestrator
from src.application.services.upload_session import UploadSession

__all__ = [
    "FileGate",
    "SheetCatalog",
    "PreviewService",
    "HistoryStore",
    "UploadSession",
    "UploadOrchestrator",
]
