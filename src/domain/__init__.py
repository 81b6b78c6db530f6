"""
Domain Layer - Core Business Concepts

Heart of the catalog importer. Contains entities, value objects, repository
interfaces and the shared exception hierarchy. Framework-independent apart
from pydantic models.

Architecture:
    - Clean Architecture: Domain Layer is the center
    - Dependency Inversion: Domain defines interfaces, Infrastructure implements

Subdomains:
    - catalog_import: files, previews, progress signals, import history
    - shared: exception hierarchy

Usage:
    >>> from src.domain import HistoryEntry, DomainException
"""

from .catalog_import import (
    FileCandidate,
    HistoryEntry,
    HistorySlotProtocol,
    ImportOutcome,
    PreviewDataset,
    ProcessingMessage,
    ProcessingProgress,
    SelectedFile,
    TransferProgress,
)
from .shared import DomainException

__all__ = [
    "HistoryEntry",
    "ImportOutcome",
    "HistorySlotProtocol",
    "FileCandidate",
    "SelectedFile",
    "TransferProgress",
    "ProcessingProgress",
    "ProcessingMessage",
    "PreviewDataset",
    "DomainException",
]
