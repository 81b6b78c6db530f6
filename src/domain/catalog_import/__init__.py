"""
Catalog Import Subdomain Module

Core concepts of importing a spreadsheet sheet into the product catalog:
selected files, progress signals, previews and the import history.

Usage:
    >>> from src.domain.catalog_import import HistoryEntry, SelectedFile
    >>> from src.domain.catalog_import.value_objects import TransferProgress
"""

from .entities import HistoryEntry, ImportOutcome
from .repositories import HistorySlotProtocol
from .value_objects import (
    FileCandidate,
    PreviewDataset,
    ProcessingMessage,
    ProcessingProgress,
    SelectedFile,
    TransferProgress,
)

from . import constants

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
    "constants",
]
