"""
Catalog Import Value Objects.

Immutable objects that represent domain concepts by their value.

Available Value Objects:
    - FileCandidate / SelectedFile: operator file before / after validation
    - TransferProgress: byte-level upload progress
    - ProcessingProgress / ProcessingMessage: server-side processing progress
    - PreviewDataset: sheet preview rows and column headers
"""

from src.domain.catalog_import.value_objects.preview_dataset import (
    PreviewDataset,
    PreviewRow,
)
from src.domain.catalog_import.value_objects.progress import (
    ProcessingMessage,
    ProcessingProgress,
    TransferProgress,
)
from src.domain.catalog_import.value_objects.selected_file import (
    FileCandidate,
    SelectedFile,
)

__all__ = [
    "FileCandidate",
    "SelectedFile",
    "TransferProgress",
    "ProcessingProgress",
    "ProcessingMessage",
    "PreviewDataset",
    "PreviewRow",
]
