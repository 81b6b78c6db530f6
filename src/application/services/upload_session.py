"""
Upload Session

Working state of the upload orchestrator for one selected file.

Architecture Notes:
    - Plain mutable dataclass owned by UploadOrchestrator
    - Replaced wholesale on every file selection, so no field of a previous
      file can leak into the new session
    - Display state only: the orchestrator's control flow is driven by
      UploadState, never by these fields
"""

from dataclasses import dataclass, field
from typing import Optional

from src.domain.catalog_import.entities import HistoryEntry
from src.domain.catalog_import.value_objects import (
    PreviewDataset,
    ProcessingProgress,
    SelectedFile,
    TransferProgress,
)


@dataclass
class UploadSession:
    """
    Fields shown to the operator during one file's workflow.

    Attributes:
        selected_file: File accepted by the FileGate (None before selection)
        sheets: Sheet names of the file, in server order
        selected_sheet: Sheet chosen by the operator
        preview: Preview rows and columns of the chosen sheet
        duplicate_warning: Non-blocking warning for a previously imported pair
        transfer_progress: Byte progress of the current upload request
        processing_progress: Last valid processing channel update
        outcome: HistoryEntry committed by the last terminal response
        error_message: Last user-facing error (validation, transport, cancel)
    """

    selected_file: Optional[SelectedFile] = None
    sheets: list[str] = field(default_factory=list)
    selected_sheet: Optional[str] = None
    preview: PreviewDataset = field(default_factory=PreviewDataset.empty)
    duplicate_warning: Optional[str] = None
    transfer_progress: TransferProgress = field(default_factory=TransferProgress)
    processing_progress: ProcessingProgress = field(
        default_factory=ProcessingProgress
    )
    outcome: Optional[HistoryEntry] = None
    error_message: Optional[str] = None

    @property
    def upload_succeeded(self) -> bool:
        return self.outcome is not None and self.outcome.is_success

    def reset_progress(self) -> None:
        """Zero both progress signals and forget the previous outcome."""
        self.transfer_progress = TransferProgress()
        self.processing_progress = ProcessingProgress()
        self.outcome = None
        self.error_message = None
