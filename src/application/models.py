"""
Shared Application Models

Responsibility:
    Contains shared models used across Application Layer.
    Prevents circular dependencies and code duplication.

Contains:
    - UploadState: Enum for the upload session lifecycle

Does NOT contain:
    - Business concepts (belong to Domain Layer)
    - Transport details (belong to Infrastructure Layer)
"""

from enum import Enum


class UploadState(str, Enum):
    """
    State of the upload orchestrator.

    Lifecycle:
        IDLE -> FILE_CHOSEN -> SHEETS_LISTED -> SHEET_CHOSEN -> PREVIEW_SHOWN
        -> CONFIRMING (only for duplicates) -> UPLOADING
        -> COMPLETED_SUCCESS | COMPLETED_ERROR

    A new file selection always returns the machine to FILE_CHOSEN (or IDLE
    when the file is rejected). Only the upload request's terminal response
    moves the machine into a COMPLETED state.

    Usage:
        >>> from src.application.models import UploadState
        >>> state = UploadState.UPLOADING
        >>> state.is_busy
        True
    """

    IDLE = "idle"
    FILE_CHOSEN = "file_chosen"
    SHEETS_LISTED = "sheets_listed"
    SHEET_CHOSEN = "sheet_chosen"
    PREVIEW_SHOWN = "preview_shown"
    CONFIRMING = "confirming"
    UPLOADING = "uploading"
    COMPLETED_SUCCESS = "completed_success"
    COMPLETED_ERROR = "completed_error"

    @property
    def is_busy(self) -> bool:
        """True while the session must not be changed."""
        return self in (UploadState.CONFIRMING, UploadState.UPLOADING)

    @property
    def is_completed(self) -> bool:
        return self in (UploadState.COMPLETED_SUCCESS, UploadState.COMPLETED_ERROR)
