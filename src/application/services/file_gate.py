"""
File Gate

Validates the file picked by the operator before anything is sent to the
backend.

Responsibility:
    - Reject missing files
    - Reject names that do not end in an allowed spreadsheet extension
    - Reject files above the size limit
    - Produce an immutable SelectedFile on success

Architecture Notes:
    - Part of Application Layer (Services)
    - Configuration from environment (ALLOWED_EXTENSIONS, MAX_FILE_SIZE_MB),
      same variables as the backend upload validation
    - Downstream reset is done by UploadOrchestrator, which replaces the whole
      UploadSession with the SelectedFile returned here
"""

import logging
import os
from typing import Optional, Sequence

from src.domain.catalog_import.constants import (
    DEFAULT_ALLOWED_EXTENSIONS,
    DEFAULT_MAX_FILE_SIZE_MB,
    MSG_FILE_TOO_LARGE,
    MSG_NO_FILE_SELECTED,
    MSG_ONLY_EXCEL_ALLOWED,
)
from src.domain.catalog_import.value_objects import FileCandidate, SelectedFile
from src.domain.shared.exceptions import FileSizeExceededError, ValidationError

logger = logging.getLogger(__name__)


class FileGate:
    """
    Extension allow-list and size check for selected files.

    Business Rules:
        - Allowed extensions: .xlsx, .xls (from env: ALLOWED_EXTENSIONS)
        - Extension check is case-insensitive ("CATALOG.XLSX" is accepted)
          while the file name itself is kept as-is, so duplicate detection
          still tells "CATALOG.XLSX" and "catalog.xlsx" apart
        - Max file size: 10MB (from env: MAX_FILE_SIZE_MB, 0 disables the check)

    Examples:
        >>> gate = FileGate()
        >>> selected = gate.select(FileCandidate(name="catalog.xlsx", content=b"PK"))
        >>> selected.extension
        '.xlsx'
        >>> gate.select(FileCandidate(name="notes.txt"))
        Traceback (most recent call last):
        ...
        ValidationError: Only Excel files are allowed.
    """

    def __init__(
        self,
        allowed_extensions: Optional[Sequence[str]] = None,
        max_size_mb: Optional[int] = None,
    ) -> None:
        """
        Initialize the gate with configuration.

        Args:
            allowed_extensions: Extensions including the dot (default from env)
            max_size_mb: Max file size in MB (default from env)
        """
        if allowed_extensions is None:
            extensions_str = os.getenv(
                "ALLOWED_EXTENSIONS", ",".join(DEFAULT_ALLOWED_EXTENSIONS)
            )
            allowed_extensions = extensions_str.split(",")
        self.allowed_extensions = tuple(
            ext.strip().lower() for ext in allowed_extensions if ext.strip()
        )

        if max_size_mb is None:
            max_size_mb = int(
                os.getenv("MAX_FILE_SIZE_MB", str(DEFAULT_MAX_FILE_SIZE_MB))
            )
        self.max_size_mb = max_size_mb
        self.max_size_bytes = max_size_mb * 1024 * 1024

    def select(self, candidate: Optional[FileCandidate]) -> SelectedFile:
        """
        Validate a candidate and turn it into a SelectedFile.

        Args:
            candidate: File picked by the operator, or None if nothing was picked

        Returns:
            SelectedFile replacing any previous selection

        Raises:
            ValidationError: No file, or extension not allowed
            FileSizeExceededError: File larger than the configured limit
        """
        if candidate is None or not candidate.name:
            raise ValidationError(MSG_NO_FILE_SELECTED)

        if not self.is_allowed_name(candidate.name):
            logger.info(f"Rejected file with unsupported extension: {candidate.name}")
            raise ValidationError(MSG_ONLY_EXCEL_ALLOWED, file_name=candidate.name)

        if self.max_size_bytes > 0 and candidate.size > self.max_size_bytes:
            logger.info(
                f"Rejected file {candidate.name}: {candidate.size} bytes "
                f"exceeds {self.max_size_bytes}"
            )
            raise FileSizeExceededError(
                MSG_FILE_TOO_LARGE.format(
                    size_mb=candidate.size / (1024 * 1024), limit_mb=self.max_size_mb
                ),
                file_size=candidate.size,
                max_size=self.max_size_bytes,
                file_name=candidate.name,
            )

        selected = SelectedFile.from_candidate(candidate)
        logger.info(f"File selected: {selected.name} ({selected.size} bytes)")
        return selected

    def is_allowed_name(self, file_name: str) -> bool:
        return file_name.lower().endswith(self.allowed_extensions)
