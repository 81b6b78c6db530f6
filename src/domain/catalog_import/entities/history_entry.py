"""
HistoryEntry Entity

Immutable record of one completed import attempt (success or failure).

Responsibility:
    - Hold the outcome of a single upload request that reached a terminal state
    - Serialize to / from the persisted JSON layout of the local history
    - Answer whether it matches a (file name, sheet name) pair

Architecture Notes:
    - Pydantic model, frozen (entries are never mutated once created)
    - Persisted field names follow the stored layout
      (fileName, sheetName, date, recordsImported, status)
    - Python attributes use snake_case (populate_by_name=True)
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ImportOutcome(str, Enum):
    """
    Terminal outcome of an upload request.

    Attributes:
        SUCCESS: Backend answered with a success response
        ERROR: Backend answered with an error response, or the request failed
    """

    SUCCESS = "success"
    ERROR = "error"


class HistoryEntry(BaseModel):
    """
    One import attempt recorded in the local history.

    Attributes:
        file_name: Name of the uploaded file (exact, case-sensitive)
        sheet_name: Name of the imported sheet
        timestamp: Local time the terminal response was received
        records_imported: Number of records imported (0 for errors)
        outcome: SUCCESS or ERROR

    Examples:
        >>> entry = HistoryEntry.success("catalog.xlsx", "Sheet1", 42)
        >>> entry.records_imported
        42
        >>> entry.model_dump(mode="json", by_alias=True)["status"]
        'success'
    """

    file_name: str = Field(alias="fileName")
    sheet_name: str = Field(alias="sheetName")
    timestamp: datetime = Field(alias="date", default_factory=datetime.now)
    records_imported: int = Field(alias="recordsImported", default=0, ge=0)
    outcome: ImportOutcome = Field(alias="status")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @classmethod
    def success(
        cls, file_name: str, sheet_name: str, records_imported: int
    ) -> "HistoryEntry":
        """Build an entry for a successful import."""
        return cls(
            file_name=file_name,
            sheet_name=sheet_name,
            records_imported=records_imported,
            outcome=ImportOutcome.SUCCESS,
        )

    @classmethod
    def error(cls, file_name: str, sheet_name: str) -> "HistoryEntry":
        """Build an entry for a failed import (always 0 records)."""
        return cls(
            file_name=file_name,
            sheet_name=sheet_name,
            records_imported=0,
            outcome=ImportOutcome.ERROR,
        )

    @property
    def is_success(self) -> bool:
        return self.outcome == ImportOutcome.SUCCESS

    def matches(self, file_name: str, sheet_name: str) -> bool:
        """Exact match on file name and sheet name."""
        return self.file_name == file_name and self.sheet_name == sheet_name

    def to_storage(self) -> dict:
        """Serialize using the persisted field names."""
        return self.model_dump(mode="json", by_alias=True)
