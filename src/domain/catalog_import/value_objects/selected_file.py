"""
File Value Objects

FileCandidate is whatever the operator picked (may be rejected).
SelectedFile is a candidate that passed the FileGate.

Architecture Notes:
    - Both immutable (frozen pydantic models)
    - SelectedFile is replaced wholesale on each new selection, never mutated
"""

from pathlib import Path, PurePath

from pydantic import BaseModel, ConfigDict, Field

from src.domain.catalog_import.constants import CONTENT_TYPES, FALLBACK_CONTENT_TYPE


class FileCandidate(BaseModel):
    """
    File picked by the operator, before validation.

    Attributes:
        name: File name as shown to the operator (no directories)
        content: Raw file bytes

    Examples:
        >>> candidate = FileCandidate.from_path(Path("catalog.xlsx"))
        >>> candidate.name
        'catalog.xlsx'
    """

    name: str
    content: bytes = b""

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_path(cls, path: Path) -> "FileCandidate":
        """Read a candidate from the local file system."""
        path = Path(path)
        return cls(name=path.name, content=path.read_bytes())

    @property
    def size(self) -> int:
        return len(self.content)


class SelectedFile(BaseModel):
    """
    Validated spreadsheet owned by the FileGate.

    Attributes:
        name: File name (used for duplicate detection and history)
        content: Binary payload sent to the backend
        extension: Lower-cased extension including the dot (".xlsx")
    """

    name: str = Field(min_length=1)
    content: bytes
    extension: str

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_candidate(cls, candidate: FileCandidate) -> "SelectedFile":
        return cls(
            name=candidate.name,
            content=candidate.content,
            extension=PurePath(candidate.name).suffix.lower(),
        )

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def content_type(self) -> str:
        """MIME type sent with the multipart upload."""
        return CONTENT_TYPES.get(self.extension, FALLBACK_CONTENT_TYPE)

    def __repr__(self) -> str:
        return f"SelectedFile(name={self.name!r}, size={self.size})"
