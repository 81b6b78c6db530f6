"""
Catalog Import Client Port

Contract of the backend endpoints the importer talks to (sheet listing,
preview, import) and the explicit result variants of each endpoint.

Architecture Notes:
    - Protocol interface, implemented by HttpCatalogImportClient (httpx)
    - Result DTOs are parsed defensively by the implementation; absent
      optional fields take documented defaults
"""

from typing import Any, Callable, Optional, Protocol, Union

from pydantic import BaseModel, ConfigDict, Field

from src.domain.catalog_import.value_objects import SelectedFile

# Called with (bytes_sent, bytes_total) after each chunk of the request body
TransferProgressCallback = Callable[[int, int], None]


class SheetListResult(BaseModel):
    """Sheet names in server order (no sorting, no de-duplication)."""

    sheets: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class PreviewResult(BaseModel):
    """Preview rows as returned by the backend."""

    preview: list[dict[str, Any]] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class ImportResult(BaseModel):
    """Terminal success response of the import request."""

    count: int = Field(default=0, ge=0)

    model_config = ConfigDict(frozen=True)


class ImportFailure(BaseModel):
    """
    Terminal error of the import request.

    Attributes:
        detail: Human-readable message from the backend, if it sent one
        status_code: HTTP status code (None for network-level failures)
    """

    detail: Optional[str] = None
    status_code: Optional[int] = None

    model_config = ConfigDict(frozen=True)


ImportResponse = Union[ImportResult, ImportFailure]


class CatalogImportClientProtocol(Protocol):
    """
    Request/response operations of the import backend.

    Error contract:
        - list_sheets() / preview() raise TransportError on any failure
        - upload() never raises for transport problems; it returns
          ImportFailure instead so every terminal state is a value
    """

    async def list_sheets(self, file: SelectedFile) -> SheetListResult:
        ...

    async def preview(self, file: SelectedFile, sheet_name: str) -> PreviewResult:
        ...

    async def upload(
        self,
        file: SelectedFile,
        sheet_name: str,
        on_progress: Optional[TransferProgressCallback] = None,
    ) -> ImportResponse:
        ...
