"""
HTTP Catalog Import Client

httpx implementation of CatalogImportClientProtocol.

Responsibility:
    - POST the selected file to the sheet listing, preview and import endpoints
    - Stream the import request body in chunks and report byte progress
    - Parse every response defensively into the explicit result variants
    - Translate httpx failures into TransportError / ImportFailure

Architecture Notes:
    - Infrastructure Layer (external dependency on httpx)
    - One AsyncClient per request; ``transport`` can be injected for tests
      (httpx.MockTransport, httpx.ASGITransport)
    - Configuration from environment (IMPORT_API_URL, IMPORT_API_TIMEOUT,
      UPLOAD_CHUNK_SIZE)

Endpoints:
    POST /excel/sheets   multipart: file              -> {"sheets": [...]}
    POST /excel/preview  multipart: file, sheet_name  -> {"preview": [...]}
    POST /excel/import   multipart: file, sheet_name  -> {"count": N}
                                                       | {"detail": "..."}
"""

import logging
import os
from typing import Any, AsyncIterator, Optional

import httpx

from src.application.ports.catalog_import_client import (
    ImportFailure,
    ImportResponse,
    ImportResult,
    PreviewResult,
    SheetListResult,
    TransferProgressCallback,
)
from src.domain.catalog_import.value_objects import SelectedFile
from src.domain.shared.exceptions import TransportError

logger = logging.getLogger(__name__)

SHEETS_PATH = "/excel/sheets"
PREVIEW_PATH = "/excel/preview"
IMPORT_PATH = "/excel/import"


class HttpCatalogImportClient:
    """
    Import backend client over HTTP.

    Configuration:
        IMPORT_API_URL: Backend base URL (default: http://localhost:8000)
        IMPORT_API_TIMEOUT: Request timeout in seconds (default: 120)
        UPLOAD_CHUNK_SIZE: Upload chunk size in bytes (default: 65536)

    Examples:
        >>> client = HttpCatalogImportClient()
        >>> result = await client.list_sheets(selected_file)
        >>> result.sheets
        ['Products', 'Prices']

        >>> response = await client.upload(
        ...     selected_file, "Products", on_progress=lambda sent, total: ...
        ... )
        >>> isinstance(response, ImportResult)
        True
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        chunk_size: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: Backend base URL (default from env: IMPORT_API_URL)
            timeout: Timeout in seconds (default from env: IMPORT_API_TIMEOUT)
            chunk_size: Upload chunk size (default from env: UPLOAD_CHUNK_SIZE)
            transport: Custom httpx transport (tests)
        """
        self.base_url = (
            base_url or os.getenv("IMPORT_API_URL", "http://localhost:8000")
        ).rstrip("/")
        self.timeout = timeout or float(os.getenv("IMPORT_API_TIMEOUT", "120"))
        self.chunk_size = chunk_size or int(os.getenv("UPLOAD_CHUNK_SIZE", "65536"))
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self._transport
        )

    @staticmethod
    def _files(file: SelectedFile) -> dict[str, tuple[str, bytes, str]]:
        return {"file": (file.name, file.content, file.content_type)}

    # ------------------------------------------------------------------
    # Sheet listing / preview
    # ------------------------------------------------------------------

    async def list_sheets(self, file: SelectedFile) -> SheetListResult:
        """
        List the sheets of ``file``.

        Raises:
            TransportError: Request failed or ``sheets`` is not a list
        """
        data = await self._post_json(SHEETS_PATH, files=self._files(file))
        sheets = data.get("sheets") if isinstance(data, dict) else None
        if not isinstance(sheets, list):
            raise TransportError("Sheet listing response has no 'sheets' list")
        return SheetListResult(sheets=[str(name) for name in sheets])

    async def preview(self, file: SelectedFile, sheet_name: str) -> PreviewResult:
        """
        Fetch the preview rows of ``sheet_name``.

        Rows that are not JSON objects are dropped with a warning.

        Raises:
            TransportError: Request failed or ``preview`` is not a list
        """
        data = await self._post_json(
            PREVIEW_PATH, files=self._files(file), data={"sheet_name": sheet_name}
        )
        rows = data.get("preview") if isinstance(data, dict) else None
        if not isinstance(rows, list):
            raise TransportError("Preview response has no 'preview' list")

        valid_rows = [row for row in rows if isinstance(row, dict)]
        if len(valid_rows) != len(rows):
            logger.warning(
                f"Dropped {len(rows) - len(valid_rows)} non-object preview row(s)"
            )
        return PreviewResult(preview=valid_rows)

    async def _post_json(self, path: str, **kwargs: Any) -> Any:
        try:
            async with self._client() as client:
                response = await client.post(path, **kwargs)
                response.raise_for_status()
                return response.json()

        except httpx.TimeoutException as e:
            logger.error(f"Request to {path} timed out: {e}")
            raise TransportError(f"Request timed out after {self.timeout}s") from e

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error(f"Request to {path} failed with HTTP {status_code}")
            raise TransportError(
                _error_detail(e.response) or f"Backend error: {status_code}",
                status_code=status_code,
            ) from e

        except httpx.HTTPError as e:
            logger.error(f"Cannot reach import backend at {self.base_url}: {e}")
            raise TransportError(f"Cannot reach import backend: {e}") from e

        except ValueError as e:
            logger.error(f"Response of {path} is not valid JSON: {e}")
            raise TransportError(f"Invalid JSON response from {path}") from e

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    async def upload(
        self,
        file: SelectedFile,
        sheet_name: str,
        on_progress: Optional[TransferProgressCallback] = None,
    ) -> ImportResponse:
        """
        Upload ``file`` and import ``sheet_name``.

        The multipart body is encoded up front so its total size is known,
        then streamed in ``chunk_size`` pieces; ``on_progress(sent, total)``
        is called after each piece is handed to the transport.

        Returns:
            ImportResult on 2xx (count defaults to 0), ImportFailure otherwise
            (including connection errors and timeouts)
        """
        try:
            async with self._client() as client:
                encoded = client.build_request(
                    "POST",
                    IMPORT_PATH,
                    files=self._files(file),
                    data={"sheet_name": sheet_name},
                )
                body = encoded.read()
                headers = {
                    "Content-Type": encoded.headers["Content-Type"],
                    "Content-Length": str(len(body)),
                }
                logger.info(
                    f"Uploading {file.name}/{sheet_name}: {len(body)} bytes "
                    f"to {self.base_url}{IMPORT_PATH}"
                )
                response = await client.post(
                    IMPORT_PATH,
                    content=self._stream_body(body, on_progress),
                    headers=headers,
                )

        except httpx.TimeoutException as e:
            logger.error(f"Upload of {file.name} timed out: {e}")
            return ImportFailure()

        except httpx.HTTPError as e:
            logger.error(f"Upload of {file.name} failed: {e}")
            return ImportFailure()

        if response.is_success:
            count = _import_count(response)
            logger.info(f"Import of {file.name}/{sheet_name} succeeded: {count} records")
            return ImportResult(count=count)

        detail = _error_detail(response)
        logger.error(
            f"Import of {file.name}/{sheet_name} failed with HTTP "
            f"{response.status_code}: {detail or 'no detail'}"
        )
        return ImportFailure(detail=detail, status_code=response.status_code)

    async def _stream_body(
        self, body: bytes, on_progress: Optional[TransferProgressCallback]
    ) -> AsyncIterator[bytes]:
        total = len(body)
        sent = 0
        for offset in range(0, total, self.chunk_size):
            chunk = body[offset : offset + self.chunk_size]
            yield chunk
            sent += len(chunk)
            if on_progress is not None:
                on_progress(sent, total)


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _error_detail(response: httpx.Response) -> Optional[str]:
    """Non-blank string ``detail`` of an error body, else None."""
    data = _json_or_none(response)
    if isinstance(data, dict):
        detail = data.get("detail")
        if isinstance(detail, str) and detail.strip():
            return detail
    return None


def _import_count(response: httpx.Response) -> int:
    """``count`` of a success body; missing, non-integer or negative -> 0."""
    data = _json_or_none(response)
    count = data.get("count") if isinstance(data, dict) else None
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        if count is not None:
            logger.warning(f"Ignoring invalid import count: {count!r}")
        return 0
    return count
