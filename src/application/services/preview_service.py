"""
Preview Service

Fetches a bounded row sample for a chosen sheet and derives column headers.

Responsibility:
    - Enforce that both a file and a sheet are selected
    - Call the preview endpoint
    - Build the PreviewDataset (headers from the first row only)

Architecture Notes:
    - Part of Application Layer (Services)
    - Read-only and informational; the duplicate warning is evaluated by the
      orchestrator before calling this service
"""

import logging
from typing import Optional

from src.application.ports.catalog_import_client import CatalogImportClientProtocol
from src.domain.catalog_import.constants import MSG_SHEET_REQUIRED
from src.domain.catalog_import.value_objects import PreviewDataset, SelectedFile
from src.domain.shared.exceptions import SelectionError

logger = logging.getLogger(__name__)


class PreviewService:
    """
    Preview of one sheet of the selected file.

    Calling preview() twice with the same (file, sheet) against an unchanged
    backend yields equal PreviewDataset values.

    Examples:
        >>> service = PreviewService(client)
        >>> dataset = await service.preview(selected_file, "Sheet1")
        >>> dataset.columns
        ('SKU', 'Name', 'Price')
    """

    def __init__(self, client: CatalogImportClientProtocol) -> None:
        self.client = client

    async def preview(
        self, file: Optional[SelectedFile], sheet_name: Optional[str]
    ) -> PreviewDataset:
        """
        Fetch and shape the preview.

        Raises:
            SelectionError: File or sheet missing
            TransportError: Preview request failed
        """
        if file is None or not sheet_name:
            raise SelectionError(MSG_SHEET_REQUIRED)

        result = await self.client.preview(file, sheet_name)
        dataset = PreviewDataset.from_rows(result.preview)
        logger.info(
            f"Preview of {file.name}/{sheet_name}: "
            f"{len(dataset)} row(s), {len(dataset.columns)} column(s)"
        )
        return dataset
