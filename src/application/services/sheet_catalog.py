"""
Sheet Catalog

Fetches the names of the sheets contained in the selected file.
"""

import logging

from src.application.ports.catalog_import_client import CatalogImportClientProtocol
from src.domain.catalog_import.value_objects import SelectedFile

logger = logging.getLogger(__name__)


class SheetCatalog:
    """
    Single request/response call to the sheet listing endpoint.

    Server order is preserved (no sorting, no de-duplication) and failures are
    not retried: TransportError propagates to the caller.
    """

    def __init__(self, client: CatalogImportClientProtocol) -> None:
        self.client = client

    async def list_sheets(self, file: SelectedFile) -> list[str]:
        result = await self.client.list_sheets(file)
        logger.info(f"Listed {len(result.sheets)} sheet(s) in {file.name}")
        return list(result.sheets)
