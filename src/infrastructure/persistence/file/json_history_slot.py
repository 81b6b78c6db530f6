"""
JSON File History Slot

Local-file implementation of HistorySlotProtocol.

Responsibility:
    - Hold the serialized history in a single JSON file on the operator's
      machine (the local equivalent of a browser storage slot)
    - Atomic writes (write to .tmp, then rename)
    - Remove the file on clear

Architecture Notes:
    - Infrastructure Layer (file system operations)
    - Configuration from environment (HISTORY_FILE)
"""

import logging
import os
from pathlib import Path
from typing import Optional

from src.domain.catalog_import.constants import HISTORY_STORAGE_KEY
from src.domain.shared.exceptions import HistoryPersistenceError

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_DIR = Path.home() / ".catalog_importer"


class JsonFileHistorySlot:
    """
    History slot stored as ``<dir>/excel_upload_history.json``.

    Examples:
        >>> slot = JsonFileHistorySlot(Path("/tmp/history.json"))
        >>> slot.write('[]')
        >>> slot.read()
        '[]'
        >>> slot.remove()
        >>> slot.read() is None
        True
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        """
        Args:
            path: History file path (default from env: HISTORY_FILE)
        """
        env_path = os.getenv("HISTORY_FILE")
        self.path = Path(
            path or env_path or DEFAULT_HISTORY_DIR / f"{HISTORY_STORAGE_KEY}.json"
        ).expanduser()

    def read(self) -> Optional[str]:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding="utf-8")

    def write(self, document: str) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(document, encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as e:
            logger.error(f"Failed to write history file {self.path}: {e}")
            raise HistoryPersistenceError(
                f"Cannot write history file {self.path}: {e}"
            ) from e
        logger.debug(f"History written to {self.path} ({len(document)} chars)")

    def remove(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Failed to remove history file {self.path}: {e}")
            raise HistoryPersistenceError(
                f"Cannot remove history file {self.path}: {e}"
            ) from e
        logger.info(f"History file removed: {self.path}")
