"""
History Slot Factory

Selects the history slot backend from configuration.
"""

import logging
import os
from typing import Optional

from src.domain.catalog_import.repositories import HistorySlotProtocol
from src.infrastructure.persistence.file import JsonFileHistorySlot
from src.infrastructure.persistence.redis import RedisHistorySlot

logger = logging.getLogger(__name__)

HISTORY_BACKENDS = ("file", "redis")


def create_history_slot(backend: Optional[str] = None) -> HistorySlotProtocol:
    """
    Build the configured history slot.

    Args:
        backend: "file" or "redis" (default from env: HISTORY_BACKEND or "file")

    Raises:
        ValueError: Unknown backend name
    """
    backend = (backend or os.getenv("HISTORY_BACKEND", "file")).strip().lower()
    if backend == "file":
        return JsonFileHistorySlot()
    if backend == "redis":
        return RedisHistorySlot()
    raise ValueError(
        f"Unknown HISTORY_BACKEND {backend!r}, expected one of {HISTORY_BACKENDS}"
    )
