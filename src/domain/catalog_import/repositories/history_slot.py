"""
HistorySlot Repository Interface

Contract for the single named slot that persists the import history.

Architecture Notes:
    - Protocol-based interface (structural typing)
    - Domain defines, Infrastructure implements (JSON file, Redis)
    - The slot stores an opaque JSON document; (de)serialization belongs to
      HistoryStore in the Application Layer
"""

from typing import Optional, Protocol


class HistorySlotProtocol(Protocol):
    """
    Key-value slot holding the serialized history.

    Implementations:
        - JsonFileHistorySlot: local JSON file (default)
        - RedisHistorySlot: Redis key with JSON file fallback

    Error contract:
        - read() may raise; HistoryStore treats any failure as empty history
        - write() / remove() raise HistoryPersistenceError on failure
    """

    def read(self) -> Optional[str]:
        """Return the stored document, or None when the slot is empty."""
        ...

    def write(self, document: str) -> None:
        """Overwrite the slot with ``document``."""
        ...

    def remove(self) -> None:
        """Erase the slot. Removing an empty slot is a no-op."""
        ...
