"""
History Store

Append-only, persisted record of past import attempts.

Responsibility:
    - Single source of truth for the in-memory, most-recent-first history
    - Persist the full ordered sequence on every append (full replace)
    - Erase the persisted slot on clear
    - Restore from the slot on start, failing closed on corrupted data
    - Answer duplicate queries

Architecture Notes:
    - Part of Application Layer (Services)
    - Persistence goes through HistorySlotProtocol (JSON file or Redis)
    - Persistence is a side effect of append/clear, never of reads
    - Advisory local log only: not a source of truth for server-side imports
"""

import json
import logging
from typing import Iterator, Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from src.domain.catalog_import.entities import HistoryEntry, ImportOutcome
from src.domain.catalog_import.repositories import HistorySlotProtocol

logger = logging.getLogger(__name__)

_HISTORY_ADAPTER = TypeAdapter(list[HistoryEntry])


class HistoryStore:
    """
    Most-recent-first list of HistoryEntry backed by a persisted slot.

    Business Rules:
        - append() inserts at the head and rewrites the whole slot
        - is_duplicate() only considers SUCCESS entries with an exact
          (file_name, sheet_name) match; ERROR entries never count
        - clear() empties memory and removes the slot (the interactive
          confirmation is asked by the caller, see UploadOrchestrator)
        - load() never raises: unreadable or malformed data yields []

    Examples:
        >>> store = HistoryStore(JsonFileHistorySlot(path))
        >>> store.load()
        []
        >>> store.append(HistoryEntry.success("catalog.xlsx", "Sheet1", 42))
        >>> store.is_duplicate("catalog.xlsx", "Sheet1")
        True
    """

    def __init__(self, slot: HistorySlotProtocol) -> None:
        self.slot = slot
        self._entries: list[HistoryEntry] = []

    @property
    def entries(self) -> tuple[HistoryEntry, ...]:
        """Snapshot of the history, most recent first."""
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(tuple(self._entries))

    def load(self) -> list[HistoryEntry]:
        """
        Restore the history from the persisted slot.

        Error Handling:
            - Slot read failure: log warning, empty history
            - Invalid JSON or schema mismatch: log warning, empty history
            - The slot itself is left untouched (the next append overwrites it)

        Returns:
            The restored entries (most recent first)
        """
        self._entries = self._read_slot()
        logger.info(f"Import history loaded: {len(self._entries)} entries")
        return list(self._entries)

    def _read_slot(self) -> list[HistoryEntry]:
        try:
            document = self.slot.read()
        except Exception as e:
            logger.warning(f"Cannot read import history, starting empty: {e}")
            return []

        if not document:
            return []

        try:
            return _HISTORY_ADAPTER.validate_json(document)
        except PydanticValidationError as e:
            logger.warning(
                f"Persisted import history is malformed, starting empty "
                f"({e.error_count()} error(s))"
            )
            return []

    def append(self, entry: HistoryEntry) -> None:
        """
        Insert ``entry`` at the head and persist the full sequence.

        Raises:
            HistoryPersistenceError: If the slot cannot be written. The entry
                stays in memory so the current session remains consistent.
        """
        self._entries.insert(0, entry)
        logger.info(
            f"History entry added: {entry.file_name}/{entry.sheet_name} "
            f"{entry.outcome.value} ({entry.records_imported} records)"
        )
        self._persist()

    def clear(self) -> None:
        """
        Erase the persisted slot, then empty the in-memory history.

        Raises:
            HistoryPersistenceError: If the slot cannot be removed. The
                entries are kept so memory still matches storage.
        """
        self.slot.remove()
        self._entries = []
        logger.info("Import history cleared")

    def is_duplicate(self, file_name: str, sheet_name: str) -> bool:
        """True iff a SUCCESS entry exists for exactly (file_name, sheet_name)."""
        return self.last_success(file_name, sheet_name) is not None

    def last_success(
        self, file_name: str, sheet_name: str
    ) -> Optional[HistoryEntry]:
        """Most recent successful import of (file_name, sheet_name), if any."""
        for entry in self._entries:
            if entry.outcome == ImportOutcome.SUCCESS and entry.matches(
                file_name, sheet_name
            ):
                return entry
        return None

    def _persist(self) -> None:
        document = json.dumps([entry.to_storage() for entry in self._entries])
        self.slot.write(document)
