"""
Catalog Import Entities.

Available Entities:
    - HistoryEntry: immutable record of one import attempt
    - ImportOutcome: SUCCESS / ERROR
"""

from src.domain.catalog_import.entities.history_entry import (
    HistoryEntry,
    ImportOutcome,
)

__all__ = [
    "HistoryEntry",
    "ImportOutcome",
]
