"""
Catalog Import Repository Interfaces.
"""

from src.domain.catalog_import.repositories.history_slot import HistorySlotProtocol

__all__ = ["HistorySlotProtocol"]
