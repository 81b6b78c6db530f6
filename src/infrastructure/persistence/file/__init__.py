"""
File-based persistence.

Exports:
    - JsonFileHistorySlot: history slot stored in a local JSON file
"""

from .json_history_slot import JsonFileHistorySlot

__all__ = ["JsonFileHistorySlot"]
