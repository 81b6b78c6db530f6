"""
Persistence Infrastructure Module

History slot implementations.

Exports:
    - JsonFileHistorySlot: local JSON file (default)
    - RedisHistorySlot: Redis key with JSON file fallback
    - create_history_slot: backend selection from HISTORY_BACKEND
"""

from .file import JsonFileHistorySlot
from .history_slot_factory import create_history_slot
from .redis import RedisHistorySlot

__all__ = [
    "JsonFileHistorySlot",
    "RedisHistorySlot",
    "create_history_slot",
]
