"""
Infrastructure Layer - External Dependencies

Implements the Application Layer ports and Domain repository interfaces.

Modules:
    - http: import backend client (httpx)
    - websocket: processing progress channel (websockets)
    - persistence: history slots (JSON file, Redis)

Usage:
    >>> from src.infrastructure import (
    ...     HttpCatalogImportClient,
    ...     WebSocketProcessingChannel,
    ...     create_history_slot,
    ... )
"""

from .http import HttpCatalogImportClient
from .persistence import JsonFileHistorySlot, RedisHistorySlot, create_history_slot
from .websocket import WebSocketProcessingChannel

__all__ = [
    "HttpCatalogImportClient",
    "WebSocketProcessingChannel",
    "JsonFileHistorySlot",
    "RedisHistorySlot",
    "create_history_slot",
]
