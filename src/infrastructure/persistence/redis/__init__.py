"""
Redis Infrastructure Module

Redis-based history persistence.

Exports:
    - RedisHistorySlot: History slot stored under a Redis key
    - get_redis_client: Get Redis client with connection pooling
    - close_connections: Close all Redis connections
"""

from .connection import close_connections, get_redis_client
from .history_slot import RedisHistorySlot

__all__ = [
    "RedisHistorySlot",
    "get_redis_client",
    "close_connections",
]
