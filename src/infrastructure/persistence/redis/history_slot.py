"""
Redis History Slot

Redis implementation of HistorySlotProtocol with JSON file fallback.

Responsibility:
    - Store the serialized history under one Redis key
      ("excel_upload_history", from env: HISTORY_STORAGE_KEY)
    - Degrade gracefully: when Redis is unavailable, read from / write to the
      local JSON file slot and log a warning

Architecture Notes:
    - Infrastructure Layer (external dependency on Redis)
    - Client is resolved lazily so an unavailable Redis does not prevent start
    - No TTL: the history lives until the operator clears it
"""

import logging
import os
from typing import Callable, Optional

from redis import Redis
from redis.exceptions import RedisError

from src.domain.catalog_import.constants import HISTORY_STORAGE_KEY
from src.infrastructure.persistence.file import JsonFileHistorySlot
from src.infrastructure.persistence.redis.connection import get_redis_client

logger = logging.getLogger(__name__)


class RedisHistorySlot:
    """
    History slot stored in Redis.

    Error Recovery:
        - On RedisError: use the fallback JSON file slot
        - remove() clears both Redis and the fallback file, so a cleared
          history cannot reappear from a stale fallback

    Examples:
        >>> slot = RedisHistorySlot()
        >>> slot.write('[{"fileName": "catalog.xlsx", ...}]')
        >>> slot.read()
        '[{"fileName": "catalog.xlsx", ...}]'
    """

    def __init__(
        self,
        key: Optional[str] = None,
        client_factory: Callable[[], Redis] = get_redis_client,
        fallback: Optional[JsonFileHistorySlot] = None,
    ) -> None:
        """
        Args:
            key: Redis key (default from env: HISTORY_STORAGE_KEY)
            client_factory: Returns a connected Redis client
            fallback: Slot used when Redis is unavailable
        """
        self.key = key or os.getenv("HISTORY_STORAGE_KEY", HISTORY_STORAGE_KEY)
        self._client_factory = client_factory
        self._client: Optional[Redis] = None
        self.fallback = fallback or JsonFileHistorySlot()

    @property
    def client(self) -> Redis:
        if self._client is None:
            self._client = self._client_factory()
        return self._client

    def read(self) -> Optional[str]:
        try:
            return self.client.get(self.key)
        except RedisError as e:
            logger.warning(f"Redis error reading history, using fallback file: {e}")
            return self.fallback.read()

    def write(self, document: str) -> None:
        try:
            self.client.set(self.key, document)
        except RedisError as e:
            logger.warning(f"Redis error writing history, using fallback file: {e}")
            self.fallback.write(document)

    def remove(self) -> None:
        try:
            self.client.delete(self.key)
        except RedisError as e:
            logger.warning(f"Redis error removing history: {e}")
        self.fallback.remove()
