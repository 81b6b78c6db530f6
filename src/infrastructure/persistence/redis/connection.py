"""
Redis Connection Pool Management.

Singleton connection pool for the Redis-backed history slot.

Business Rules:
    - Max connections: 10 (REDIS_MAX_CONNECTIONS)
    - Connection timeout: 5s (REDIS_TIMEOUT)
    - Retry attempts: 3 (REDIS_RETRY_ATTEMPTS), exponential backoff 1s, 2s, 4s
    - Decode responses: True (return strings not bytes)

Error Handling:
    - ConnectionError / TimeoutError: logged and retried
    - RedisError: raised after all retries are exhausted; RedisHistorySlot
      catches it and falls back to the JSON file slot
"""

import logging
import os
import threading
import time
from typing import Optional

from redis import ConnectionPool, Redis
from redis.exceptions import ConnectionError, RedisError, TimeoutError

logger = logging.getLogger(__name__)

# Singleton connection pool (thread-safe)
_redis_pool: Optional[ConnectionPool] = None
_pool_lock = threading.Lock()


def get_redis_client(
    host: Optional[str] = None,
    port: Optional[int] = None,
    db: Optional[int] = None,
) -> Redis:
    """
    Get a Redis client backed by the shared connection pool.

    The pool is created on first call (double-checked locking) and the
    connection is verified with PING, retrying with exponential backoff.

    Args:
        host: Redis hostname (default from env: REDIS_HOST or "localhost")
        port: Redis port (default from env: REDIS_PORT or 6379)
        db: Redis database number (default from env: REDIS_DB or 0)

    Returns:
        Redis client instance

    Raises:
        RedisError: If Redis cannot be reached after all retry attempts
    """
    global _redis_pool

    if _redis_pool is None:
        with _pool_lock:
            if _redis_pool is None:
                redis_host = host or os.getenv("REDIS_HOST", "localhost")
                redis_port = port or int(os.getenv("REDIS_PORT", "6379"))
                redis_db = db if db is not None else int(os.getenv("REDIS_DB", "0"))
                max_conn = int(os.getenv("REDIS_MAX_CONNECTIONS", "10"))
                conn_timeout = int(os.getenv("REDIS_TIMEOUT", "5"))

                logger.info(
                    f"Creating Redis connection pool: host={redis_host}, "
                    f"port={redis_port}, db={redis_db}, max_connections={max_conn}"
                )
                _redis_pool = ConnectionPool(
                    host=redis_host,
                    port=redis_port,
                    db=redis_db,
                    max_connections=max_conn,
                    socket_timeout=conn_timeout,
                    socket_connect_timeout=conn_timeout,
                    decode_responses=True,
                )

    client = Redis(connection_pool=_redis_pool)

    retry_attempts = int(os.getenv("REDIS_RETRY_ATTEMPTS", "3"))
    last_error: Optional[Exception] = None

    for attempt in range(retry_attempts):
        try:
            client.ping()
            return client
        except (ConnectionError, TimeoutError) as e:
            last_error = e
            if attempt < retry_attempts - 1:
                delay = 2**attempt
                logger.warning(
                    f"Redis connection failed (attempt {attempt + 1}/{retry_attempts}): "
                    f"{e}. Retrying in {delay}s..."
                )
                time.sleep(delay)

    logger.error(f"Redis connection failed after {retry_attempts} attempts: {last_error}")
    raise RedisError(
        f"Failed to connect to Redis after {retry_attempts} attempts. "
        f"Last error: {last_error}"
    )


def close_connections() -> None:
    """Disconnect the pool and reset the singleton (safe to call repeatedly)."""
    global _redis_pool

    with _pool_lock:
        if _redis_pool is None:
            return
        try:
            _redis_pool.disconnect()
        except RedisError as e:
            logger.error(f"Error closing Redis connection pool: {e}")
        finally:
            _redis_pool = None
            logger.info("Redis connection pool closed")
