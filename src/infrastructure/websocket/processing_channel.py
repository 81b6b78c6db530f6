"""
WebSocket Processing Channel

websockets implementation of ProcessingChannelProtocol.

Responsibility:
    - Connect to the fixed processing-progress endpoint
    - Decode each inbound message into ProcessingMessage
    - Hand well-formed messages to the callback, log and drop the rest
    - Log connection problems without ever raising them

Architecture Notes:
    - Infrastructure Layer (external dependency on websockets)
    - open() starts a background asyncio task and returns immediately, so the
      upload request is issued while the channel connects
    - One instance per upload attempt; no reuse and no reconnection
    - Configuration from environment (PROCESSING_CHANNEL_URL,
      PROCESSING_CHANNEL_OPEN_TIMEOUT)
"""

import asyncio
import logging
import os
from typing import Optional, Union

import websockets
from pydantic import ValidationError as PydanticValidationError
from websockets.exceptions import WebSocketException

from src.application.ports.processing_channel import ProcessingMessageCallback
from src.domain.catalog_import.value_objects import ProcessingMessage
from src.domain.shared.exceptions import ChannelError

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL_URL = "ws://localhost:8000/excel-progress"


class WebSocketProcessingChannel:
    """
    Push connection delivering {"step": str, "progress": number} messages.

    Error Handling:
        - Connect failure, handshake rejection, abnormal close: logged as
          ChannelError at WARNING, the task ends quietly
        - Undecodable message: logged at WARNING and discarded
        - The upload outcome never depends on this channel

    Examples:
        >>> channel = WebSocketProcessingChannel()
        >>> await channel.open(lambda message: print(message.step, message.progress))
        >>> ...  # upload runs
        >>> await channel.close()
    """

    def __init__(
        self, url: Optional[str] = None, open_timeout: Optional[float] = None
    ) -> None:
        """
        Initialize the channel (does not connect).

        Args:
            url: Endpoint URL (default from env: PROCESSING_CHANNEL_URL)
            open_timeout: Handshake timeout in seconds
                (default from env: PROCESSING_CHANNEL_OPEN_TIMEOUT)
        """
        self.url = url or os.getenv("PROCESSING_CHANNEL_URL", DEFAULT_CHANNEL_URL)
        self.open_timeout = open_timeout or float(
            os.getenv("PROCESSING_CHANNEL_OPEN_TIMEOUT", "10")
        )
        self._task: Optional[asyncio.Task] = None
        self.connected = asyncio.Event()
        self.messages_received = 0
        self.messages_discarded = 0

    async def open(self, on_message: ProcessingMessageCallback) -> None:
        """Start listening in the background. Can be called once per instance."""
        if self._task is not None:
            raise RuntimeError("Processing channel already opened; create a new one")
        self._task = asyncio.create_task(
            self._run(on_message), name="processing-channel"
        )

    async def close(self) -> None:
        """Stop listening and release the connection (idempotent)."""
        task = self._task
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info(
            f"Processing channel closed ({self.messages_received} received, "
            f"{self.messages_discarded} discarded)"
        )

    async def _run(self, on_message: ProcessingMessageCallback) -> None:
        try:
            await self._listen(on_message)
        except ChannelError as e:
            logger.warning(f"Processing channel unavailable: {e.message}")

    async def _listen(self, on_message: ProcessingMessageCallback) -> None:
        try:
            async with websockets.connect(
                self.url, open_timeout=self.open_timeout
            ) as connection:
                self.connected.set()
                logger.info(f"Processing channel connected: {self.url}")
                async for raw in connection:
                    self.dispatch(raw, on_message)
            logger.info("Processing channel closed by server")

        except (WebSocketException, OSError, asyncio.TimeoutError) as e:
            raise ChannelError(f"{self.url}: {e.__class__.__name__}: {e}") from e

    def dispatch(
        self, raw: Union[str, bytes], on_message: ProcessingMessageCallback
    ) -> Optional[ProcessingMessage]:
        """
        Decode one raw message and invoke the callback if it is well-formed.

        Returns:
            The decoded message, or None if it was discarded
        """
        try:
            message = ProcessingMessage.model_validate_json(raw)
        except PydanticValidationError:
            self.messages_discarded += 1
            logger.warning(f"Discarding invalid processing message: {raw!r:.200}")
            return None

        self.messages_received += 1
        on_message(message)
        return message
