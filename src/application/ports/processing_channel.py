"""
Processing Channel Port

Contract of the push connection that reports server-side processing steps
while an import runs.
"""

from typing import Callable, Protocol

from src.domain.catalog_import.value_objects import ProcessingMessage

ProcessingMessageCallback = Callable[[ProcessingMessage], None]


class ProcessingChannelProtocol(Protocol):
    """
    One-shot, message-oriented connection to the processing endpoint.

    Contract:
        - open() returns without waiting for the connection; connection
          problems are logged, never raised
        - on_message is called at most once per well-formed message and never
          for malformed ones
        - close() is idempotent and safe when open() never connected
        - An instance is used for a single upload attempt (no reuse, no
          automatic reconnection)
    """

    async def open(self, on_message: ProcessingMessageCallback) -> None:
        ...

    async def close(self) -> None:
        ...


ProcessingChannelFactory = Callable[[], ProcessingChannelProtocol]
