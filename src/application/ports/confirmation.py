"""
Confirmation Prompt Port

Binary yes/no gate shown to the operator (duplicate re-import, history clear).
"""

import asyncio
import logging
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class ConfirmationPromptProtocol(Protocol):
    """Ask the operator a yes/no question; True means confirmed."""

    async def confirm(self, message: str) -> bool:
        ...


class DeferredConfirmation:
    """
    Confirmation resolved from outside the awaiting coroutine.

    The orchestrator awaits ``confirm()`` while in the CONFIRMING state; a
    front end later calls ``resolve(True)`` or ``resolve(False)``. This keeps
    the orchestrator non-blocking while the question is pending.

    Examples:
        >>> prompt = DeferredConfirmation()
        >>> task = asyncio.create_task(orchestrator.start_upload())
        >>> ...  # front end shows prompt.pending_message
        >>> prompt.resolve(True)
    """

    def __init__(self) -> None:
        self._future: Optional[asyncio.Future[bool]] = None
        self.pending_message: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self._future is not None and not self._future.done()

    async def confirm(self, message: str) -> bool:
        if self.is_pending:
            raise RuntimeError("A confirmation is already pending")
        self._future = asyncio.get_running_loop().create_future()
        self.pending_message = message
        logger.debug(f"Waiting for confirmation: {message!r}")
        try:
            return await self._future
        finally:
            self._future = None
            self.pending_message = None

    def resolve(self, confirmed: bool) -> None:
        """Answer the pending question."""
        if not self.is_pending:
            raise RuntimeError("No confirmation is pending")
        self._future.set_result(confirmed)
