"""
Console Confirmation Prompt

Terminal implementation of ConfirmationPromptProtocol.
"""

import asyncio
import logging
from typing import Callable

logger = logging.getLogger(__name__)

YES_ANSWERS = ("y", "yes")


class ConsoleConfirmationPrompt:
    """
    Ask a y/N question on the terminal.

    The blocking ``input()`` call runs in a worker thread so the event loop
    keeps serving the orchestrator while the operator decides. An empty
    answer, end of input, or anything other than y/yes means "no".

    Args:
        assume_yes: Confirm every question without asking (``--yes``)
        input_func: Line reader, ``input`` by default
        output: Line writer for auto-confirmed questions, ``print`` by default
    """

    def __init__(
        self,
        assume_yes: bool = False,
        input_func: Callable[[str], str] = input,
        output: Callable[[str], None] = print,
    ) -> None:
        self.assume_yes = assume_yes
        self._input = input_func
        self._output = output

    async def confirm(self, message: str) -> bool:
        if self.assume_yes:
            self._output(f"{message} [auto-confirmed]")
            return True

        try:
            answer = await asyncio.to_thread(self._input, f"{message} [y/N] ")
        except EOFError:
            logger.info("No answer on stdin, treating confirmation as declined")
            return False
        return answer.strip().lower() in YES_ANSWERS
