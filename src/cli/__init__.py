"""
CLI Layer - Terminal Front End

Exports:
    - main: ``catalog-import`` entry point
    - build_orchestrator: composition root (wires infrastructure into services)
    - ConsoleConfirmationPrompt: y/n confirmation read from the terminal
"""

from .dependencies import build_orchestrator
from .main import main
from .prompts import ConsoleConfirmationPrompt

__all__ = [
    "main",
    "build_orchestrator",
    "ConsoleConfirmationPrompt",
]
