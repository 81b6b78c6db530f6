"""
Shared Domain Module

Shared domain concepts used across the catalog import subdomain.

This module exports:
    - DomainException: Base exception for all domain errors
    - The importer error taxonomy (validation, selection, transport, channel)
"""

from .exceptions import (
    ChannelError,
    DomainException,
    FileSizeExceededError,
    HistoryPersistenceError,
    SelectionError,
    TransportError,
    UploadInProgressError,
    ValidationError,
)

__all__ = [
    "DomainException",
    "ValidationError",
    "FileSizeExceededError",
    "SelectionError",
    "TransportError",
    "ChannelError",
    "UploadInProgressError",
    "HistoryPersistenceError",
]
