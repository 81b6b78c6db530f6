"""
WebSocket Infrastructure Module

Exports:
    - WebSocketProcessingChannel: processing progress push connection
"""

from .processing_channel import WebSocketProcessingChannel

__all__ = ["WebSocketProcessingChannel"]
