"""
Core types for mcp-bridge.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

__all__ = ["ChatMessage", "ToolCallRequest", "ToolCallResult"]


# Type alias for chat messages
ChatMessage = dict[str, Any]


@dataclass(slots=True)
class ToolCallRequest:
    """A function call the model asked the client to run."""

    id: str
    name: str
    arguments: dict[str, Any]


@dataclass(slots=True)
class ToolCallResult:
    """Payload sent back to the model after the function finished running."""

    id: str  # must match the request id
    content: str | dict[str, Any]
