from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from mcp_bridge.types import ToolCallRequest

if TYPE_CHECKING:
    from mcp_bridge.errors import BridgeError


@dataclass
class ChatResponse:
    """A full completion, or a single fragment of a streamed one."""

    content: str
    tool_calls: list[ToolCallRequest] | None = None
    raw: Any = None
    error: Optional["BridgeError"] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error

    def __str__(self) -> str:
        return self.content
