from __future__ import annotations

from typing import Iterable, Iterator

from mcp_bridge.response import ChatResponse
from mcp_bridge.types import ChatMessage

__all__ = ["Conversation"]


class Conversation:
    """Append-only log of user and assistant turns."""

    def __init__(self) -> None:
        self._messages: list[ChatMessage] = []

    @property
    def messages(self) -> list[ChatMessage]:
        """A copy of the turns so far."""
        return list(self._messages)

    def add_user(self, text: str) -> ChatMessage:
        message: ChatMessage = {"role": "user", "content": text}
        self._messages.append(message)
        return message

    def add_updates(self, updates: Iterable[ChatResponse]) -> ChatMessage:
        """Join streamed fragments into one assistant turn and append it."""
        message: ChatMessage = {
            "role": "assistant",
            "content": "".join(u.content for u in updates),
        }
        self._messages.append(message)
        return message

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[ChatMessage]:
        return iter(list(self._messages))
