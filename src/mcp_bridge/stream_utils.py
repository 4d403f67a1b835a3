"""Helpers for streamed OpenAI completions."""

from __future__ import annotations

from typing import Any

from openai.types.chat import ChatCompletionChunk

from mcp_bridge.adapters.openai import parse_arguments
from mcp_bridge.types import ChatMessage, ToolCallRequest

__all__ = ["ToolCallAccumulator"]


class ToolCallAccumulator:
    """
    Collects the pieces of a streamed completion.

    Tool calls arrive as deltas keyed by ``index``: the id and name usually
    come first and the JSON arguments trickle in over later chunks.
    """

    def __init__(self) -> None:
        self.content = ""
        self._calls: list[dict[str, Any]] = []

    def add(self, chunk: ChatCompletionChunk) -> None:
        if not chunk.choices:
            return

        choice = chunk.choices[0]
        delta = choice.delta
        if delta is not None:
            if delta.content:
                self.content += delta.content

            for tc_chunk in delta.tool_calls or ():
                while len(self._calls) <= tc_chunk.index:
                    self._calls.append(
                        {
                            "id": "",
                            "type": "function",
                            "function": {"name": "", "arguments": ""},
                        }
                    )
                agg = self._calls[tc_chunk.index]
                if tc_chunk.id:
                    agg["id"] = tc_chunk.id
                if tc_chunk.function:
                    if tc_chunk.function.name:
                        agg["function"]["name"] += tc_chunk.function.name
                    if tc_chunk.function.arguments:
                        agg["function"]["arguments"] += tc_chunk.function.arguments

    def _complete_calls(self) -> list[dict[str, Any]]:
        return [
            tc for tc in self._calls if tc["id"] and tc["function"]["name"]
        ]

    @property
    def has_tool_calls(self) -> bool:
        return bool(self._complete_calls())

    def tool_calls(self) -> list[ToolCallRequest]:
        return [
            ToolCallRequest(
                id=tc["id"],
                name=tc["function"]["name"],
                arguments=parse_arguments(tc["function"]["arguments"]),
            )
            for tc in self._complete_calls()
        ]

    def assistant_message(self) -> ChatMessage:
        """The assistant turn represented by everything accumulated so far."""
        calls = self._complete_calls()
        if not calls:
            return {"role": "assistant", "content": self.content}
        return {
            "role": "assistant",
            "content": self.content or None,
            "tool_calls": [
                {
                    "id": tc["id"],
                    "type": tc["type"],
                    "function": dict(tc["function"]),
                }
                for tc in calls
            ],
        }
