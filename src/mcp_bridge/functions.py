"""
Callable actions handed to a chat client.

A ``ToolFunction`` pairs the JSON schema the model sees with the coroutine
that runs when the model calls it.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable

__all__ = ["ToolFunction", "index_functions"]

Invoker = Callable[[dict[str, Any]], Awaitable[Any]]


@dataclass(slots=True)
class ToolFunction:
    name: str
    description: str
    invoke: Invoker
    parameters: dict[str, Any] = field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )

    def to_openai(self) -> dict[str, Any]:
        """OpenAI ``tools`` entry for this function."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

    async def __call__(self, arguments: dict[str, Any]) -> str:
        result = await self.invoke(arguments)
        if isinstance(result, str):
            return result
        return json.dumps(result, default=str)


def index_functions(functions: Iterable[ToolFunction] | None) -> dict[str, ToolFunction]:
    """Map function names to functions, rejecting duplicates."""
    index: dict[str, ToolFunction] = {}
    for fn in functions or ():
        if fn.name in index:
            raise ValueError(f"Duplicate function name: {fn.name}")
        index[fn.name] = fn
    return index
