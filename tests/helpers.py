"""Fakes for the tests: real openai/mcp pydantic types, no network and no subprocess."""

from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any, Iterable, Optional
from unittest.mock import AsyncMock

from mcp.types import CallToolResult, ListToolsResult, TextContent, Tool
from openai import AsyncOpenAI
from openai.types.chat import ChatCompletion, ChatCompletionChunk

from mcp_bridge.client import OpenAIChatClient


def make_completion(
    content: Optional[str] = None,
    tool_calls: Optional[list[tuple[str, str, Any]]] = None,
) -> ChatCompletion:
    """Build a ChatCompletion; tool_calls are (id, name, arguments) triples."""
    message: dict[str, Any] = {"role": "assistant", "content": content}
    if tool_calls:
        message["tool_calls"] = [
            {
                "id": call_id,
                "type": "function",
                "function": {
                    "name": name,
                    "arguments": args if isinstance(args, str) else json.dumps(args),
                },
            }
            for call_id, name, args in tool_calls
        ]
    return ChatCompletion.model_validate(
        {
            "id": "cmpl-1",
            "object": "chat.completion",
            "created": 0,
            "model": "gpt-4o-mini",
            "choices": [
                {
                    "index": 0,
                    "finish_reason": "tool_calls" if tool_calls else "stop",
                    "message": message,
                }
            ],
        }
    )


def make_chunk(
    content: Optional[str] = None,
    tool_call: Optional[dict[str, Any]] = None,
    finish_reason: Optional[str] = None,
) -> ChatCompletionChunk:
    delta: dict[str, Any] = {}
    if content is not None:
        delta["content"] = content
    if tool_call is not None:
        delta["tool_calls"] = [tool_call]
    return ChatCompletionChunk.model_validate(
        {
            "id": "chunk-1",
            "object": "chat.completion.chunk",
            "created": 0,
            "model": "gpt-4o-mini",
            "choices": [{"index": 0, "delta": delta, "finish_reason": finish_reason}],
        }
    )


def text_chunks(*fragments: str) -> list[ChatCompletionChunk]:
    return [make_chunk(f) for f in fragments] + [make_chunk(finish_reason="stop")]


async def aiter_list(items: Iterable[Any]):
    for item in items:
        yield item


class FakeCompletions:
    """Stands in for ``AsyncOpenAI().chat.completions``; replays scripted replies."""

    def __init__(self, replies: Iterable[Any]) -> None:
        self.replies = list(replies)
        self.requests: list[dict[str, Any]] = []

    async def create(self, **kwargs: Any) -> Any:
        # snapshot the messages, the client keeps appending to its history
        self.requests.append(
            {**kwargs, "messages": [dict(m) for m in kwargs["messages"]]}
        )
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if kwargs.get("stream"):
            return aiter_list(reply)
        return reply


class FakeSession:
    """Minimal ``mcp.ClientSession`` replacement backed by plain Python callables."""

    def __init__(self, tools: list[Tool], pages: int = 1) -> None:
        self.tools = tools
        self.pages = pages
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.list_requests: list[Optional[str]] = []

    async def list_tools(self, cursor: Optional[str] = None) -> ListToolsResult:
        self.list_requests.append(cursor)
        page = int(cursor) if cursor else 0
        per_page = max(1, -(-len(self.tools) // self.pages))
        chunk = self.tools[page * per_page : (page + 1) * per_page]
        next_cursor = str(page + 1) if (page + 1) * per_page < len(self.tools) else None
        return ListToolsResult(tools=chunk, nextCursor=next_cursor)

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> CallToolResult:
        self.calls.append((name, arguments))
        if name == "echo":
            return CallToolResult(
                content=[TextContent(type="text", text=f"Echo: {arguments['message']}")]
            )
        if name == "add":
            return CallToolResult(
                content=[
                    TextContent(
                        type="text",
                        text=f"The sum of {arguments['a']} and {arguments['b']} is "
                        f"{arguments['a'] + arguments['b']}.",
                    )
                ]
            )
        return CallToolResult(
            content=[TextContent(type="text", text=f"Unknown tool: {name}")],
            isError=True,
        )


ECHO_TOOL = Tool(
    name="echo",
    description="Echoes back the input",
    inputSchema={
        "type": "object",
        "properties": {"message": {"type": "string"}},
        "required": ["message"],
    },
)

ADD_TOOL = Tool(
    name="add",
    description="Adds two numbers",
    inputSchema={
        "type": "object",
        "properties": {"a": {"type": "number"}, "b": {"type": "number"}},
        "required": ["a", "b"],
    },
)


def make_chat_client(
    replies: Iterable[Any], **kwargs: Any
) -> tuple[OpenAIChatClient, FakeCompletions]:
    """An OpenAIChatClient whose HTTP client is replaced by scripted replies."""
    llm = OpenAIChatClient.from_client(
        "gpt-4o-mini", AsyncOpenAI(api_key="sk-test"), **kwargs
    )
    completions = FakeCompletions(replies)
    llm._client = SimpleNamespace(
        chat=SimpleNamespace(completions=completions), close=AsyncMock()
    )
    return llm, completions
