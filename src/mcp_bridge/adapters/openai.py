"""OpenAI adapter for pure request/response transformations."""

from __future__ import annotations

import json
from typing import Any, Sequence

from openai.types.chat import ChatCompletion, ChatCompletionChunk

from mcp_bridge.response import ChatResponse
from mcp_bridge.types import ChatMessage, ToolCallRequest, ToolCallResult


def parse_arguments(raw_args: Any) -> dict[str, Any]:
    """Decode tool-call arguments; malformed or non-object JSON becomes ``{}``."""
    if isinstance(raw_args, dict):
        return raw_args
    if isinstance(raw_args, str) and raw_args.strip():
        try:
            decoded = json.loads(raw_args)
        except json.JSONDecodeError:
            return {}
        if isinstance(decoded, dict):
            return decoded
    return {}


class OpenAIRequestAdapter:
    """Adapter for converting between generic chat messages and OpenAI format."""

    def to_provider(
        self, messages: Sequence[ChatMessage], params: dict[str, Any]
    ) -> dict[str, Any]:
        """Convert generic messages and normalized params to an OpenAI request."""
        openai_messages: list[dict[str, Any]] = []
        for msg in messages:
            openai_msg: dict[str, Any] = {"role": msg["role"]}

            if msg.get("content") is not None:
                openai_msg["content"] = msg["content"]

            if msg.get("tool_calls"):
                openai_msg["tool_calls"] = [
                    _encode_tool_call(tc) for tc in msg["tool_calls"]
                ]
                # content must be explicitly null next to tool_calls
                openai_msg.setdefault("content", None)

            if msg.get("tool_call_id"):
                openai_msg["tool_call_id"] = msg["tool_call_id"]

            if msg.get("name"):
                openai_msg["name"] = msg["name"]

            if "content" not in openai_msg:
                openai_msg["content"] = ""

            openai_messages.append(openai_msg)

        base_params = dict(params)
        base_params.pop("stream", None)
        extras = base_params.pop("extra", {})
        for k, v in extras.items():
            base_params.setdefault(k, v)

        # An empty tools list is rejected by the API.
        if not base_params.get("tools"):
            base_params.pop("tools", None)
            base_params.pop("tool_choice", None)
            base_params.pop("parallel_tool_calls", None)

        return {"messages": openai_messages, **base_params}

    def from_provider(self, raw: ChatCompletion) -> ChatResponse:
        """Convert an OpenAI completion to a ChatResponse."""
        content = ""
        tool_calls = None

        if raw.choices and raw.choices[0].message:
            message = raw.choices[0].message
            content = message.content or ""

            if message.tool_calls:
                tool_calls = [
                    ToolCallRequest(
                        id=tc.id,
                        name=tc.function.name,
                        arguments=parse_arguments(tc.function.arguments),
                    )
                    for tc in message.tool_calls
                    if getattr(tc, "function", None) is not None
                ]

        return ChatResponse(content=content, tool_calls=tool_calls or None, raw=raw)

    def stream_text(self, raw_chunk: ChatCompletionChunk) -> ChatResponse:
        """Extract the text fragment of a streaming chunk."""
        content = ""
        if raw_chunk.choices and raw_chunk.choices[0].delta:
            content = raw_chunk.choices[0].delta.content or ""
        return ChatResponse(content=content, raw=raw_chunk)

    def assistant_message_from(self, raw: ChatCompletion) -> ChatMessage:
        """Turn a completion into the assistant turn that must precede tool results."""
        if not raw.choices or not raw.choices[0].message:
            return {"role": "assistant", "content": ""}

        message = raw.choices[0].message
        chat_message: ChatMessage = {"role": "assistant", "content": message.content}
        if message.tool_calls:
            chat_message["tool_calls"] = [
                {
                    "id": tc.id,
                    "type": "function",
                    "function": {
                        "name": tc.function.name,
                        "arguments": tc.function.arguments,
                    },
                }
                for tc in message.tool_calls
                if getattr(tc, "function", None) is not None
            ]
        elif chat_message["content"] is None:
            chat_message["content"] = ""
        return chat_message

    def tool_result_message(self, result: ToolCallResult) -> ChatMessage:
        return {
            "role": "tool",
            "tool_call_id": result.id,
            "content": result.content
            if isinstance(result.content, str)
            else json.dumps(result.content, default=str),
        }


def _encode_tool_call(tool_call: dict[str, Any]) -> dict[str, Any]:
    function = dict(tool_call.get("function") or {})
    if not isinstance(function.get("arguments"), str):
        function["arguments"] = json.dumps(function.get("arguments") or {})
    return {
        "id": tool_call["id"],
        "type": tool_call.get("type", "function"),
        "function": function,
    }
