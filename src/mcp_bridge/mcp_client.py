"""
Tool-provider client: talks to one MCP server launched as a subprocess.

Transport framing, the initialize handshake and schema discovery are all
handled by the ``mcp`` SDK. This module only sequences the calls and turns
the server's tools into ``ToolFunction`` objects a chat client can use.
"""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack
from typing import Any, Mapping, Optional

from mcp import ClientSession
from mcp.client.stdio import stdio_client
from mcp.types import CallToolResult, Tool

from mcp_bridge.config import ClientInfo, ServerConfig
from mcp_bridge.functions import ToolFunction

__all__ = ["McpToolClient", "first_text", "result_text"]


def first_text(result: CallToolResult) -> str:
    """Return the text of the first ``text`` content item of *result*."""
    for item in result.content:
        if item.type == "text":
            return item.text
    raise ValueError("Tool result contains no text content")


def result_text(result: CallToolResult) -> str:
    """Flatten every content item of *result* into one string for the model."""
    parts: list[str] = []
    for item in result.content:
        if item.type == "text":
            parts.append(item.text)
        else:
            parts.append(f"[{item.type} content]")
    return "\n".join(parts)


class McpToolClient:
    """
    Async client for a single stdio MCP server.

    Use as ``async with McpToolClient(server) as tools: ...`` or call
    ``connect()`` / ``aclose()`` explicitly.
    """

    def __init__(
        self,
        server: ServerConfig,
        client_info: Optional[ClientInfo] = None,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.server = server
        self.client_info = client_info or ClientInfo()
        self.logger = logger or logging.getLogger(__name__)
        self.name = server.name
        self._stack: Optional[AsyncExitStack] = None
        self._session: Optional[ClientSession] = None

    @property
    def session(self) -> ClientSession:
        if self._session is None:
            raise RuntimeError(f"{self.name}: not connected, call connect() first")
        return self._session

    @property
    def connected(self) -> bool:
        return self._session is not None

    async def connect(self) -> None:
        if self._session is not None:
            return

        stack = AsyncExitStack()
        try:
            self._log(
                f"Launching {self.server.command} {' '.join(self.server.args)}"
            )
            read, write = await stack.enter_async_context(
                stdio_client(self.server.to_parameters())
            )
            session = await stack.enter_async_context(
                ClientSession(
                    read, write, client_info=self.client_info.to_implementation()
                )
            )
            init = await session.initialize()
        except BaseException:
            await stack.aclose()
            raise

        self._log(
            f"Connected to {init.serverInfo.name} {init.serverInfo.version} "
            f"(protocol {init.protocolVersion})"
        )
        self._stack = stack
        self._session = session

    async def list_tools(self) -> list[Tool]:
        """Return every tool the server exposes, following pagination cursors."""
        page = await self.session.list_tools()
        tools = list(page.tools)
        while page.nextCursor:
            page = await self.session.list_tools(cursor=page.nextCursor)
            tools.extend(page.tools)
        self._log(f"Server exposes {len(tools)} tools", logging.DEBUG)
        return tools

    async def call_tool(
        self, name: str, arguments: Optional[Mapping[str, Any]] = None
    ) -> CallToolResult:
        self._log(f"Calling tool {name}", logging.DEBUG)
        result = await self.session.call_tool(name, dict(arguments or {}))
        if result.isError:
            self._log(f"Tool {name} reported an error", logging.WARNING)
        return result

    async def get_functions(self) -> list[ToolFunction]:
        """Expose every server tool as a ``ToolFunction`` bound to this client."""
        return [self._as_function(tool) for tool in await self.list_tools()]

    def _as_function(self, tool: Tool) -> ToolFunction:
        async def invoke(arguments: dict[str, Any]) -> str:
            return result_text(await self.call_tool(tool.name, arguments))

        return ToolFunction(
            name=tool.name,
            description=tool.description or "",
            parameters=dict(tool.inputSchema),
            invoke=invoke,
        )

    def _log(self, message: str, level: int = logging.INFO) -> None:
        self.logger.log(level, f"[{self.name}] {message}")

    # --- lifecycle ---------------------------------------------------------
    async def aclose(self) -> None:
        """Shut down the session and the server process. Safe to call twice."""
        stack, self._stack, self._session = self._stack, None, None
        if stack is not None:
            await stack.aclose()

    async def __aenter__(self) -> "McpToolClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
