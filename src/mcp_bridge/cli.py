"""
Console driver: list and call one MCP tool, then chat with every tool
available to the model.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from typing import Callable, Optional, Sequence, TextIO

from mcp_bridge.client import BaseChatClient, create_chat_client
from mcp_bridge.config import ServerConfig, Settings
from mcp_bridge.conversation import Conversation
from mcp_bridge.functions import ToolFunction
from mcp_bridge.mcp_client import McpToolClient, first_text
from mcp_bridge.providers import Provider
from mcp_bridge.response import ChatResponse

logger = logging.getLogger(__name__)

PROMPT = "Q: "


async def run(
    settings: Settings,
    *,
    input_fn: Callable[[], str] = input,
    out: Optional[TextIO] = None,
    tool_client: Optional[McpToolClient] = None,
    chat_client: Optional[BaseChatClient] = None,
) -> Conversation:
    """
    Run one full session and return the conversation once input ends.

    1) print every tool of the server
    2) call the demo tool and print its text
    3) send the demo prompt with all tools available and print the answer
    4) loop: read a line, stream the answer, remember both turns
    """
    out = out or sys.stdout
    tools = tool_client or McpToolClient(settings.server, settings.client_info)

    async with tools:
        for tool in await tools.list_tools():
            print(f"{tool.name} ({tool.description or ''})", file=out)

        # The demo tool normally gets called by the model; call it directly once.
        result = await tools.call_tool(settings.demo_tool, settings.demo_arguments)
        print(first_text(result), file=out)

        functions = await tools.get_functions()
        chat = chat_client or create_chat_client(
            settings.provider, settings.model, max_iterations=settings.max_iterations
        )
        async with chat:
            response = await chat.chat(settings.demo_prompt, tools=functions)
            response.raise_for_error()
            print(response, file=out)

            conversation = Conversation()
            await chat_loop(chat, functions, conversation, input_fn=input_fn, out=out)
            return conversation


async def chat_loop(
    chat: BaseChatClient,
    functions: Sequence[ToolFunction],
    conversation: Conversation,
    *,
    input_fn: Callable[[], str] = input,
    out: TextIO,
) -> None:
    """Read questions until end of input, streaming each answer to *out*."""
    while True:
        out.write(PROMPT)
        out.flush()
        try:
            line = input_fn()
        except EOFError:
            out.write("\n")
            logger.info("Input closed, ending conversation after %d turns", len(conversation))
            return
        if not line.strip():
            continue

        conversation.add_user(line)
        updates: list[ChatResponse] = []
        async for update in chat.stream(conversation, tools=functions):
            update.raise_for_error()
            out.write(update.content)
            out.flush()
            updates.append(update)
        out.write("\n")

        conversation.add_updates(updates)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcp-bridge",
        description="Chat with a model that can call the tools of an MCP server.",
    )
    parser.add_argument(
        "--provider",
        choices=[p.value for p in Provider],
        default=None,
        help="chat provider (default: openai)",
    )
    parser.add_argument("--model", default=None, help="model name (default: gpt-4o-mini)")
    parser.add_argument(
        "--server-command",
        default=None,
        help='tool server launch command, e.g. "npx -y @modelcontextprotocol/server-everything"',
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings.from_env().with_overrides(
        provider=Provider(args.provider) if args.provider else None,
        model=args.model,
        server=ServerConfig.from_command_line(args.server_command)
        if args.server_command
        else None,
        log_level=args.log_level,
    )

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # SIGINT must break out of a blocking input() at the prompt; the asyncio
    # runner keeps a non-default handler in place.
    previous = signal.signal(signal.SIGINT, _raise_interrupt)
    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        return 130
    finally:
        signal.signal(signal.SIGINT, previous)
    return 0


def _raise_interrupt(signum, frame) -> None:
    raise KeyboardInterrupt
