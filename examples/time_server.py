"""Ask a model what time it is, using the reference MCP time server.

Requires ``uvx`` and an ``OPENAI_API_KEY`` in your environment (or ``.env``).

Example::

    $ python examples/time_server.py --timezone Europe/Amsterdam
"""

from __future__ import annotations

import argparse
import asyncio
import logging

from mcp_bridge import McpToolClient, Provider, ServerConfig, create_chat_client

logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO, format="%(message)s")

TIME_SERVER = ServerConfig(
    id="time", name="Time", command="uvx", args=("mcp-server-time",)
)


async def ask_time(model: str, timezone: str) -> None:
    async with McpToolClient(TIME_SERVER) as tools:
        functions = await tools.get_functions()
        logger.info("Tools: %s", ", ".join(fn.name for fn in functions))

        async with create_chat_client(Provider.OPENAI, model) as llm:
            question = f"What time is it in {timezone}? Answer in one sentence."
            async for update in llm.stream(question, tools=functions):
                update.raise_for_error()
                print(update.content, end="", flush=True)
            print()


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--model", default="gpt-4o-mini")
    parser.add_argument("--timezone", default="Europe/Amsterdam")
    args = parser.parse_args()

    asyncio.run(ask_time(args.model, args.timezone))
