"""
MCP Bridge - expose the tools of an MCP server to a chat model.
"""

from .client import (
    BaseChatClient,
    OpenAIChatClient,
    GeminiChatClient,
    create_chat_client,
)
from .config import ClientInfo, ServerConfig, Settings
from .conversation import Conversation
from .errors import BridgeError
from .functions import ToolFunction
from .mcp_client import McpToolClient, first_text
from .providers import Provider, get_api_key
from .response import ChatResponse
from .types import ChatMessage, ToolCallRequest, ToolCallResult

__version__ = "0.1.0"

__all__ = [
    "BaseChatClient",
    "OpenAIChatClient",
    "GeminiChatClient",
    "create_chat_client",
    "ClientInfo",
    "ServerConfig",
    "Settings",
    "Conversation",
    "BridgeError",
    "ToolFunction",
    "McpToolClient",
    "first_text",
    "Provider",
    "get_api_key",
    "ChatResponse",
    "ChatMessage",
    "ToolCallRequest",
    "ToolCallResult",
]
