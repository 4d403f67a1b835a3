from __future__ import annotations

import pytest

from helpers import ADD_TOOL, ECHO_TOOL, FakeSession
from mcp_bridge.config import ServerConfig
from mcp_bridge.mcp_client import McpToolClient


@pytest.fixture
def session() -> FakeSession:
    return FakeSession([ECHO_TOOL, ADD_TOOL])


@pytest.fixture
def tool_client(session: FakeSession) -> McpToolClient:
    client = McpToolClient(ServerConfig())
    client._session = session  # already "connected"
    return client
