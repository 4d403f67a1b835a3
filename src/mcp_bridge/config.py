"""Runtime settings: tool server launch command, client identity and model."""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass, field, replace
from typing import Any, Final, Mapping, Optional

from dotenv import load_dotenv
from mcp import StdioServerParameters
from mcp.types import Implementation

from mcp_bridge.providers import Provider

__all__ = ["ServerConfig", "ClientInfo", "Settings"]

_ENV_PREFIX: Final[str] = "MCP_BRIDGE_"

DEFAULT_MODEL: Final[str] = "gpt-4o-mini"
DEFAULT_PROMPT: Final[str] = "Hello can you echo Hellow World"


@dataclass(frozen=True)
class ServerConfig:
    """How to launch the tool server process."""

    id: str = "everything"
    name: str = "Everything"
    command: str = "npx"
    args: tuple[str, ...] = ("-y", "@modelcontextprotocol/server-everything")
    env: Optional[Mapping[str, str]] = None

    @classmethod
    def from_command_line(cls, command_line: str, **kwargs: Any) -> "ServerConfig":
        """Build a config from a shell-style string such as ``"uvx mcp-server-time"``."""
        parts = shlex.split(command_line)
        if not parts:
            raise ValueError("Server command line is empty")
        return cls(command=parts[0], args=tuple(parts[1:]), **kwargs)

    def to_parameters(self) -> StdioServerParameters:
        return StdioServerParameters(
            command=self.command,
            args=list(self.args),
            env=dict(self.env) if self.env is not None else None,
        )


@dataclass(frozen=True)
class ClientInfo:
    name: str = "TestClient"
    version: str = "1.0.0"

    def to_implementation(self) -> Implementation:
        return Implementation(name=self.name, version=self.version)


@dataclass(frozen=True)
class Settings:
    """Everything the driver needs to run one session."""

    provider: Provider = Provider.OPENAI
    model: str = DEFAULT_MODEL
    server: ServerConfig = field(default_factory=ServerConfig)
    client_info: ClientInfo = field(default_factory=ClientInfo)
    demo_tool: str = "echo"
    demo_arguments: Mapping[str, Any] = field(
        default_factory=lambda: {"message": "Hello MCP!"}
    )
    demo_prompt: str = DEFAULT_PROMPT
    max_iterations: int = 10
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Read ``MCP_BRIDGE_*`` overrides from the environment (and ``.env``).

        Recognised variables: ``PROVIDER``, ``MODEL``, ``SERVER`` (a shell-style
        command line), ``PROMPT``, ``MAX_ITERATIONS`` and ``LOG_LEVEL``.
        """
        if environ is None:
            load_dotenv()
            environ = os.environ

        def get(name: str) -> Optional[str]:
            value = environ.get(_ENV_PREFIX + name)
            return value if value else None

        settings = cls()
        overrides: dict[str, Any] = {}
        if (provider := get("PROVIDER")) is not None:
            overrides["provider"] = Provider(provider.lower())
        if (model := get("MODEL")) is not None:
            overrides["model"] = model
        if (server := get("SERVER")) is not None:
            overrides["server"] = ServerConfig.from_command_line(server)
        if (prompt := get("PROMPT")) is not None:
            overrides["demo_prompt"] = prompt
        if (max_iterations := get("MAX_ITERATIONS")) is not None:
            overrides["max_iterations"] = int(max_iterations)
        if (log_level := get("LOG_LEVEL")) is not None:
            overrides["log_level"] = log_level.upper()
        return replace(settings, **overrides)

    def with_overrides(self, **overrides: Any) -> "Settings":
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})
