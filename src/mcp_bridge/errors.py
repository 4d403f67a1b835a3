"""
Translate noisy SDK tracebacks into a single `BridgeError`, while keeping the
original exception around for full tracebacks.
"""

from __future__ import annotations

import logging
from typing import Final, Optional, Type

import openai
from mcp.shared.exceptions import McpError

__all__: tuple[str, ...] = ("BridgeError", "classify_error")

class BridgeError(RuntimeError):
    """Public bridge-level exception.

    Attributes:
        original_exc: The underlying SDK exception, if any.
    """

    original_exc: Optional[Exception]

    def __init__(self, message: str, original_exc: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.original_exc = original_exc
        self.__cause__ = original_exc


RATE_LIMIT_ERRORS: Final[tuple[Type[Exception], ...]] = (openai.RateLimitError,)

CONN_ERRORS: Final[tuple[Type[Exception], ...]] = (
    openai.APIConnectionError,
    TimeoutError,
    ConnectionError,
)

API_ERRORS: Final[tuple[Type[Exception], ...]] = (openai.APIError,)

TOOL_ERRORS: Final[tuple[Type[Exception], ...]] = (McpError,)

def classify_error(
    exc: Exception,
    logger: Optional[logging.Logger] = None,
) -> BridgeError:
    """Wrap an SDK exception in BridgeError with a short, readable message."""
    log = logger or logging.getLogger("mcp_bridge.errors")

    if isinstance(exc, BridgeError):
        return exc

    # Order matters: the openai connection and rate limit errors subclass APIError.
    if isinstance(exc, RATE_LIMIT_ERRORS):
        msg = "Rate-limit exceeded, please retry later"
    elif isinstance(exc, CONN_ERRORS):
        msg = "Connection problem, unable to reach the model provider"
    elif isinstance(exc, API_ERRORS):
        status = getattr(exc, "status_code", "unknown")
        msg = f"Provider reported an error ({status})"
    elif isinstance(exc, TOOL_ERRORS):
        msg = "Tool server reported an error"
    else:
        msg = exc.__class__.__name__

    log.error("%s: %s", msg, exc)
    return BridgeError(f"{msg}: {exc}", exc)
