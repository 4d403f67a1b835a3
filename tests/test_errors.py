import httpx
import openai
from mcp.shared.exceptions import McpError
from mcp.types import ErrorData

from mcp_bridge.errors import BridgeError, classify_error

REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def _status_error(cls, status):
    response = httpx.Response(status, request=REQUEST)
    return cls("boom", response=response, body=None)


def test_rate_limit():
    err = classify_error(_status_error(openai.RateLimitError, 429))
    assert str(err).startswith("Rate-limit exceeded")


def test_authentication_is_an_api_error():
    exc = _status_error(openai.AuthenticationError, 401)
    err = classify_error(exc)

    assert "Provider reported an error (401)" in str(err)
    assert err.original_exc is exc
    assert err.__cause__ is exc


def test_connection():
    err = classify_error(openai.APIConnectionError(request=REQUEST))
    assert str(err).startswith("Connection problem")


def test_mcp_error():
    err = classify_error(McpError(ErrorData(code=-32601, message="Method not found")))
    assert str(err).startswith("Tool server reported an error")


def test_unknown_error_is_named_by_class():
    err = classify_error(KeyError("x"))
    assert str(err).startswith("KeyError")


def test_bridge_errors_pass_through():
    original = BridgeError("already wrapped")
    assert classify_error(original) is original
