"""
Parameter normalization for chat requests.

Standard OpenAI chat-completion keys stay at the top level. Anything else
(``reasoning_effort``, ``verbosity``, ``logit_bias``...) is moved under
``extra`` and forwarded unchanged by the adapter.
"""

from __future__ import annotations

from typing import Any

STANDARD_KEYS = {
    "temperature",
    "max_tokens",
    "top_p",
    "stream",
    "tools",
    "tool_choice",
    "stop",
    "response_format",
    "user",
    "frequency_penalty",
    "presence_penalty",
    "parallel_tool_calls",
    "seed",
}


def normalize_params(params: dict[str, Any] | None) -> dict[str, Any]:
    """
    Normalize a caller-supplied params dict.

    Returns a new dict holding the standard keys plus an ``extra`` dict.
    ``stream`` defaults to False. An ``extra`` dict passed by the caller wins
    over keys moved there automatically.

    >>> normalize_params({"temperature": 0.2, "reasoning_effort": "high"})
    {'temperature': 0.2, 'stream': False, 'extra': {'reasoning_effort': 'high'}}
    """
    if params is None:
        return {"stream": False, "extra": {}}
    if not isinstance(params, dict):
        raise TypeError(f"params must be a dict, got {type(params).__name__}")

    user_extra = params.get("extra") or {}
    if not isinstance(user_extra, dict):
        raise TypeError("params['extra'] must be a dict")

    std: dict[str, Any] = {}
    moved: dict[str, Any] = {}
    for key, value in params.items():
        if key == "extra":
            continue
        if key in STANDARD_KEYS:
            std[key] = value
        else:
            moved[key] = value

    std.setdefault("stream", False)
    std["extra"] = {**moved, **user_extra}
    return std
