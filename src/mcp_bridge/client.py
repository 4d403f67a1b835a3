"""
Chat clients with unified chat() and stream() methods and automatic
function invocation.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import (
    Any,
    AsyncIterator,
    Iterable,
    Optional,
    Self,
    Sequence,
    Union,
)

from openai import AsyncOpenAI
from openai.types.chat import ChatCompletion, ChatCompletionChunk

from mcp_bridge.adapters import OpenAIRequestAdapter
from mcp_bridge.errors import classify_error
from mcp_bridge.functions import ToolFunction, index_functions
from mcp_bridge.params import normalize_params
from mcp_bridge.providers import DEFAULT_GEMINI_BASE_URL, Provider, get_api_key
from mcp_bridge.response import ChatResponse
from mcp_bridge.stream_utils import ToolCallAccumulator
from mcp_bridge.types import ChatMessage, ToolCallRequest, ToolCallResult

DEFAULT_MAX_ITERATIONS = 10

Prompt = Union[str, Iterable[ChatMessage]]


class BaseChatClient(ABC):
    """
    Abstract base class for async chat clients.

    Subclasses only send one request; this class runs the function-invocation
    loop around it. When the model answers with tool calls, each call is run
    through the matching ``ToolFunction``, the results are appended to a
    private copy of the history and the request is sent again. After
    ``max_iterations`` rounds a last request is sent with ``tool_choice="none"``
    so the model has to answer in text.
    """

    def __init__(
        self,
        model: str,
        *,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> None:
        if max_iterations < 0:
            raise ValueError("max_iterations must be >= 0")
        self.model = model
        self.max_iterations = max_iterations
        self.logger = logger or logging.getLogger(__name__)
        self.name = name or self.__class__.__name__

    @abstractmethod
    async def _chat_impl(
        self,
        messages: Sequence[ChatMessage],
        params: dict[str, Any],
    ) -> Any:
        """
        Send one request to the provider.

        Returns the raw completion when ``params["stream"]`` is False and an
        async iterable of raw chunks otherwise.
        """
        ...

    @property
    @abstractmethod
    def adapter(self) -> OpenAIRequestAdapter:
        """Request adapter for this provider."""
        ...

    async def chat(
        self,
        messages: Prompt,
        *,
        tools: Optional[Sequence[ToolFunction]] = None,
        params: dict[str, Any] | None = None,
    ) -> ChatResponse:
        """Send a chat request and return the final response."""
        history = _as_history(messages)
        functions = index_functions(tools)

        try:
            rounds = 0
            while True:
                last = rounds >= self.max_iterations
                request = self._request_params(
                    params, functions, stream=False, last=last
                )
                raw = await self._chat_impl(history, request)
                response = self.adapter.from_provider(raw)
                if last or not functions or not response.tool_calls:
                    return response

                history.append(self.adapter.assistant_message_from(raw))
                history.extend(await self._invoke_all(response.tool_calls, functions))
                rounds += 1
        except Exception as exc:
            return self._wrap_error(exc)

    async def stream(
        self,
        messages: Prompt,
        *,
        tools: Optional[Sequence[ToolFunction]] = None,
        params: dict[str, Any] | None = None,
    ) -> AsyncIterator[ChatResponse]:
        """
        Send a chat request and yield text fragments as they arrive.

        Fragments from every round are yielded; rounds that only carry tool
        calls yield nothing. A failure is yielded as a final error response.
        """
        history = _as_history(messages)
        functions = index_functions(tools)

        try:
            rounds = 0
            while True:
                last = rounds >= self.max_iterations
                request = self._request_params(
                    params, functions, stream=True, last=last
                )
                chunks = await self._chat_impl(history, request)
                collected = ToolCallAccumulator()
                async for chunk in chunks:
                    collected.add(chunk)
                    update = self.adapter.stream_text(chunk)
                    if update.content:
                        yield update

                if last or not functions or not collected.has_tool_calls:
                    return

                history.append(collected.assistant_message())
                history.extend(
                    await self._invoke_all(collected.tool_calls(), functions)
                )
                rounds += 1
        except Exception as exc:
            yield self._wrap_error(exc)

    def _request_params(
        self,
        params: dict[str, Any] | None,
        functions: dict[str, ToolFunction],
        *,
        stream: bool,
        last: bool,
    ) -> dict[str, Any]:
        request = normalize_params(params)
        request["stream"] = stream
        if functions:
            request["tools"] = [fn.to_openai() for fn in functions.values()]
            if last:
                request["tool_choice"] = "none"
        return request

    async def _invoke_all(
        self,
        calls: Sequence[ToolCallRequest],
        functions: dict[str, ToolFunction],
    ) -> list[ChatMessage]:
        results: list[ChatMessage] = []
        for call in calls:
            fn = functions.get(call.name)
            if fn is None:
                self._log(f"Model requested unknown function {call.name}", logging.WARNING)
                content = f"Error: Requested function {call.name!r} not found."
            else:
                self._log(f"Invoking {call.name} with {call.arguments}", logging.DEBUG)
                content = await fn(call.arguments)
            results.append(
                self.adapter.tool_result_message(ToolCallResult(call.id, content))
            )
        return results

    def _wrap_error(self, exc: Exception) -> ChatResponse:
        """Wrap exception into an error response."""
        return ChatResponse(content="", error=classify_error(exc, self.logger))

    def _log(self, message: str, level: int = logging.INFO) -> None:
        self.logger.log(level, f"[{self.name}] {message}")

    # --- lifecycle ---------------------------------------------------------
    async def aclose(self) -> None:
        """
        Close the underlying async HTTP client. Safe to call multiple times.
        """
        client = getattr(self, "_client", None)
        close = getattr(client, "close", None)
        if close:
            await close()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


def _as_history(messages: Prompt) -> list[ChatMessage]:
    if isinstance(messages, str):
        return [{"role": "user", "content": messages}]
    return [dict(m) for m in messages]


class OpenAIChatClient(BaseChatClient):
    """
    OpenAI chat client (async only).

    Use ``OpenAIChatClient.from_client`` when you already have an
    ``AsyncOpenAI`` instance.
    """

    def __init__(
        self,
        model: str,
        *,
        api_key: str,
        timeout: float = 60.0,
        max_retries: int = 2,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> None:
        super().__init__(
            model, max_iterations=max_iterations, logger=logger, name=name
        )
        self._client = AsyncOpenAI(
            api_key=api_key,
            timeout=timeout,
            max_retries=max_retries,
            base_url=base_url,
        )
        self._adapter = OpenAIRequestAdapter()

    @classmethod
    def from_client(
        cls,
        model: str,
        client: AsyncOpenAI,
        *,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> Self:
        """Build a chat client around an already configured ``AsyncOpenAI``."""
        if not isinstance(client, AsyncOpenAI):
            raise TypeError(
                f"{cls.__name__}.from_client expects AsyncOpenAI; got {type(client).__name__}"
            )

        self = cls.__new__(cls)  # bypass __init__
        BaseChatClient.__init__(
            self, model, max_iterations=max_iterations, logger=logger, name=name
        )
        self._client = client
        self._adapter = OpenAIRequestAdapter()
        return self

    @property
    def adapter(self) -> OpenAIRequestAdapter:
        return self._adapter

    async def _chat_impl(
        self,
        messages: Sequence[ChatMessage],
        params: dict[str, Any],
    ) -> Union[ChatCompletion, AsyncIterator[ChatCompletionChunk]]:
        request_data = self._adapter.to_provider(messages, params)

        args = {
            "model": self.model,
            "stream": params["stream"],
            **request_data,
        }

        # Non-standard fields go through extra_body
        extra_body = {}
        for k in ("verbosity", "reasoning_effort"):
            if k in args:
                extra_body[k] = args.pop(k)
        if extra_body:
            args["extra_body"] = {**args.get("extra_body", {}), **extra_body}

        self._log(
            f"Sending {len(messages)} messages to {self.model} (stream={params['stream']})",
            logging.DEBUG,
        )
        return await self._client.chat.completions.create(**args)


class GeminiChatClient(OpenAIChatClient):
    """Gemini through its OpenAI-compatible endpoint."""

    def __init__(
        self,
        model: str,
        *,
        api_key: str,
        base_url: str = DEFAULT_GEMINI_BASE_URL,
        **kwargs: Any,
    ) -> None:
        super().__init__(model, api_key=api_key, base_url=base_url, **kwargs)


_CLIENT_REGISTRY: dict[Provider, type[OpenAIChatClient]] = {
    Provider.OPENAI: OpenAIChatClient,
    Provider.GEMINI: GeminiChatClient,
}


def create_chat_client(
    provider: Provider,
    model: str,
    *,
    api_key: str | None = None,
    client: AsyncOpenAI | None = None,
    logger: logging.Logger | None = None,
    **provider_kwargs: Any,
) -> BaseChatClient:
    """
    Factory for chat clients.

    Args:
        provider: Which provider to use.
        model: Model identifier (e.g. ``"gpt-4o-mini"``).
        api_key: Overrides the environment lookup.
        client: Pre-configured ``AsyncOpenAI`` to use verbatim. For Gemini it
            must already point at the OpenAI-compatible base URL.
        logger: Optional custom logger.
        **provider_kwargs: Passed through (timeout, max_retries, max_iterations).
    """
    try:
        client_cls = _CLIENT_REGISTRY[Provider(provider)]
    except (KeyError, ValueError) as exc:
        raise ValueError(f"Unsupported provider: {provider}") from exc

    if client is not None:
        kwargs = {
            k: v for k, v in provider_kwargs.items() if k in ("max_iterations", "name")
        }
        return client_cls.from_client(model, client, logger=logger, **kwargs)

    key = api_key or get_api_key(Provider(provider))
    return client_cls(model, api_key=key, logger=logger, **provider_kwargs)
