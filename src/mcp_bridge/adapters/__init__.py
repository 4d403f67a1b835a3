"""Pure request/response transformations for chat providers."""

from .openai import OpenAIRequestAdapter

__all__ = ["OpenAIRequestAdapter"]
