"""LLM client infrastructure for Skein.

Provides an Anthropic Messages API client over httpx and the pluggable
LLMClient protocol.
"""

from skein.llm.client import AnthropicClient
from skein.llm.errors import (
    LLMAuthError,
    LLMClientError,
    LLMConfigError,
    LLMOverloadedError,
    LLMRateLimitError,
    LLMResponseError,
)
from skein.llm.protocols import LLMClient

__all__ = [
    "AnthropicClient",
    "LLMClient",
    "LLMClientError",
    "LLMConfigError",
    "LLMRateLimitError",
    "LLMOverloadedError",
    "LLMAuthError",
    "LLMResponseError",
]
