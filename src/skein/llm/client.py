"""Built-in Anthropic Messages API client with tenacity retry.

Provides an async httpx client for the Anthropic ``/v1/messages`` endpoint.
Reads configuration from constructor arguments or environment variables.
"""

from __future__ import annotations

import logging
import os
from typing import Any

import httpx
import tenacity

from skein.llm.errors import (
    LLMAuthError,
    LLMConfigError,
    LLMOverloadedError,
    LLMRateLimitError,
    LLMResponseError,
)
from skein.protocols import ModelResponse

logger = logging.getLogger(__name__)

API_KEY_ENV = "ANTHROPIC_API_KEY"
BASE_URL_ENV = "SKEIN_ANTHROPIC_BASE_URL"
DEFAULT_BASE_URL = "https://api.anthropic.com"
ANTHROPIC_VERSION = "2023-06-01"

_RETRYABLE_STATUS_CODES = {500, 502, 503, 504}
_OVERLOADED_STATUS_CODE = 529
_AUTH_ERROR_STATUS_CODES = {401, 403}


def missing_api_key_message() -> str:
    return (
        f"{API_KEY_ENV} environment variable is not set. "
        f"Set {API_KEY_ENV} or pass api_key= to AnthropicClient."
    )


def _api_error(response: httpx.Response) -> tuple[str | None, str]:
    """Pull ``error.type`` and ``error.message`` out of an error body.

    Falls back to the raw body text when it is not the API's error envelope.
    """
    try:
        body = response.json()
    except ValueError:
        return None, response.text
    error = body.get("error") if isinstance(body, dict) else None
    if not isinstance(error, dict):
        return None, response.text
    return error.get("type"), error.get("message") or response.text


def _is_retryable(exc: BaseException) -> bool:
    """Check if an exception is retryable.

    Retryable: 429, 5xx, 529 (overloaded), connection errors.
    Not retryable: 401, 403, 400, other client errors.
    """
    if isinstance(exc, LLMAuthError):
        return False
    if isinstance(exc, (LLMRateLimitError, LLMOverloadedError)):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in _RETRYABLE_STATUS_CODES
    return isinstance(exc, (httpx.ConnectError, httpx.ConnectTimeout))


class AnthropicClient:
    """Async httpx client for the Anthropic Messages API.

    Implements the LLMClient protocol. Supports retry with exponential
    backoff for transient errors (429, 5xx, 529 overloaded). Fails immediately on
    authentication errors (401, 403). Retries happen at the transport
    level only; callers treat a raised error as final.

    Usage::

        async with AnthropicClient() as client:
            response = await client.complete(
                [{"role": "user", "content": "Hello"}],
                system="Be brief.",
            )
            print(response.text)
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        default_model: str = "claude-3-5-sonnet-20241022",
        default_max_tokens: int = 4096,
        timeout: float = 120.0,
        max_retries: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: API key. Falls back to the ANTHROPIC_API_KEY env var.
            base_url: API base URL. Falls back to SKEIN_ANTHROPIC_BASE_URL,
                then to https://api.anthropic.com.
            default_model: Model used when complete() gets no model.
            default_max_tokens: max_tokens used when complete() gets none.
            timeout: Request timeout in seconds.
            max_retries: Maximum number of attempts for retryable errors.
            transport: Optional httpx transport (tests use MockTransport).

        Raises:
            LLMConfigError: If no API key is provided or found in environment.
        """
        self._api_key = api_key or os.environ.get(API_KEY_ENV, "")
        if not self._api_key:
            raise LLMConfigError(missing_api_key_message())
        self._base_url = (
            base_url or os.environ.get(BASE_URL_ENV, DEFAULT_BASE_URL)
        ).rstrip("/")
        self._default_model = default_model
        self._default_max_tokens = default_max_tokens
        self._max_retries = max_retries
        self._client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={
                "Content-Type": "application/json",
                "x-api-key": self._api_key,
                "anthropic-version": ANTHROPIC_VERSION,
            },
        )

    async def complete(
        self,
        messages: list[dict],
        *,
        system: str | None = None,
        tools: list[dict] | None = None,
        tool_choice: dict | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs: Any,
    ) -> ModelResponse:
        """Send a Messages API request with retry.

        Uses tenacity.AsyncRetrying programmatically (not as decorator) so
        that max_retries is configurable per-instance.

        Raises:
            LLMAuthError: On 401/403 (no retry).
            LLMRateLimitError: On 429 after all retries exhausted.
            LLMOverloadedError: On 529 after all retries exhausted.
            LLMResponseError: On unexpected response format.
            httpx.HTTPStatusError: On other non-retryable HTTP errors.
        """
        payload: dict[str, Any] = {
            "model": model or self._default_model,
            "max_tokens": max_tokens or self._default_max_tokens,
            "messages": messages,
        }
        if system:
            payload["system"] = system
        if tools:
            payload["tools"] = tools
            if tool_choice is not None:
                payload["tool_choice"] = tool_choice
        if temperature is not None:
            payload["temperature"] = temperature
        payload.update(kwargs)

        retryer = tenacity.AsyncRetrying(
            retry=tenacity.retry_if_exception(_is_retryable),
            wait=(
                tenacity.wait_exponential(multiplier=1, min=1, max=30)
                + tenacity.wait_random(0, 2)
            ),
            stop=tenacity.stop_after_attempt(self._max_retries),
            before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        data = await retryer(self._post, payload)
        return ModelResponse.from_anthropic(data)

    async def _post(self, payload: dict[str, Any]) -> dict:
        """Execute a single Messages API request (no retry)."""
        response = await self._client.post(
            f"{self._base_url}/v1/messages",
            json=payload,
        )

        status = response.status_code
        if status in _AUTH_ERROR_STATUS_CODES:
            error_type, detail = _api_error(response)
            raise LLMAuthError(
                f"Authentication failed: HTTP {status} - {detail}",
                status_code=status,
                error_type=error_type,
            )

        if status == 429:
            error_type, detail = _api_error(response)
            retry_after_raw = response.headers.get("retry-after")
            retry_after: float | None = None
            if retry_after_raw is not None:
                try:
                    retry_after = float(retry_after_raw)
                except (ValueError, TypeError):
                    pass
            raise LLMRateLimitError(
                f"Rate limited: HTTP 429 - {detail}",
                retry_after=retry_after,
                error_type=error_type,
            )

        if status == _OVERLOADED_STATUS_CODE:
            _error_type, detail = _api_error(response)
            raise LLMOverloadedError(f"Anthropic API overloaded: HTTP 529 - {detail}")

        response.raise_for_status()

        try:
            data = response.json()
        except ValueError as exc:
            raise LLMResponseError(
                f"Response body is not JSON: {response.text[:200]}"
            ) from exc
        if not isinstance(data, dict) or "content" not in data:
            raise LLMResponseError(
                f"Unexpected response format: missing 'content' key. "
                f"Response: {data}"
            )
        return data

    async def aclose(self) -> None:
        """Close the underlying httpx client."""
        await self._client.aclose()

    async def __aenter__(self) -> AnthropicClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()
