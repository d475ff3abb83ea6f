"""Errors raised by the Anthropic Messages API client.

The API reports failures as ``{"type": "error", "error": {"type": ...,
"message": ...}}``. The ``error.type`` value is kept on the exception as
``error_type`` so callers can tell ``overloaded_error`` from
``rate_limit_error`` without parsing messages.
"""

from __future__ import annotations

from skein.exceptions import SkeinError


class LLMClientError(SkeinError):
    """Base for all LLM client errors.

    Attributes:
        status_code: HTTP status of the failed request, if any.
        error_type: Anthropic ``error.type`` from the response body, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        error_type: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.error_type = error_type
        super().__init__(message)


class LLMConfigError(LLMClientError):
    """No API key, or an unusable base URL."""


class LLMRateLimitError(LLMClientError):
    """HTTP 429 ``rate_limit_error``: the organization hit a rate limit.

    Attributes:
        retry_after: Seconds from the ``retry-after`` header, or None.
    """

    def __init__(
        self,
        message: str = "Rate limited",
        retry_after: float | None = None,
        *,
        error_type: str | None = "rate_limit_error",
    ) -> None:
        self.retry_after = retry_after
        if retry_after is not None:
            message = f"{message} (retry after {retry_after}s)"
        super().__init__(message, status_code=429, error_type=error_type)


class LLMOverloadedError(LLMClientError):
    """HTTP 529 ``overloaded_error``: the API is temporarily overloaded.

    Retried like a rate limit, but carries no ``retry-after`` hint.
    """

    def __init__(self, message: str = "Anthropic API overloaded") -> None:
        super().__init__(message, status_code=529, error_type="overloaded_error")


class LLMAuthError(LLMClientError):
    """HTTP 401 ``authentication_error`` or 403 ``permission_error``."""


class LLMResponseError(LLMClientError):
    """A 200 response whose body is not a Messages API result."""
