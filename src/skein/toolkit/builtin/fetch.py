"""fetch: HTTP requests over httpx."""

from __future__ import annotations

from typing import Any, Literal

import httpx
from pydantic import BaseModel, Field

from skein.toolkit.builtin.base import Description, log_description
from skein.toolkit.models import ToolContext, ToolDefinition

DEFAULT_FETCH_TIMEOUT = 30.0


class FetchInput(BaseModel):
    method: Literal["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"] = Field(
        default="GET", description="HTTP method to use"
    )
    url: str = Field(description="URL to make the request to")
    params: dict[str, Any] | None = Field(
        default=None, description="Optional query parameters"
    )
    body: Any = Field(default=None, description="Optional JSON request body")
    headers: dict[str, str] | None = Field(
        default=None, description="Optional request headers"
    )
    description: Description = ""


def make_fetch_tool(
    transport: httpx.AsyncBaseTransport | None = None,
    timeout: float = DEFAULT_FETCH_TIMEOUT,
) -> ToolDefinition:
    """Build the fetch tool.

    Args:
        transport: Optional httpx transport (tests use MockTransport).
        timeout: Request timeout in seconds.
    """

    async def _handle_fetch(params: FetchInput, context: ToolContext) -> dict:
        context.logger.debug("%s %s", params.method, params.url)
        async with httpx.AsyncClient(
            transport=transport, timeout=timeout, follow_redirects=True
        ) as client:
            request_kwargs: dict[str, Any] = {
                "params": params.params,
                "headers": params.headers,
            }
            if params.body is not None:
                request_kwargs["json"] = params.body
            response = await client.request(params.method, params.url, **request_kwargs)

        content_type = response.headers.get("content-type", "")
        body: Any
        if "application/json" in content_type:
            try:
                body = response.json()
            except ValueError:
                body = response.text
        else:
            body = response.text
        return {
            "status": response.status_code,
            "headers": dict(response.headers),
            "body": body,
        }

    return ToolDefinition(
        name="fetch",
        description="Executes HTTP requests using the native httpx client",
        input_model=FetchInput,
        handler=_handle_fetch,
        log_parameters=log_description,
    )
