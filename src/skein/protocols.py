"""Provider-agnostic message and response types.

Defines the content blocks exchanged with the model provider, the
canonical ToolCall representation, token usage, and the parsed
ModelResponse returned by every LLMClient.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class TextBlock:
    """A text segment of a model response."""

    text: str
    type: str = "text"

    def to_dict(self) -> dict:
        return {"type": "text", "text": self.text}


@dataclass(frozen=True)
class ToolCall:
    """A tool invocation requested by the model.

    Arguments are always a parsed dict; they are validated against the
    tool's input model at dispatch time, not here.
    """

    id: str
    name: str
    arguments: dict = field(default_factory=dict)

    @classmethod
    def from_anthropic(cls, block: dict) -> ToolCall:
        """Parse from an Anthropic ``tool_use`` content block."""
        arguments = block.get("input")
        if not isinstance(arguments, dict):
            arguments = {}
        return cls(
            id=block.get("id") or f"toolu_{uuid.uuid4().hex[:12]}",
            name=block.get("name", ""),
            arguments=arguments,
        )

    def to_dict(self) -> dict:
        """Convert to an Anthropic ``tool_use`` content block."""
        return {
            "type": "tool_use",
            "id": self.id,
            "name": self.name,
            "input": dict(self.arguments),
        }


ContentBlock = Union[TextBlock, ToolCall]


@dataclass(frozen=True)
class TokenUsage:
    """Token usage reported by a single model response."""

    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    def __add__(self, other: TokenUsage) -> TokenUsage:
        return TokenUsage(
            input_tokens=self.input_tokens + other.input_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
        )

    def to_dict(self) -> dict[str, int]:
        return {"input": self.input_tokens, "output": self.output_tokens}


@dataclass(frozen=True)
class ModelResponse:
    """Parsed response of one model request.

    Attributes:
        content: Ordered text and tool-call blocks. Empty when the model
            returned no content at all.
        usage: Token counts reported for this request.
        stop_reason: Provider stop reason, if reported.
        raw: The unparsed provider payload, kept for debugging.
    """

    content: list[ContentBlock] = field(default_factory=list)
    usage: TokenUsage = field(default_factory=TokenUsage)
    stop_reason: str | None = None
    raw: dict[str, Any] | None = field(default=None, repr=False, compare=False)

    @property
    def text_blocks(self) -> list[TextBlock]:
        return [b for b in self.content if isinstance(b, TextBlock)]

    @property
    def tool_calls(self) -> list[ToolCall]:
        return [b for b in self.content if isinstance(b, ToolCall)]

    @property
    def text(self) -> str:
        """All text blocks joined by newlines."""
        return "\n".join(b.text for b in self.text_blocks)

    @classmethod
    def from_anthropic(cls, data: dict) -> ModelResponse:
        """Parse an Anthropic Messages API response payload.

        Block types other than ``text`` and ``tool_use`` (e.g. thinking
        blocks) are skipped.
        """
        blocks: list[ContentBlock] = []
        for raw in data.get("content") or []:
            kind = raw.get("type")
            if kind == "text":
                blocks.append(TextBlock(text=raw.get("text", "")))
            elif kind == "tool_use":
                blocks.append(ToolCall.from_anthropic(raw))
        usage_raw = data.get("usage") or {}
        usage = TokenUsage(
            input_tokens=int(usage_raw.get("input_tokens") or 0),
            output_tokens=int(usage_raw.get("output_tokens") or 0),
        )
        return cls(
            content=blocks,
            usage=usage,
            stop_reason=data.get("stop_reason"),
            raw=data,
        )
