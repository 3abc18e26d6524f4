"""
brain/types.py — AxonerAI Brain Data Models

All shared types used across provider clients and the agent loop.
Providers (Anthropic, OpenAI, Groq) all map their native response shapes
into these types.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field


# ─────────────────────────────────────────────────────────────────────────────
# Enums
# ─────────────────────────────────────────────────────────────────────────────


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class Provider(str, Enum):
    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    GROQ = "groq"


class StopReason(str, Enum):
    END_TURN = "end_turn"               # normal completion
    TOOL_USE = "tool_use"               # model wants to call tools
    MAX_TOKENS = "max_tokens"           # hit max_tokens
    CONTENT_FILTER = "content_filter"   # filtered by the provider
    ERROR = "error"                     # unknown or missing signal


# ─────────────────────────────────────────────────────────────────────────────
# Tool calling types
# ─────────────────────────────────────────────────────────────────────────────


class ToolCall(BaseModel):
    """A single tool invocation requested by the model."""
    id: str = Field(..., description="Vendor-assigned id, correlates call and result")
    name: str = Field(..., description="Tool name to call")
    input: dict[str, Any] = Field(default_factory=dict, description="Parsed structured input")


class ToolSchema(BaseModel):
    """
    Provider-agnostic tool declaration.
    Clients translate this into provider-specific format (OpenAI function
    schema, Anthropic tool schema).
    """
    name: str
    description: str
    input_schema: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}, "required": []}
    )


# ─────────────────────────────────────────────────────────────────────────────
# Message types
# ─────────────────────────────────────────────────────────────────────────────


class Message(BaseModel):
    """A single conversation entry. Tool traffic is flattened into text."""
    role: Role
    content: str

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role=Role.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> "Message":
        return cls(role=Role.ASSISTANT, content=content)

    def to_wire(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


# ─────────────────────────────────────────────────────────────────────────────
# Completion response
# ─────────────────────────────────────────────────────────────────────────────


class TokenUsage(BaseModel):
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


class CompletionResponse(BaseModel):
    """
    Normalised response from any provider.
    stop_reason alone drives the agent's next transition.
    """
    text: Optional[str] = None
    tool_calls: list[ToolCall] = Field(default_factory=list)
    stop_reason: StopReason = StopReason.ERROR
    usage: TokenUsage = Field(default_factory=TokenUsage)
    model: str = ""
    provider: Optional[Provider] = None

    @property
    def has_tool_calls(self) -> bool:
        return len(self.tool_calls) > 0
