"""
brain/llm_client.py — Abstract Provider Client

All provider implementations (Anthropic, OpenAI, Groq) must subclass
BaseLLMClient and implement complete().

Every variant translates the same abstract inputs (history, tool
declarations, max_tokens, system prompt) into its vendor's wire shape and
normalises the vendor's finish signal through normalise_stop_reason(), so
the agent loop only ever sees the unified StopReason.

There is no retry or failover here: a failed call raises ProviderError and
the current agent run ends.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from brain.types import CompletionResponse, Message, Provider, StopReason, ToolSchema
from exceptions import (
    ProviderConnectionError,
    ProviderError,
    ProviderResponseError,
    ProviderStatusError,
)

DEFAULT_TIMEOUT_SECONDS = 60.0


# ─────────────────────────────────────────────────────────────────────────────
# Stop-reason table
# ─────────────────────────────────────────────────────────────────────────────

# Shared by every variant so e.g. "length" means MAX_TOKENS for Anthropic too.
_STOP_REASON_MAP: dict[str, StopReason] = {
    "tool_use":       StopReason.TOOL_USE,
    "tool_calls":     StopReason.TOOL_USE,
    "end_turn":       StopReason.END_TURN,
    "stop":           StopReason.END_TURN,
    "max_tokens":     StopReason.MAX_TOKENS,
    "length":         StopReason.MAX_TOKENS,
    "content_filter": StopReason.CONTENT_FILTER,
}


def normalise_stop_reason(raw: Optional[str]) -> StopReason:
    """Map a vendor finish signal to StopReason. Unknown or absent → ERROR."""
    if not raw:
        return StopReason.ERROR
    return _STOP_REASON_MAP.get(raw, StopReason.ERROR)


# ─────────────────────────────────────────────────────────────────────────────
# Base client
# ─────────────────────────────────────────────────────────────────────────────


class BaseLLMClient(ABC):
    """
    Abstract base for all provider clients.

    Subclasses must implement:
      - complete() -> call the vendor, return a normalised CompletionResponse

    Class attributes:
      - provider:      Provider tag stamped on every response.
      - default_model: model used when none is given at construction.
    """

    provider: Provider
    default_model: str = ""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.api_key = api_key
        self.model = model or self.default_model
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        tools: Optional[list[ToolSchema]] = None,
        max_tokens: Optional[int] = None,
        system_prompt: Optional[str] = None,
    ) -> CompletionResponse:
        """Call the vendor and return a normalised response."""
        ...

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} model={self.model}>"


__all__ = [
    "BaseLLMClient",
    "DEFAULT_TIMEOUT_SECONDS",
    "normalise_stop_reason",
    "ProviderError",
    "ProviderConnectionError",
    "ProviderStatusError",
    "ProviderResponseError",
]
