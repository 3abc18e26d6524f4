"""
brain/anthropic_client.py — Anthropic Provider Client

Handles Anthropic's distinct request format (system prompt as a top-level
field, tools declared with input_schema) and maps the Messages API response
back into a CompletionResponse.
"""

from __future__ import annotations

from typing import Optional

import anthropic
from anthropic import AsyncAnthropic

from brain.llm_client import (
    BaseLLMClient,
    DEFAULT_TIMEOUT_SECONDS,
    ProviderConnectionError,
    ProviderError,
    ProviderStatusError,
    normalise_stop_reason,
)
from brain.types import (
    CompletionResponse,
    Message,
    Provider,
    TokenUsage,
    ToolCall,
    ToolSchema,
)
from observability.logger import get_logger

log = get_logger(__name__)

# The Messages API refuses requests without max_tokens
_DEFAULT_MAX_TOKENS = 4096


class AnthropicClient(BaseLLMClient):
    """
    Anthropic Claude API client.

    Key differences from OpenAI format:
    - System prompt is a separate top-level param, not a message
    - Tools carry input_schema directly
    - Response content is a list of typed blocks (text / tool_use)
    """

    provider = Provider.ANTHROPIC
    default_model = "claude-sonnet-4-20250514"

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        super().__init__(
            api_key=api_key,
            model=model,
            base_url=base_url,
            timeout_seconds=timeout_seconds,
        )
        self._client = AsyncAnthropic(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
        )

    # ── Public API ────────────────────────────────────────────────────────────

    async def complete(
        self,
        messages: list[Message],
        tools: Optional[list[ToolSchema]] = None,
        max_tokens: Optional[int] = None,
        system_prompt: Optional[str] = None,
    ) -> CompletionResponse:
        ant_messages = self._to_provider_messages(messages)
        ant_tools = self._to_provider_tools(tools) if tools else anthropic.NOT_GIVEN

        log.debug(
            "anthropic.complete.start",
            model=self.model,
            message_count=len(messages),
            has_tools=bool(tools),
            has_system=bool(system_prompt),
        )

        try:
            response = await self._client.messages.create(
                model=self.model,
                system=system_prompt or anthropic.NOT_GIVEN,
                messages=ant_messages,
                tools=ant_tools,
                max_tokens=max_tokens or _DEFAULT_MAX_TOKENS,
            )
        except anthropic.APIStatusError as e:
            raise ProviderStatusError("anthropic", e.status_code, e.response.text) from e
        except anthropic.APIConnectionError as e:
            raise ProviderConnectionError(str(e), provider="anthropic") from e
        except anthropic.APIError as e:
            raise ProviderError(str(e), provider="anthropic") from e

        result = self._from_provider_response(response)
        log.debug(
            "anthropic.complete.done",
            model=result.model,
            input_tokens=result.usage.input_tokens,
            output_tokens=result.usage.output_tokens,
            stop_reason=result.stop_reason.value,
            tool_calls=len(result.tool_calls),
        )
        return result

    # ── Private helpers ───────────────────────────────────────────────────────

    def _to_provider_messages(self, messages: list[Message]) -> list[dict]:
        """Translate internal Message list → Anthropic messages array."""
        return [msg.to_wire() for msg in messages]

    def _to_provider_tools(self, tools: list[ToolSchema]) -> list[dict]:
        """Translate internal ToolSchema list → Anthropic tool format."""
        return [
            {
                "name": t.name,
                "description": t.description,
                "input_schema": t.input_schema,
            }
            for t in tools
        ]

    def _from_provider_response(self, response) -> CompletionResponse:
        """Translate Anthropic Message response → CompletionResponse."""
        text_parts: list[str] = []
        tool_calls: list[ToolCall] = []

        for block in response.content:
            if block.type == "text":
                if block.text:
                    text_parts.append(block.text)
            elif block.type == "tool_use":
                tool_calls.append(ToolCall(
                    id=block.id,
                    name=block.name,
                    input=block.input if isinstance(block.input, dict) else {},
                ))

        usage = TokenUsage(
            input_tokens=response.usage.input_tokens if response.usage else 0,
            output_tokens=response.usage.output_tokens if response.usage else 0,
        )

        return CompletionResponse(
            text="\n".join(text_parts) if text_parts else None,
            tool_calls=tool_calls,
            stop_reason=normalise_stop_reason(response.stop_reason),
            usage=usage,
            model=response.model or self.model,
            provider=self.provider,
        )
