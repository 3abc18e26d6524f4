"""
brain/openai_client.py — OpenAI Provider Client

Supports GPT models and any OpenAI-compatible endpoint (Groq reuses this
class with a different base_url). Handles tool calling, token counting,
and error normalisation.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import openai
from openai import AsyncOpenAI

from brain.llm_client import (
    BaseLLMClient,
    DEFAULT_TIMEOUT_SECONDS,
    ProviderConnectionError,
    ProviderError,
    ProviderResponseError,
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


class OpenAIClient(BaseLLMClient):
    """
    OpenAI chat-completions client.

    The system prompt travels as the first message of the array. Tool-call
    arguments come back as a JSON string; a string that does not parse to an
    object is replaced by {} instead of failing the whole response.
    """

    provider = Provider.OPENAI
    default_model = "gpt-5-mini"

    # Request field carrying the token cap. OpenAI's newer models reject
    # "max_tokens"; most compatible backends only know "max_tokens".
    max_tokens_param = "max_completion_tokens"

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        base_url: Optional[str] = None,     # None = official OpenAI endpoint
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        super().__init__(
            api_key=api_key,
            model=model,
            base_url=base_url,
            timeout_seconds=timeout_seconds,
        )
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
        )

    @property
    def _name(self) -> str:
        return self.provider.value

    # ── Public API ────────────────────────────────────────────────────────────

    async def complete(
        self,
        messages: list[Message],
        tools: Optional[list[ToolSchema]] = None,
        max_tokens: Optional[int] = None,
        system_prompt: Optional[str] = None,
    ) -> CompletionResponse:
        request: dict[str, Any] = {
            "model": self.model,
            "messages": self._to_provider_messages(messages, system_prompt),
        }
        if tools:
            request["tools"] = self._to_provider_tools(tools)
        if max_tokens is not None:
            request[self.max_tokens_param] = max_tokens

        log.debug(
            f"{self._name}.complete.start",
            model=self.model,
            message_count=len(messages),
            has_tools=bool(tools),
        )

        try:
            response = await self._client.chat.completions.create(**request)
        except openai.APIStatusError as e:
            raise ProviderStatusError(self._name, e.status_code, e.response.text) from e
        except openai.APIConnectionError as e:
            raise ProviderConnectionError(str(e), provider=self._name) from e
        except openai.APIError as e:
            raise ProviderError(str(e), provider=self._name) from e

        result = self._from_provider_response(response)
        log.debug(
            f"{self._name}.complete.done",
            model=result.model,
            input_tokens=result.usage.input_tokens,
            output_tokens=result.usage.output_tokens,
            stop_reason=result.stop_reason.value,
            tool_calls=len(result.tool_calls),
        )
        return result

    # ── Private helpers ───────────────────────────────────────────────────────

    def _to_provider_messages(
        self, messages: list[Message], system_prompt: Optional[str] = None
    ) -> list[dict]:
        """Translate internal Message list → OpenAI chat message format."""
        result: list[dict] = []
        if system_prompt:
            result.append({"role": "system", "content": system_prompt})
        result.extend(msg.to_wire() for msg in messages)
        return result

    def _to_provider_tools(self, tools: list[ToolSchema]) -> list[dict]:
        """Translate internal ToolSchema list → OpenAI function tool format."""
        return [
            {
                "type": "function",
                "function": {
                    "name": t.name,
                    "description": t.description,
                    "parameters": t.input_schema,
                },
            }
            for t in tools
        ]

    def _from_provider_response(self, response) -> CompletionResponse:
        """Translate a ChatCompletion → CompletionResponse."""
        if not response.choices:
            raise ProviderResponseError(
                f"No choices in {self._name} response", provider=self._name
            )

        choice = response.choices[0]
        msg = choice.message

        tool_calls: list[ToolCall] = []
        for tc in msg.tool_calls or []:
            tool_calls.append(ToolCall(
                id=tc.id,
                name=tc.function.name,
                input=self._parse_arguments(tc.function.name, tc.function.arguments),
            ))

        usage = TokenUsage(
            input_tokens=response.usage.prompt_tokens if response.usage else 0,
            output_tokens=response.usage.completion_tokens if response.usage else 0,
        )

        return CompletionResponse(
            text=msg.content,
            tool_calls=tool_calls,
            stop_reason=normalise_stop_reason(choice.finish_reason),
            usage=usage,
            model=response.model or self.model,
            provider=self.provider,
        )

    def _parse_arguments(self, tool_name: str, raw: Optional[str]) -> dict[str, Any]:
        """
        Parse serialized tool arguments. Malformed payloads fall back to {}
        so one bad call does not abort the completion; the tool's own
        argument validation then reports what is missing.
        """
        try:
            parsed = json.loads(raw) if raw else {}
        except (json.JSONDecodeError, TypeError):
            parsed = None
        if not isinstance(parsed, dict):
            log.warning(
                f"{self._name}.tool_args_malformed",
                tool=tool_name,
                raw=str(raw)[:200],
            )
            return {}
        return parsed
