"""
brain/__init__.py — AxonerAI Provider Layer
"""

from __future__ import annotations

from typing import Optional

from brain.llm_client import (
    DEFAULT_TIMEOUT_SECONDS,
    BaseLLMClient,
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
    Role,
    StopReason,
    TokenUsage,
    ToolCall,
    ToolSchema,
)

__all__ = [
    "LLMClientFactory",
    "BaseLLMClient",
    "normalise_stop_reason",
    "ProviderError",
    "ProviderConnectionError",
    "ProviderStatusError",
    "ProviderResponseError",
    "CompletionResponse",
    "Message",
    "Provider",
    "Role",
    "StopReason",
    "TokenUsage",
    "ToolCall",
    "ToolSchema",
]

# Default models per provider
_DEFAULT_MODELS: dict[str, str] = {
    "anthropic": "claude-sonnet-4-20250514",
    "openai":    "gpt-5-mini",
    "groq":      "openai/gpt-oss-20b",
}


class LLMClientFactory:

    @staticmethod
    def create(
        provider: str,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> BaseLLMClient:

        provider = provider.lower().strip()

        if provider == "anthropic":
            if not api_key:
                raise ProviderConnectionError("ANTHROPIC_API_KEY is required", provider="anthropic")
            from brain.anthropic_client import AnthropicClient
            return AnthropicClient(
                api_key=api_key, model=model, base_url=base_url, timeout_seconds=timeout_seconds,
            )

        elif provider == "openai":
            if not api_key:
                raise ProviderConnectionError("OPENAI_API_KEY is required", provider="openai")
            from brain.openai_client import OpenAIClient
            return OpenAIClient(
                api_key=api_key, model=model, base_url=base_url, timeout_seconds=timeout_seconds,
            )

        elif provider == "groq":
            if not api_key:
                raise ProviderConnectionError("GROQ_API_KEY is required", provider="groq")
            from brain.groq_client import GroqClient
            return GroqClient(
                api_key=api_key, model=model, base_url=base_url, timeout_seconds=timeout_seconds,
            )

        else:
            raise ValueError(
                f"Unknown LLM provider: '{provider}'. "
                f"Valid options: anthropic, openai, groq"
            )

    @staticmethod
    def from_settings(settings) -> BaseLLMClient:
        """Create the configured provider client from Settings."""
        provider = settings.active_provider
        return LLMClientFactory.create(
            provider=provider,
            api_key=settings.api_key_for(provider),
            model=settings.llm.model,
            base_url=settings.llm.base_url,
            timeout_seconds=settings.llm.timeout_seconds,
        )

    @staticmethod
    def default_model(provider: str) -> str:
        return _DEFAULT_MODELS.get(provider.lower(), _DEFAULT_MODELS["groq"])
