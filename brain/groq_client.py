"""
brain/groq_client.py — Groq Provider Client

Groq serves an OpenAI-compatible API, so we reuse OpenAIClient and only
point it at api.groq.com. Groq still expects the classic "max_tokens"
request field.

Popular Groq models:
  - openai/gpt-oss-20b
  - openai/gpt-oss-120b
  - llama-3.3-70b-versatile
"""

from __future__ import annotations

from typing import Optional

from brain.llm_client import DEFAULT_TIMEOUT_SECONDS
from brain.openai_client import OpenAIClient
from brain.types import Provider

_GROQ_BASE_URL = "https://api.groq.com/openai/v1"


class GroqClient(OpenAIClient):
    """Groq client — OpenAI wire format, Groq endpoint."""

    provider = Provider.GROQ
    default_model = "openai/gpt-oss-20b"
    max_tokens_param = "max_tokens"

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
            base_url=base_url or _GROQ_BASE_URL,
            timeout_seconds=timeout_seconds,
        )
