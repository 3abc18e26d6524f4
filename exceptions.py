"""
exceptions.py — AxonerAI Unified Error Hierarchy

All AxonerAI-specific exceptions live here. Every layer of the stack
raises typed subclasses of AxonerError, never bare Exception.

Import from here, not from individual modules:
    from exceptions import ToolNotFoundError, ProviderStatusError

Hierarchy:
    AxonerError
    ├── ProviderError
    │   ├── ProviderConnectionError
    │   ├── ProviderStatusError
    │   └── ProviderResponseError
    ├── ToolError
    │   ├── ToolNotFoundError
    │   ├── ToolExecutionError
    │   └── ToolRegistrationError
    ├── SessionStoreError
    └── AgentError
        └── ProtocolViolation

Only transport/parse/lookup failures are errors. Soft agent outcomes
(max tokens, max iterations, content filter) are returned as text.
"""

from __future__ import annotations

from typing import Optional


# ─────────────────────────────────────────────────────────────────────────────
# Root
# ─────────────────────────────────────────────────────────────────────────────

class AxonerError(Exception):
    """Base class for all AxonerAI exceptions."""


# ─────────────────────────────────────────────────────────────────────────────
# Provider layer
# ─────────────────────────────────────────────────────────────────────────────

class ProviderError(AxonerError):
    """Base exception for all LLM provider errors."""

    def __init__(
        self,
        message: str,
        provider: str = "",
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.body = body


class ProviderConnectionError(ProviderError):
    """Provider unreachable, timed out, or credentials missing."""


class ProviderStatusError(ProviderError):
    """Provider answered with a non-success HTTP status."""

    def __init__(self, provider: str, status_code: int, body: str) -> None:
        super().__init__(
            f"{provider} API error {status_code}: {body}",
            provider=provider,
            status_code=status_code,
            body=body,
        )


class ProviderResponseError(ProviderError):
    """Provider answered 2xx but the payload could not be interpreted."""


# ─────────────────────────────────────────────────────────────────────────────
# Tool layer
# ─────────────────────────────────────────────────────────────────────────────

class ToolError(AxonerError):
    """Raised by a tool's execute() when it cannot produce a result."""


class ToolNotFoundError(ToolError):
    """The model asked for a tool that is not in the registry."""

    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Tool not found: {tool_name}")


class ToolExecutionError(ToolError):
    """A registered tool failed (bad arguments, its own error, or timeout)."""

    def __init__(self, tool_name: str, cause: BaseException) -> None:
        self.tool_name = tool_name
        self.cause = cause
        detail = str(cause) or type(cause).__name__
        super().__init__(f"Tool '{tool_name}' failed: {detail}")


class ToolRegistrationError(ToolError):
    """Duplicate registration on a registry that forbids overwrites."""


# ─────────────────────────────────────────────────────────────────────────────
# Session layer
# ─────────────────────────────────────────────────────────────────────────────

class SessionStoreError(AxonerError):
    """A session snapshot is missing, corrupt, or could not be written."""

    def __init__(self, message: str, session_id: str = "") -> None:
        super().__init__(message)
        self.session_id = session_id


# ─────────────────────────────────────────────────────────────────────────────
# Agent layer
# ─────────────────────────────────────────────────────────────────────────────

class AgentError(AxonerError):
    """Base for agent control-loop errors."""


class ProtocolViolation(AgentError):
    """Provider broke the completion contract (tool_use without calls, unknown stop)."""


__all__ = [
    "AxonerError",
    # Provider
    "ProviderError",
    "ProviderConnectionError",
    "ProviderStatusError",
    "ProviderResponseError",
    # Tool
    "ToolError",
    "ToolNotFoundError",
    "ToolExecutionError",
    "ToolRegistrationError",
    # Session
    "SessionStoreError",
    # Agent
    "AgentError",
    "ProtocolViolation",
]
