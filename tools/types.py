"""
tools/types.py — Tool System Data Models

Shared types used across the tool registry, tool executor, and the agent
loop. ToolCall and ToolSchema are the brain's types: the provider produces
calls and consumes declarations in exactly these shapes.
"""

from __future__ import annotations

from pydantic import BaseModel

from brain.types import ToolCall, ToolSchema


class ToolResult(BaseModel):
    """The result of one executed tool call. One-to-one with a ToolCall."""
    tool_call_id: str
    tool_name: str
    result: str
    duration_ms: float = 0.0


__all__ = ["ToolCall", "ToolResult", "ToolSchema"]
