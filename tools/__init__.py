"""
tools/__init__.py — AxonerAI Tool System

Public interface for the tool system.

Usage:
    from tools import ToolExecutor, build_default_registry
    from config.settings import get_settings

    registry = build_default_registry(get_settings())
    executor = ToolExecutor(registry)

    # Run a turn's tool calls
    results = await executor.execute_all(response.tool_calls)
"""

from __future__ import annotations

from tools.base import BaseTool, FunctionTool
from tools.calculator import Calculator
from tools.search import WebSearch
from tools.tool_executor import ToolExecutor
from tools.tool_registry import ToolRegistry
from tools.types import ToolCall, ToolResult, ToolSchema
from tools.web_scrape import WebScrape

__all__ = [
    "build_default_registry",
    "BaseTool",
    "FunctionTool",
    "ToolRegistry",
    "ToolExecutor",
    # Built-ins
    "Calculator",
    "WebSearch",
    "WebScrape",
    # Types
    "ToolCall",
    "ToolResult",
    "ToolSchema",
]


def build_default_registry(settings=None) -> ToolRegistry:
    """
    Build a registry holding the built-in tools.

    Call once at startup and share the result: the registry is read-only
    once agents start running.

    Args:
        settings: Settings supplying the search credentials and the
                  tools.* section. None registers the tools unconfigured
                  (web_search then fails when called).
    """
    if settings is None:
        registry = ToolRegistry()
        registry.register(Calculator())
        registry.register(WebSearch())
        registry.register(WebScrape())
        return registry

    registry = ToolRegistry(allow_overwrite=settings.tools.allow_overwrite)
    registry.register(Calculator())
    registry.register(WebSearch(
        api_key=settings.search_api_key,
        engine_id=settings.cx_engine,
        max_results=settings.tools.search_results,
    ))
    registry.register(WebScrape())
    return registry
