"""
tools/tool_registry.py — Tool Registry

Central registry for all tools available to the agent. Built once at
startup, read-only afterwards, so it is shared freely across concurrent
agent runs.

Usage:
    registry = ToolRegistry()
    registry.register(Calculator())

    @registry.tool(
        name="echo",
        description="Echo the text back",
        input_schema={
            "type": "object",
            "properties": {"text": {"type": "string"}},
            "required": ["text"],
        },
    )
    async def echo(text: str) -> str:
        return text

    # Lookup
    tool = registry.get("calculator")
    declarations = registry.declarations_for_provider()
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Optional

from exceptions import ToolRegistrationError
from observability.logger import get_logger
from tools.base import BaseTool, FunctionTool
from tools.types import ToolSchema

log = get_logger(__name__)


class ToolRegistry:
    """
    Maps tool names to tool instances.

    Registering a name twice replaces the earlier tool (last writer wins)
    and logs a warning. Pass allow_overwrite=False to make a duplicate a
    ToolRegistrationError instead.
    """

    def __init__(self, allow_overwrite: bool = True):
        self._tools: dict[str, BaseTool] = {}
        self._allow_overwrite = allow_overwrite

    def register(self, tool: BaseTool) -> None:
        """Insert a tool under its name."""
        name = tool.name
        if name in self._tools:
            if not self._allow_overwrite:
                raise ToolRegistrationError(f"Tool '{name}' is already registered")
            log.warning(
                "tool.overwritten",
                tool=name,
                previous=repr(self._tools[name]),
                replacement=repr(tool),
            )
        self._tools[name] = tool
        log.debug("tool.registered", tool=name)

    def tool(
        self,
        name: str,
        description: str,
        input_schema: Optional[dict[str, Any]] = None,
    ) -> Callable:
        """
        Decorator registering an async function as a tool.

        The function is returned unchanged so it stays directly callable.
        """
        def decorator(fn: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
            self.register(FunctionTool(
                name=name,
                description=description,
                fn=fn,
                input_schema=input_schema,
            ))
            return fn

        return decorator

    def get(self, name: str) -> Optional[BaseTool]:
        """Return the tool registered under name, or None if not found."""
        return self._tools.get(name)

    def is_registered(self, name: str) -> bool:
        return name in self._tools

    def list_names(self) -> set[str]:
        """Return all registered tool names."""
        return set(self._tools)

    def declarations_for_provider(self) -> list[ToolSchema]:
        """Return every tool's declaration, in registration order."""
        return [t.to_schema() for t in self._tools.values()]

    def __len__(self) -> int:
        return len(self._tools)

    def __repr__(self) -> str:
        return f"<ToolRegistry tools={list(self._tools.keys())}>"
