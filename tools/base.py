"""
tools/base.py — BaseTool Abstract Base Class

Every AxonerAI tool subclasses BaseTool and declares its name, description
and JSON input schema as class attributes.

Rules for tool authors:
  1. Declare `name`, `description`, `input_schema` as ClassVars.
  2. Implement `async execute(input: dict) -> str`.
  3. Raise ToolError when the input cannot be served. The executor wraps
     it in ToolExecutionError and the agent run fails; tool errors are not
     fed back to the model.
  4. Tools are shared across concurrent runs, so keep no per-call state on self.

Example:
    class GreetTool(BaseTool):
        name = "greet"
        description = "Return a greeting for a given name."
        input_schema = {
            "type": "object",
            "properties": {"name": {"type": "string"}},
            "required": ["name"],
        }

        async def execute(self, input: dict) -> str:
            return f"Hello, {input['name']}!"
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, ClassVar, Optional

from tools.types import ToolSchema


def _empty_schema() -> dict[str, Any]:
    return {"type": "object", "properties": {}, "required": []}


class BaseTool(ABC):
    """Abstract base class for all tools the model may call."""

    name: ClassVar[str]
    description: ClassVar[str]
    input_schema: ClassVar[dict[str, Any]] = _empty_schema()

    @abstractmethod
    async def execute(self, input: dict[str, Any]) -> Any:
        """
        Run the tool and return its result.

        Strings are passed through; dicts/lists are serialised to JSON and
        None becomes "Done." by the executor.
        """
        ...

    def to_schema(self) -> ToolSchema:
        """Return the provider-neutral declaration for this tool."""
        return ToolSchema(
            name=self.name,
            description=self.description,
            input_schema=self.input_schema,
        )

    def __repr__(self) -> str:
        return f"<Tool:{self.name}>"


class FunctionTool(BaseTool):
    """
    Adapts a plain async function into a tool.

    The function receives the call's input as keyword arguments. Used by
    ToolRegistry.tool() so small tools don't need a class of their own.
    """

    # Instance attributes shadow the ClassVars declared on BaseTool.
    def __init__(
        self,
        name: str,
        description: str,
        fn: Callable[..., Awaitable[Any]],
        input_schema: Optional[dict[str, Any]] = None,
    ):
        self.name = name  # type: ignore[misc]
        self.description = description  # type: ignore[misc]
        self.input_schema = input_schema or _empty_schema()  # type: ignore[misc]
        self._fn = fn

    async def execute(self, input: dict[str, Any]) -> Any:
        return await self._fn(**input)
