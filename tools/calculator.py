"""
tools/calculator.py — Calculator Tool

Basic two-operand arithmetic so the model does not have to do sums in its
head.

Registered as:
  - calculator → add | subtract | multiply | divide
"""

from __future__ import annotations

import operator
from typing import Any

from exceptions import ToolError
from tools.base import BaseTool

_OPERATIONS = {
    "add": operator.add,
    "subtract": operator.sub,
    "multiply": operator.mul,
    "divide": operator.truediv,
}


class Calculator(BaseTool):
    name = "calculator"
    description = "Perform basic arithmetic operations (add, subtract, multiply, divide)"
    input_schema = {
        "type": "object",
        "properties": {
            "operation": {
                "type": "string",
                "enum": list(_OPERATIONS),
                "description": "The arithmetic operation to perform",
            },
            "a": {"type": "number", "description": "First number"},
            "b": {"type": "number", "description": "Second number"},
        },
        "required": ["operation", "a", "b"],
    }

    async def execute(self, input: dict[str, Any]) -> str:
        operation = input.get("operation")
        try:
            a = float(input["a"])
            b = float(input["b"])
        except (KeyError, TypeError, ValueError) as e:
            raise ToolError(f"Invalid calculator input: {e}") from e

        fn = _OPERATIONS.get(operation)
        if fn is None:
            raise ToolError(f"Unknown operation: {operation}")
        if operation == "divide" and b == 0:
            raise ToolError("Cannot divide by zero")

        return _format_number(fn(a, b))


def _format_number(value: float) -> str:
    """Render whole numbers without a trailing .0 (10 / 2 → "5")."""
    if value.is_integer():
        return str(int(value))
    return str(value)
