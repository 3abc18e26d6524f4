"""
tools/tool_executor.py — Tool Executor

Sits between the provider's tool calls and the tools themselves.

Flow:
  ToolCall → ToolExecutor.execute_one()
    → Registry lookup          (ToolNotFoundError if absent)
    → Parameter validation     (JSON schema: required fields + types)
    → Tool execution           (async, with timeout)
    → ToolResult               (normalised + truncated text)

Any failure after the lookup is raised as ToolExecutionError carrying the
tool name and the original cause. Nothing is swallowed: the agent run that
issued the call fails with it.
"""

from __future__ import annotations

import asyncio
import json
import time
from typing import Any, Optional

from exceptions import ToolExecutionError, ToolNotFoundError
from observability.logger import get_logger
from tools.tool_registry import ToolRegistry
from tools.types import ToolCall, ToolResult

log = get_logger(__name__)

# Max output size fed back to the model; truncate beyond this
MAX_RESULT_CHARS = 8_000

# Default tool execution timeout
DEFAULT_TIMEOUT_SECONDS = 30.0


class _ToolRaisedTimeout(Exception):
    """A TimeoutError raised by the tool itself, not by the executor deadline."""

    def __init__(self, cause: BaseException):
        super().__init__(str(cause))
        self.cause = cause


async def _run_tool(tool, input: dict[str, Any]) -> Any:
    # asyncio.TimeoutError is the builtin TimeoutError on 3.11+, so a tool's
    # own timeout would otherwise look like wait_for firing.
    try:
        return await tool.execute(input)
    except asyncio.TimeoutError as e:
        raise _ToolRaisedTimeout(e) from e


class ToolExecutor:
    """
    Resolves tool calls against the registry and runs them.

    Usage:
        executor = ToolExecutor(registry)
        results = await executor.execute_all(response.tool_calls)
    """

    def __init__(
        self,
        registry: ToolRegistry,
        timeout_seconds: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
        max_result_chars: int = MAX_RESULT_CHARS,
        max_concurrency: int = 1,
    ):
        """
        Args:
            registry:         Registry with all available tools.
            timeout_seconds:  Max seconds a tool may run before being cancelled.
                              None disables the timeout.
            max_result_chars: Results longer than this are truncated.
            max_concurrency:  1 = strictly sequential. Higher values run a
                              turn's calls concurrently under a semaphore.
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self.registry = registry
        self.timeout_seconds = timeout_seconds
        self.max_result_chars = max_result_chars
        self.max_concurrency = max_concurrency

    async def execute_one(self, call: ToolCall) -> ToolResult:
        """
        Execute a single tool call.

        Raises:
            ToolNotFoundError:  call.name is not registered.
            ToolExecutionError: invalid arguments, the tool raised, or it timed out.
        """
        start_ms = time.monotonic() * 1000

        log.info("tool_executor.dispatch", tool=call.name, tool_call_id=call.id)

        # ── Step 1: Registry lookup ───────────────────────────────────────────
        tool = self.registry.get(call.name)
        if tool is None:
            log.warning(
                "tool_executor.not_found",
                tool=call.name,
                available=sorted(self.registry.list_names()),
            )
            raise ToolNotFoundError(call.name)

        # ── Step 2: Parameter validation ──────────────────────────────────────
        validation_error = _validate_args(call.input, tool.input_schema)
        if validation_error:
            log.warning("tool_executor.invalid_args", tool=call.name, error=validation_error)
            raise ToolExecutionError(call.name, ValueError(f"Invalid parameters: {validation_error}"))

        # ── Step 3: Execute with timeout ──────────────────────────────────────
        try:
            raw_result = await asyncio.wait_for(
                _run_tool(tool, call.input),
                timeout=self.timeout_seconds,
            )
        except _ToolRaisedTimeout as e:
            duration_ms = time.monotonic() * 1000 - start_ms
            log.error(
                "tool_executor.execution_error",
                tool=call.name,
                error=str(e.cause),
                error_type=type(e.cause).__name__,
                duration_ms=round(duration_ms, 1),
            )
            raise ToolExecutionError(call.name, e.cause) from e.cause
        except asyncio.TimeoutError as e:
            log.error(
                "tool_executor.timeout",
                tool=call.name,
                timeout_seconds=self.timeout_seconds,
            )
            raise ToolExecutionError(
                call.name,
                TimeoutError(f"timed out after {self.timeout_seconds}s"),
            ) from e
        except Exception as e:
            duration_ms = time.monotonic() * 1000 - start_ms
            log.error(
                "tool_executor.execution_error",
                tool=call.name,
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=round(duration_ms, 1),
            )
            raise ToolExecutionError(call.name, e) from e

        # ── Step 4: Normalise and truncate result ─────────────────────────────
        duration_ms = time.monotonic() * 1000 - start_ms
        content = _truncate(_normalise_result(raw_result), self.max_result_chars)

        log.info(
            "tool_executor.success",
            tool=call.name,
            tool_call_id=call.id,
            duration_ms=round(duration_ms, 1),
            result_chars=len(content),
        )

        return ToolResult(
            tool_call_id=call.id,
            tool_name=call.name,
            result=content,
            duration_ms=duration_ms,
        )

    async def execute_all(self, calls: list[ToolCall]) -> list[ToolResult]:
        """
        Execute a turn's tool calls and return results in call order.

        Fail-fast: the first failure propagates and later calls are not
        attempted (sequential) or are cancelled (concurrent).
        """
        if self.max_concurrency == 1 or len(calls) <= 1:
            results: list[ToolResult] = []
            for call in calls:
                results.append(await self.execute_one(call))
            return results

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _bounded(call: ToolCall) -> ToolResult:
            async with semaphore:
                return await self.execute_one(call)

        tasks = [asyncio.ensure_future(_bounded(c)) for c in calls]
        try:
            # gather keeps positional order regardless of completion order
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────


_JSON_TYPE_MAP: dict[str, type | tuple] = {
    "string":  str,
    "integer": int,
    "number":  (int, float),
    "boolean": bool,
    "array":   list,
    "object":  dict,
}


def _validate_args(arguments: dict[str, Any], schema: dict[str, Any]) -> Optional[str]:
    """
    Validate tool arguments against the JSON schema.
    Returns an error string if invalid, None if valid.

    Checks:
      1. All required fields are present.
      2. Provided values match the declared JSON Schema types.
    """
    required = schema.get("required", [])
    properties = schema.get("properties", {})

    for field in required:
        if field not in arguments:
            return f"Missing required field: '{field}'"

    for field, value in arguments.items():
        prop_schema = properties.get(field)
        if prop_schema is None:
            continue  # unknown fields pass through
        json_type = prop_schema.get("type")
        expected = _JSON_TYPE_MAP.get(json_type) if isinstance(json_type, str) else None
        if expected is None:
            continue
        # bool is a subclass of int
        if json_type in ("integer", "number") and isinstance(value, bool):
            return f"Field '{field}': expected {json_type}, got boolean"
        if not isinstance(value, expected):
            return f"Field '{field}': expected {json_type}, got {type(value).__name__}"

    return None


def _normalise_result(result: Any) -> str:
    """Convert any tool return value to a string."""
    if result is None:
        return "Done."
    if isinstance(result, str):
        return result
    if isinstance(result, (dict, list)):
        try:
            return json.dumps(result, indent=2, default=str)
        except (TypeError, ValueError):
            return str(result)
    return str(result)


def _truncate(text: str, max_chars: int) -> str:
    """Truncate result if too long, with a notice."""
    if len(text) <= max_chars:
        return text
    return (
        text[:max_chars]
        + f"\n\n[Output truncated — {len(text) - max_chars} chars omitted. "
        f"Total: {len(text)} chars]"
    )
