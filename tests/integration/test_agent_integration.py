"""
tests/integration/test_agent_integration.py — Agent Integration Tests

Tests the full pipeline with real component wiring: provider client →
Agent → ToolExecutor → built-in calculator → FileSessionStore. Only the
vendor SDK call itself is mocked.

Coverage:
  - OpenAI-format tool call round trip through the calculator
  - Anthropic-format tool call round trip through the calculator
  - Session resumed from disk on the next run
  - Malformed tool arguments reach the executor as {} and fail validation

Run:
    pytest tests/integration/test_agent_integration.py -v
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

# ── path setup ────────────────────────────────────────────────────────────────
_ROOT = Path(__file__).parent.parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))
# ─────────────────────────────────────────────────────────────────────────────

from agent import Agent, FileSessionStore
from brain import LLMClientFactory
from exceptions import ToolExecutionError
from tools import build_default_registry


def _openai_completion(content=None, finish_reason="stop", tool_calls=None):
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(
        choices=[SimpleNamespace(message=message, finish_reason=finish_reason)],
        model="openai/gpt-oss-20b",
        usage=SimpleNamespace(prompt_tokens=20, completion_tokens=8),
    )


def _openai_tool_call(call_id, name, arguments):
    return SimpleNamespace(id=call_id, function=SimpleNamespace(name=name, arguments=arguments))


def _anthropic_message(blocks, stop_reason):
    return SimpleNamespace(
        content=blocks,
        stop_reason=stop_reason,
        model="claude-sonnet-4-20250514",
        usage=SimpleNamespace(input_tokens=20, output_tokens=8),
    )


@pytest.fixture
def store(tmp_path):
    return FileSessionStore(tmp_path / "sessions")


@pytest.fixture
def registry():
    return build_default_registry()


class TestGroqPipeline:
    @pytest.mark.asyncio
    async def test_calculator_round_trip(self, registry, store):
        llm = LLMClientFactory.create("groq", api_key="gsk-test")
        llm._client.chat.completions.create = AsyncMock(side_effect=[
            _openai_completion(
                finish_reason="tool_calls",
                tool_calls=[_openai_tool_call(
                    "call_1", "calculator",
                    json.dumps({"operation": "multiply", "a": 6, "b": 7}),
                )],
            ),
            _openai_completion(content="6 × 7 = 42"),
        ])
        agent = Agent(llm, registry, system_prompt="Use tools.", store=store)

        answer = await agent.run("What is 6 times 7?", session_id="sess_int")

        assert answer == "6 × 7 = 42"

        # Second request: system prompt first, then the replayed trace
        second = llm._client.chat.completions.create.call_args_list[1].kwargs
        wire = second["messages"]
        assert wire[0] == {"role": "system", "content": "Use tools."}
        assert wire[-1] == {"role": "user", "content": "Tool 'calculator' returned: 42"}
        assert {t["function"]["name"] for t in second["tools"]} == {
            "calculator", "web_search", "web_scrape",
        }

        snapshot = json.loads(
            (store.base_dir / "sess_int" / "messages.json").read_text(encoding="utf-8")
        )
        assert snapshot["messages"][-1] == {"role": "assistant", "content": "6 × 7 = 42"}

    @pytest.mark.asyncio
    async def test_session_resumed_from_disk(self, registry, store):
        llm = LLMClientFactory.create("groq", api_key="gsk-test")
        llm._client.chat.completions.create = AsyncMock(side_effect=[
            _openai_completion(content="Hi, I'm here."),
            _openai_completion(content="You said hello."),
        ])

        await Agent(llm, registry, store=store).run("hello", session_id="sess_resume")
        # A fresh Agent sees the history written by the first one
        await Agent(llm, registry, store=store).run("what did I say?", session_id="sess_resume")

        wire = llm._client.chat.completions.create.call_args_list[1].kwargs["messages"]
        assert [m["content"] for m in wire] == ["hello", "Hi, I'm here.", "what did I say?"]

    @pytest.mark.asyncio
    async def test_malformed_arguments_fail_validation(self, registry, store):
        llm = LLMClientFactory.create("openai", api_key="sk-test")
        llm._client.chat.completions.create = AsyncMock(return_value=_openai_completion(
            finish_reason="tool_calls",
            tool_calls=[_openai_tool_call("call_1", "calculator", "{broken")],
        ))

        with pytest.raises(ToolExecutionError, match="Missing required field"):
            await Agent(llm, registry, store=store).run("calc", session_id="sess_bad")
        assert not store.exists("sess_bad")


class TestAnthropicPipeline:
    @pytest.mark.asyncio
    async def test_calculator_round_trip(self, registry, store):
        llm = LLMClientFactory.create("anthropic", api_key="sk-ant-test")
        llm._client.messages.create = AsyncMock(side_effect=[
            _anthropic_message(
                [
                    SimpleNamespace(type="text", text="I'll divide."),
                    SimpleNamespace(
                        type="tool_use", id="toolu_1", name="calculator",
                        input={"operation": "divide", "a": 9, "b": 2},
                    ),
                ],
                stop_reason="tool_use",
            ),
            _anthropic_message([SimpleNamespace(type="text", text="4.5")], stop_reason="end_turn"),
        ])

        result = await Agent(llm, registry, store=store).run_turn("9/2", session_id="sess_ant")

        assert result.text == "4.5"
        assert result.iterations == 2
        second = llm._client.messages.create.call_args_list[1].kwargs
        assert second["messages"][-1] == {
            "role": "user",
            "content": "Tool 'calculator' returned: 4.5",
        }
