"""
tests/unit/test_cli.py — CLI and entry point tests

Run with:
    pytest tests/unit/test_cli.py -v
"""

from __future__ import annotations

import io
from unittest.mock import AsyncMock

import pytest
from rich.console import Console

import main
from agent.agent import Agent, TurnOutcome, TurnResult
from agent.session_store import FileSessionStore, InMemorySessionStore
from brain.llm_client import BaseLLMClient
from brain.types import CompletionResponse, Provider, StopReason
from config.settings import Settings
from exceptions import ToolNotFoundError
from interfaces.cli import CLIInterface
from tools.tool_registry import ToolRegistry


def _console() -> tuple[Console, io.StringIO]:
    buf = io.StringIO()
    return Console(file=buf, force_terminal=False, width=100), buf


class TestParseArgs:
    def test_defaults(self):
        args = main.parse_args([])
        assert args.config is None
        assert args.session is None
        assert args.log_level is None
        assert args.prompt is None

    def test_all_flags(self):
        args = main.parse_args([
            "--config", "c.yaml", "--session", "sess_1",
            "--log-level", "DEBUG", "--prompt", "hi",
        ])
        assert (args.config, args.session, args.log_level, args.prompt) == (
            "c.yaml", "sess_1", "DEBUG", "hi",
        )

    def test_bad_log_level(self):
        with pytest.raises(SystemExit):
            main.parse_args(["--log-level", "LOUD"])


class TestCLIInterface:
    @pytest.mark.asyncio
    async def test_ask_renders_answer_and_time(self):
        agent = AsyncMock()
        agent.run_turn.return_value = TurnResult(
            text="The answer is 4.", outcome=TurnOutcome.RESPONDED,
            session_id="sess_cli", iterations=2,
        )
        console, buf = _console()
        cli = CLIInterface(agent, session_id="sess_cli", console=console)

        result = await cli.ask("2+2?")

        assert result.text == "The answer is 4."
        agent.run_turn.assert_awaited_once_with("2+2?", session_id="sess_cli")
        out = buf.getvalue()
        assert "The answer is 4." in out
        assert "Time taken for response" in out

    @pytest.mark.asyncio
    async def test_ask_shows_errors(self):
        agent = AsyncMock()
        agent.run_turn.side_effect = ToolNotFoundError("teleport")
        console, buf = _console()
        cli = CLIInterface(agent, session_id="sess_cli", console=console)

        assert await cli.ask("go") is None
        assert "Tool not found: teleport" in buf.getvalue()

    def test_mints_session_id(self):
        cli = CLIInterface(AsyncMock(), console=_console()[0])
        assert cli.session_id.startswith("sess_")

    @pytest.mark.asyncio
    async def test_repl_exits_on_quit(self, monkeypatch):
        import interfaces.cli as cli_module

        inputs = iter(["", "hello", "quit"])
        monkeypatch.setattr(cli_module.aioconsole, "ainput", AsyncMock(side_effect=lambda _p: next(inputs)))

        agent = AsyncMock()
        agent.run_turn.return_value = TurnResult(
            text="hi!", outcome=TurnOutcome.RESPONDED, session_id="s", iterations=1,
        )
        console, buf = _console()
        await CLIInterface(agent, session_id="s", console=console).start()

        agent.run_turn.assert_awaited_once_with("hello", session_id="s")
        assert "Bye!" in buf.getvalue()


class EchoLLM(BaseLLMClient):
    """Answers with the number of messages it was sent."""

    provider = Provider.GROQ
    default_model = "echo"

    def __init__(self):
        super().__init__(api_key="test")

    async def complete(self, messages, tools=None, max_tokens=None, system_prompt=None):
        return CompletionResponse(text=f"seen {len(messages)}", stop_reason=StopReason.END_TURN)


class TestBuildAgent:
    def test_file_store_when_sessions_enabled(self, tmp_path):
        settings = Settings(GROQ_API_KEY="gsk-test", sessions={"base_dir": str(tmp_path)})
        agent = main.build_agent(settings)
        assert isinstance(agent._store, FileSessionStore)

    def test_memory_store_when_sessions_disabled(self):
        settings = Settings(GROQ_API_KEY="gsk-test", sessions={"enabled": False})
        agent = main.build_agent(settings)
        assert isinstance(agent._store, InMemorySessionStore)

    @pytest.mark.asyncio
    async def test_repl_continues_conversation_without_persistence(self, monkeypatch):
        import interfaces.cli as cli_module

        inputs = iter(["first", "second", "quit"])
        monkeypatch.setattr(cli_module.aioconsole, "ainput", AsyncMock(side_effect=lambda _p: next(inputs)))

        agent = Agent(EchoLLM(), ToolRegistry(), store=InMemorySessionStore())
        console, buf = _console()
        await CLIInterface(agent, console=console).start()

        out = buf.getvalue()
        assert "seen 1" in out
        # Second turn sees user, assistant, user
        assert "seen 3" in out


class TestMainPrompt:
    @pytest.mark.asyncio
    async def test_single_prompt(self, monkeypatch, tmp_path, capsys):
        monkeypatch.setenv("GROQ_API_KEY", "gsk-test")
        monkeypatch.setattr(main, "load_dotenv", lambda **kw: None)
        monkeypatch.setattr(
            "observability.logger.setup_logging_from_settings", lambda settings, level=None: None
        )
        fake_agent = AsyncMock()
        fake_agent.run.return_value = "forty-two"
        monkeypatch.setattr(main, "build_agent", lambda settings: fake_agent)

        code = await main.main(["--config", str(tmp_path / "none.yaml"), "--prompt", "6*7?"])

        assert code == 0
        assert capsys.readouterr().out.strip() == "forty-two"
        fake_agent.run.assert_awaited_once_with("6*7?", session_id=None)

    @pytest.mark.asyncio
    async def test_missing_key_exits(self, monkeypatch, tmp_path):
        monkeypatch.setattr(main, "load_dotenv", lambda **kw: None)
        with pytest.raises(SystemExit) as exc_info:
            await main.main(["--config", str(tmp_path / "none.yaml"), "--prompt", "hi"])
        assert exc_info.value.code == 1
