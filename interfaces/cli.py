"""
interfaces/cli.py — AxonerAI CLI Interface

Interactive REPL for the agent. Uses rich for terminal rendering and
aioconsole for async input.

  - One session per REPL: every message continues the same conversation.
    The Agent needs a store for that; main.py passes an in-memory one when
    sessions.enabled is false, so history then lasts only for the process.
  - Prints each answer and how long it took
  - exit / quit / Ctrl+D leave; Ctrl+C during a turn abandons that turn

Usage:
    python main.py
    python main.py --session sess_demo --log-level DEBUG
"""

from __future__ import annotations

import asyncio
import time
from typing import Optional

import aioconsole
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

from agent.agent import Agent, TurnOutcome, TurnResult
from agent.session import Session
from exceptions import AxonerError
from observability.logger import get_logger

log = get_logger(__name__)

_EXIT_WORDS = ("exit", "quit")

_OUTCOME_STYLES = {
    TurnOutcome.RESPONDED:      "cyan",
    TurnOutcome.NO_RESPONSE:    "dim",
    TurnOutcome.MAX_TOKENS:     "yellow",
    TurnOutcome.MAX_ITERATIONS: "yellow",
    TurnOutcome.STOPPED:        "yellow",
    TurnOutcome.PROTOCOL_VIOLATION: "red",
}


class CLIInterface:
    """Async input loop around a single Agent and session id."""

    def __init__(
        self,
        agent: Agent,
        session_id: Optional[str] = None,
        agent_name: str = "AxonerAI",
        tool_names: Optional[list[str]] = None,
        console: Optional[Console] = None,
    ):
        self.agent = agent
        self.session_id = session_id or Session.create().session_id
        self.agent_name = agent_name
        self.tool_names = tool_names or []
        self.console = console or Console()

    async def start(self) -> None:
        self._print_banner()
        await self._repl_loop()

    # ── Banner ────────────────────────────────────────────────────────────────

    def _print_banner(self) -> None:
        tools = ", ".join(self.tool_names) if self.tool_names else "none"
        self.console.print(
            Panel(
                f"[bold]{self.agent_name}[/]  ·  "
                f"Session: [dim]{self.session_id}[/]\n"
                f"Tools: [cyan]{tools}[/]\n\n"
                f"Type your message. [bold]exit[/] or Ctrl+D to quit.",
                border_style="cyan",
                padding=(0, 2),
            )
        )

    # ── REPL Loop ─────────────────────────────────────────────────────────────

    async def _repl_loop(self) -> None:
        while True:
            try:
                user_input = await aioconsole.ainput("You> ")
            except (EOFError, KeyboardInterrupt):
                self.console.print("\n[dim]Bye![/]")
                break

            user_input = user_input.strip()
            if not user_input:
                continue

            if user_input.lower() in _EXIT_WORDS:
                self.console.print("[dim]Bye![/]")
                break

            await self.ask(user_input)

        log.info("cli.shutdown", session_id=self.session_id)

    async def ask(self, user_input: str) -> Optional[TurnResult]:
        """Run one turn and render it. Agent errors are shown, not raised."""
        t0 = time.monotonic()
        try:
            with self.console.status("[dim]Thinking…[/]", spinner="dots"):
                result = await self.agent.run_turn(user_input, session_id=self.session_id)
        except asyncio.CancelledError:
            self.console.print("[dim]Cancelled.[/]")
            return None
        except AxonerError as e:
            log.error("cli.turn_failed", error=str(e), error_type=type(e).__name__)
            self._render_error(e)
            return None

        self._render_result(result, time.monotonic() - t0)
        return result

    # ── Rendering ─────────────────────────────────────────────────────────────

    def _render_result(self, result: TurnResult, elapsed: float) -> None:
        text = result.text.strip()
        style = _OUTCOME_STYLES.get(result.outcome, "cyan")
        if text:
            self.console.print(Panel(Markdown(text), border_style=style, padding=(0, 2)))
        self.console.print(
            f"[dim]Time taken for response: {elapsed:.2f}s · "
            f"{result.iterations} iteration(s)[/]"
        )

    def _render_error(self, error: AxonerError) -> None:
        self.console.print(
            Panel(
                str(error),
                title=f"[red]{type(error).__name__}[/]",
                border_style="red",
                padding=(0, 1),
            )
        )


# ── Public entry point ────────────────────────────────────────────────────────


async def run_cli(agent: Agent, settings, session_id: Optional[str] = None) -> None:
    """Entry point called from main.py."""
    cli = CLIInterface(
        agent=agent,
        session_id=session_id,
        agent_name=settings.agent_name,
        tool_names=sorted(agent.tool_names),
    )
    log.info("cli.starting", session_id=cli.session_id)
    try:
        await cli.start()
    except KeyboardInterrupt:
        log.info("cli.interrupted")
