"""
agent/agent.py — Agent Control Loop

Drives one conversation turn: call the provider, run any tools it asks for,
feed the results back, repeat until the model answers or a bound is hit.

Per iteration, the response's stop_reason alone picks the transition:

    END_TURN        → append answer, persist, return it
    TOOL_USE        → run all calls, append trace + results, loop
    MAX_TOKENS      → return the truncation notice
    CONTENT_FILTER  → return "stopped with reason"
    ERROR           → return "stopped with reason" (or ProtocolViolation)

Soft outcomes come back as ordinary text in a TurnResult. Provider, tool and
store failures propagate to the caller.

Usage:
    agent = Agent(llm_client, registry, store=FileSessionStore("./data/sessions"))
    answer = await agent.run("What is 12 * 7?", session_id="sess_demo")
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from agent.session import Session
from agent.session_store import SessionStore
from brain.llm_client import BaseLLMClient
from brain.types import CompletionResponse, Message, StopReason
from exceptions import ProtocolViolation
from observability.logger import bind_session, clear_session, get_logger
from tools.tool_executor import ToolExecutor
from tools.tool_registry import ToolRegistry
from tools.types import ToolCall, ToolResult

log = get_logger(__name__)

# Max provider round trips per user turn
_MAX_ITER = 10

NO_RESPONSE_TEXT = "(No response from agent)"
EMPTY_TOOL_USE_TEXT = "Agent wanted to use tools but didn't specify any"
MAX_TOKENS_TEXT = "Agent hit max tokens limit"


class TurnOutcome(str, Enum):
    RESPONDED = "responded"                     # END_TURN with text
    NO_RESPONSE = "no_response"                 # END_TURN without text
    PROTOCOL_VIOLATION = "protocol_violation"   # TOOL_USE with no calls
    MAX_TOKENS = "max_tokens"
    STOPPED = "stopped"                         # content filter / unknown reason
    MAX_ITERATIONS = "max_iterations"


@dataclass
class TurnResult:
    text: str
    outcome: TurnOutcome
    session_id: str
    iterations: int

    @property
    def responded(self) -> bool:
        return self.outcome == TurnOutcome.RESPONDED


class Agent:
    """
    Runs the completion → tools → completion loop for one session at a time.

    The provider, registry and executor are read-only during a run, so one
    Agent may serve many sessions concurrently. Runs against the same
    session_id must be serialised by the caller: snapshots are whole-file
    overwrites.
    """

    def __init__(
        self,
        llm_client: BaseLLMClient,
        registry: ToolRegistry,
        system_prompt: Optional[str] = None,
        store: Optional[SessionStore] = None,
        max_iterations: int = _MAX_ITER,
        max_tokens: Optional[int] = None,
        executor: Optional[ToolExecutor] = None,
        strict_protocol: bool = False,
    ):
        if max_iterations < 1:
            raise ValueError("max_iterations must be >= 1")
        self._llm = llm_client
        self._registry = registry
        self._system_prompt = system_prompt
        self._store = store
        self._max_iter = max_iterations
        self._max_tokens = max_tokens
        self._executor = executor or ToolExecutor(registry)
        self._strict = strict_protocol

    @property
    def max_iterations(self) -> int:
        return self._max_iter

    @property
    def tool_names(self) -> set[str]:
        return self._registry.list_names()

    # ─────────────────────────────────────────────────────────────────────────
    # Public
    # ─────────────────────────────────────────────────────────────────────────

    async def run(self, user_input: str, session_id: Optional[str] = None) -> str:
        """Process one user message and return the agent's final text."""
        result = await self.run_turn(user_input, session_id=session_id)
        return result.text

    async def run_turn(self, user_input: str, session_id: Optional[str] = None) -> TurnResult:
        """
        Process one user message and return the text plus how the turn ended.

        Raises:
            ProviderError:      the completion call failed.
            ToolNotFoundError:  the model named an unregistered tool.
            ToolExecutionError: a tool failed; the rest of the batch is skipped.
            SessionStoreError:  the snapshot could not be loaded or saved.
            ProtocolViolation:  strict_protocol is on and the provider broke the contract.
        """
        session = self._open_session(session_id)
        bind_session(session.session_id)

        log.info("agent.turn_start", user_input=user_input[:120],
                 messages=len(session.messages))
        t0 = time.monotonic()

        try:
            session.add_user_message(user_input)
            result = await self._loop(session)
            log.info("agent.turn_done", outcome=result.outcome.value,
                     iterations=result.iterations,
                     ms=round((time.monotonic() - t0) * 1000))
            return result
        finally:
            clear_session()

    # ─────────────────────────────────────────────────────────────────────────
    # Inner loop
    # ─────────────────────────────────────────────────────────────────────────

    async def _loop(self, session: Session) -> TurnResult:
        tools = self._registry.declarations_for_provider()

        for iteration in range(1, self._max_iter + 1):
            log.debug("agent.llm_call", iteration=iteration, msg_count=len(session.messages))

            response: CompletionResponse = await self._llm.complete(
                messages=session.get_messages(),
                tools=tools or None,
                max_tokens=self._max_tokens,
                system_prompt=self._system_prompt,
            )
            stop = response.stop_reason

            log.debug("agent.llm_response", iteration=iteration, stop_reason=stop.value,
                      tool_calls=len(response.tool_calls),
                      tokens=response.usage.total_tokens)

            # ── Final answer ──────────────────────────────────────────────────
            if stop == StopReason.END_TURN:
                if response.text is None:
                    return self._finish(session, NO_RESPONSE_TEXT, TurnOutcome.NO_RESPONSE, iteration)
                session.add_assistant_message(response.text)
                return self._finish(session, response.text, TurnOutcome.RESPONDED, iteration)

            # ── Tool round trip ───────────────────────────────────────────────
            if stop == StopReason.TOOL_USE:
                if not response.has_tool_calls:
                    log.warning("agent.empty_tool_use", iteration=iteration)
                    if self._strict:
                        raise ProtocolViolation("Provider returned tool_use without any tool calls")
                    return self._finish(
                        session, EMPTY_TOOL_USE_TEXT, TurnOutcome.PROTOCOL_VIOLATION, iteration,
                    )

                if response.text:
                    log.debug("agent.thinking", text=response.text[:200])

                # Run the whole batch first: a failed or cancelled batch
                # leaves no trace in the session.
                results = await self._executor.execute_all(response.tool_calls)
                session.add_assistant_message(format_tool_use(response.tool_calls))
                session.add_message(Message.user(format_tool_results(results)))
                continue

            # ── Other terminal reasons ────────────────────────────────────────
            if stop == StopReason.MAX_TOKENS:
                return self._finish(session, MAX_TOKENS_TEXT, TurnOutcome.MAX_TOKENS, iteration)

            if stop == StopReason.ERROR and self._strict:
                raise ProtocolViolation("Provider returned an unrecognised stop reason")
            return self._finish(
                session, f"Agent stopped with reason: {stop.value}", TurnOutcome.STOPPED, iteration,
            )

        log.warning("agent.max_iter_reached", iterations=self._max_iter)
        return self._finish(
            session,
            f"Agent reached max iterations ({self._max_iter})",
            TurnOutcome.MAX_ITERATIONS,
            self._max_iter,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Session handling
    # ─────────────────────────────────────────────────────────────────────────

    def _open_session(self, session_id: Optional[str]) -> Session:
        if self._store is not None and session_id and self._store.exists(session_id):
            session = self._store.load(session_id)
            log.debug("agent.session_resumed", session_id=session_id,
                      messages=len(session.messages))
            return session
        return Session.create(session_id)

    def _finish(
        self,
        session: Session,
        text: str,
        outcome: TurnOutcome,
        iterations: int,
    ) -> TurnResult:
        if self._store is not None:
            self._store.save(session)
        return TurnResult(
            text=text,
            outcome=outcome,
            session_id=session.session_id,
            iterations=iterations,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Factory
    # ─────────────────────────────────────────────────────────────────────────

    @classmethod
    def from_settings(
        cls,
        settings,
        llm_client: BaseLLMClient,
        registry: ToolRegistry,
        store: Optional[SessionStore] = None,
    ) -> "Agent":
        """Create an Agent from the AxonerAI Settings object."""
        executor = ToolExecutor(
            registry,
            timeout_seconds=settings.tools.timeout_seconds,
            max_result_chars=settings.tools.max_result_chars,
            max_concurrency=settings.tools.max_concurrency,
        )
        return cls(
            llm_client=llm_client,
            registry=registry,
            system_prompt=settings.agent.system_prompt,
            store=store,
            max_iterations=settings.agent.max_iterations,
            max_tokens=settings.llm.max_tokens,
            executor=executor,
            strict_protocol=settings.agent.strict_protocol,
        )

    def __repr__(self) -> str:
        return f"<Agent llm={self._llm!r} tools={len(self._registry)} max_iter={self._max_iter}>"


# ─────────────────────────────────────────────────────────────────────────────
# Trace formatting
# ─────────────────────────────────────────────────────────────────────────────


def format_tool_use(tool_calls: list[ToolCall]) -> str:
    """One "Using tool" line per call, input as compact JSON."""
    return "\n".join(
        f"Using tool '{call.name}' with input: "
        f"{json.dumps(call.input, separators=(',', ':'), default=str)}"
        for call in tool_calls
    )


def format_tool_results(results: list[ToolResult]) -> str:
    return "\n".join(
        f"Tool '{result.tool_name}' returned: {result.result}"
        for result in results
    )
