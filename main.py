"""
main.py — AxonerAI Entry Point

Usage:
    python main.py                              # interactive REPL
    python main.py --prompt "What is 7 * 6?"    # single turn, print answer
    python main.py --session sess_demo          # resume / name a session
    python main.py --log-level DEBUG            # verbose logging
    python main.py --config path/to/config.yaml
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root before settings are read
ENV_PATH = Path(__file__).parent / ".env"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="axonerai",
        description="AxonerAI — tool-using LLM agent",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: $AXONERAI_CONFIG or the bundled config/config.yaml)",
    )
    parser.add_argument(
        "--session",
        default=None,
        help="Session id to resume or create (default: a fresh sess_<id>)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Override log level from config",
    )
    parser.add_argument(
        "--prompt",
        default=None,
        help="Run a single turn with this message, print the answer and exit",
    )
    return parser.parse_args(argv)


def bootstrap(args: argparse.Namespace):
    """
    Load config, validate it fully, and set up logging.
    Returns (settings, log) ready for use.

    Exits with code 1 (after printing a clear message) if:
      - config.yaml has invalid values (Pydantic ValidationError)
      - cross-field problems are found (ConfigError from validate_all())
    """
    from pydantic import ValidationError

    from config.settings import ConfigError, load_settings
    from observability.logger import get_logger, setup_logging_from_settings

    # -- Load and parse -------------------------------------------------------
    try:
        settings = load_settings(args.config)
    except ValidationError as exc:
        problems = "\n".join(
            f"  • {'.'.join(str(p) for p in e['loc']) or '?'}: {e['msg']}"
            for e in exc.errors()
        )
        print(
            f"\n❌  Config validation failed:\n\n{problems}\n\n"
            f"    Fix config/config.yaml or your .env file and restart.\n",
            file=sys.stderr,
        )
        sys.exit(1)
    except (OSError, ValueError) as exc:
        print(
            f"\n❌  Failed to load config: {type(exc).__name__}: {exc}\n",
            file=sys.stderr,
        )
        sys.exit(1)

    # -- Cross-field validation -----------------------------------------------
    try:
        settings.validate_all()
    except ConfigError as exc:
        print(str(exc), file=sys.stderr)
        sys.exit(1)

    # -- Logging (--log-level overrides config.yaml) --------------------------
    setup_logging_from_settings(settings, level=args.log_level)

    log = get_logger("axonerai.main")
    return settings, log


def build_agent(settings):
    """Wire provider, tools and session store into an Agent."""
    from agent import Agent, FileSessionStore, InMemorySessionStore
    from brain import LLMClientFactory
    from tools import build_default_registry

    llm_client = LLMClientFactory.from_settings(settings)
    registry = build_default_registry(settings)
    # With persistence off the REPL still needs history for the process lifetime
    if settings.sessions.enabled:
        store = FileSessionStore(settings.sessions_dir)
    else:
        store = InMemorySessionStore()
    return Agent.from_settings(settings, llm_client=llm_client, registry=registry, store=store)


async def main(argv: list[str] | None = None) -> int:
    load_dotenv(dotenv_path=ENV_PATH)
    args = parse_args(argv)
    settings, log = bootstrap(args)

    from exceptions import AxonerError

    log.info(
        "axonerai.starting",
        provider=settings.active_provider,
        model=settings.llm.model,
        sessions=settings.sessions.enabled,
    )

    try:
        agent = build_agent(settings)
    except AxonerError as e:
        log.error("axonerai.init_failed", error=str(e), error_type=type(e).__name__)
        print(f"\n❌  Failed to initialise agent: {e}\n", file=sys.stderr)
        return 1

    log.info("axonerai.ready", agent=repr(agent))

    # ── Single turn ───────────────────────────────────────────────────────────
    if args.prompt is not None:
        try:
            answer = await agent.run(args.prompt, session_id=args.session)
        except AxonerError as e:
            log.error("axonerai.turn_failed", error=str(e), error_type=type(e).__name__)
            print(f"\n❌  {type(e).__name__}: {e}\n", file=sys.stderr)
            return 1
        print(answer)
        return 0

    # ── Interactive REPL ──────────────────────────────────────────────────────
    from interfaces.cli import run_cli
    await run_cli(agent, settings, session_id=args.session)
    return 0


def cli() -> None:
    """Console-script entry point."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    cli()
