"""
observability/logger.py — AxonerAI Structured Logger

structlog routed through stdlib logging:
  - JSON lines to a rotating file (data/logs/axonerai.log)
  - Optional console output, JSON or coloured key=value
  - session_id bound via contextvars for the duration of an agent run

Usage:
    from observability.logger import get_logger, setup_logging

    setup_logging(level="DEBUG", log_dir="./data/logs")   # once at startup
    log = get_logger(__name__)
    log.info("tool_executor.success", tool="calculator", duration_ms=0.4)
    log.warning("tool.overwritten", tool="calculator")

Event names are dotted: <component>.<event>.
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any, Optional

import structlog

_LOG_FILE = "axonerai.log"


# ─────────────────────────────────────────────────────────────────────────────
# Public API
# ─────────────────────────────────────────────────────────────────────────────


def setup_logging(
    level: str = "INFO",
    log_dir: Optional[str | Path] = "./data/logs",
    json_format: bool = True,
    console_output: bool = True,
    max_bytes: int = 100 * 1024 * 1024,   # 100 MB
    backup_count: int = 5,
) -> None:
    """
    Configure structlog and stdlib logging. Call once at application startup.

    Args:
        level:          DEBUG | INFO | WARNING | ERROR | CRITICAL
        log_dir:        Directory for the rotating log file. None disables it.
        json_format:    Console emits JSON when True, coloured text otherwise.
                        The file is always JSON.
        console_output: Whether to log to stderr at all.
        max_bytes:      Size at which the log file rotates.
        backup_count:   Rotated files kept.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    json_formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.JSONRenderer(),
        ],
        foreign_pre_chain=shared_processors,
    )

    handlers: list[logging.Handler] = []

    # ── File handler (always JSON) ────────────────────────────────────────────
    if log_dir is not None:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_path / _LOG_FILE,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(json_formatter)
        handlers.append(file_handler)

    # ── Console handler (JSON or pretty) ─────────────────────────────────────
    # stderr keeps answers printed on stdout clean
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(numeric_level)
        if json_format:
            console_handler.setFormatter(json_formatter)
        else:
            console_handler.setFormatter(structlog.stdlib.ProcessorFormatter(
                processors=[
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.dev.ConsoleRenderer(colors=True),
                ],
                foreign_pre_chain=shared_processors,
            ))
        handlers.append(console_handler)

    if not handlers:
        handlers.append(logging.NullHandler())

    logging.basicConfig(
        format="%(message)s",
        level=numeric_level,
        handlers=handlers,
        force=True,
    )

    # SDK transports are chatty at DEBUG
    for noisy in ("httpx", "httpcore", "anthropic", "openai"):
        logging.getLogger(noisy).setLevel(max(numeric_level, logging.WARNING))

    structlog.configure(
        processors=shared_processors
        + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def setup_logging_from_settings(settings, level: Optional[str] = None) -> None:
    """Configure logging from Settings.logging; `level` overrides the configured level."""
    cfg = settings.logging
    setup_logging(
        level=level or cfg.level,
        log_dir=cfg.log_dir,
        json_format=cfg.json_format,
        console_output=cfg.console_output,
        max_bytes=cfg.max_file_size_mb * 1024 * 1024,
        backup_count=cfg.backup_count,
    )


def get_logger(name: str = "axonerai", **initial_values: Any) -> structlog.stdlib.BoundLogger:
    """
    Get a bound logger, optionally with values attached to every line.

    Example:
        log = get_logger(__name__, component="executor")
        log.info("tool_executor.dispatch", tool="calculator")
    """
    logger = structlog.get_logger(name)
    if initial_values:
        logger = logger.bind(**initial_values)
    return logger


def bind_session(session_id: str) -> None:
    """
    Attach session_id to every log line in this async context.

    Each asyncio task has its own contextvars copy, so concurrent runs for
    different sessions don't see each other's id.
    """
    structlog.contextvars.bind_contextvars(session_id=session_id)


def clear_session() -> None:
    """Drop the bound session context at the end of a run."""
    structlog.contextvars.unbind_contextvars("session_id")
