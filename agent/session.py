"""
agent/session.py — Conversation Session

One Session per conversation. Holds the ordered message history that is
replayed to the provider on every call. Messages are only ever appended;
earlier entries are never edited or reordered.
"""

from __future__ import annotations

import time
import uuid

from pydantic import BaseModel, Field

from brain.types import Message
from observability.logger import get_logger

log = get_logger(__name__)


class Session(BaseModel):
    """Identifier plus ordered message history for one conversation."""

    session_id: str
    messages: list[Message] = Field(default_factory=list)
    created_at: float = Field(default_factory=time.time)

    # ── Factory ───────────────────────────────────────────────────────────────

    @classmethod
    def create(cls, session_id: str | None = None) -> "Session":
        """Start an empty session. Mints a sess_<hex> id when none is given."""
        session = cls(session_id=session_id or f"sess_{uuid.uuid4().hex[:12]}")
        log.debug("session.created", session_id=session.session_id)
        return session

    # ── Message helpers ───────────────────────────────────────────────────────

    def add_message(self, message: Message) -> None:
        self.messages.append(message)

    def add_user_message(self, content: str) -> None:
        self.messages.append(Message.user(content))

    def add_assistant_message(self, content: str) -> None:
        self.messages.append(Message.assistant(content))

    def get_messages(self) -> list[Message]:
        """Return a copy of the history; callers may not mutate the session through it."""
        return list(self.messages)

    def __repr__(self) -> str:
        return f"<Session id={self.session_id} messages={len(self.messages)}>"
