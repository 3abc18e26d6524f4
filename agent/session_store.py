"""
agent/session_store.py — Session Persistence

Snapshots a whole Session and restores it later by id.

Layout (FileSessionStore):
    <base_dir>/
        <session_id>/
            messages.json     {"session_id", "messages", "created_at"}

Every save overwrites the snapshot in full. The write goes to a temp file in
the same directory and is moved into place with os.replace, so a crash
mid-write leaves the previous snapshot intact.

One writer per session_id at a time: concurrent saves of the same id are
not coordinated, the last replace wins.
"""

from __future__ import annotations

import copy
import json
import os
import re
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import ValidationError

from agent.session import Session
from exceptions import SessionStoreError
from observability.logger import get_logger

log = get_logger(__name__)

_SNAPSHOT_FILE = "messages.json"
_SAFE_ID = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.\-]*$")


class SessionStore(ABC):
    """Persists and restores sessions by id."""

    @abstractmethod
    def exists(self, session_id: str) -> bool:
        ...

    @abstractmethod
    def load(self, session_id: str) -> Session:
        """Return the stored session. Raises SessionStoreError if absent or unreadable."""
        ...

    @abstractmethod
    def save(self, session: Session) -> None:
        """Replace the stored snapshot for session.session_id."""
        ...


# ─────────────────────────────────────────────────────────────────────────────
# File-backed store
# ─────────────────────────────────────────────────────────────────────────────


class FileSessionStore(SessionStore):

    def __init__(self, base_dir: str | Path = "./data/sessions"):
        self.base_dir = Path(base_dir)

    def _snapshot_path(self, session_id: str) -> Path:
        # ids become directory names
        if not _SAFE_ID.match(session_id) or ".." in session_id:
            raise SessionStoreError(f"Invalid session id: {session_id!r}", session_id=session_id)
        return self.base_dir / session_id / _SNAPSHOT_FILE

    def exists(self, session_id: str) -> bool:
        return self._snapshot_path(session_id).is_file()

    def load(self, session_id: str) -> Session:
        path = self._snapshot_path(session_id)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise SessionStoreError(f"Session not found: {session_id}", session_id=session_id) from e
        except OSError as e:
            raise SessionStoreError(
                f"Failed to read session {session_id}: {e}", session_id=session_id
            ) from e

        try:
            session = Session.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as e:
            log.error("session_store.corrupt", session_id=session_id, path=str(path), error=str(e))
            raise SessionStoreError(
                f"Corrupt session snapshot for {session_id}: {e}", session_id=session_id
            ) from e

        log.debug("session_store.loaded", session_id=session_id, messages=len(session.messages))
        return session

    def save(self, session: Session) -> None:
        path = self._snapshot_path(session.session_id)
        payload = json.dumps(session.model_dump(mode="json"), indent=2, ensure_ascii=False)

        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".messages.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            log.error("session_store.save_failed", session_id=session.session_id, error=str(e))
            raise SessionStoreError(
                f"Failed to save session {session.session_id}: {e}",
                session_id=session.session_id,
            ) from e

        log.debug("session_store.saved", session_id=session.session_id, messages=len(session.messages))

    def __repr__(self) -> str:
        return f"<FileSessionStore base_dir={self.base_dir}>"


# ─────────────────────────────────────────────────────────────────────────────
# In-memory store
# ─────────────────────────────────────────────────────────────────────────────


class InMemorySessionStore(SessionStore):
    """Dict-backed store. Holds deep copies so callers can't alias stored state."""

    def __init__(self):
        self._sessions: dict[str, Session] = {}

    def exists(self, session_id: str) -> bool:
        return session_id in self._sessions

    def load(self, session_id: str) -> Session:
        try:
            return copy.deepcopy(self._sessions[session_id])
        except KeyError:
            raise SessionStoreError(f"Session not found: {session_id}", session_id=session_id) from None

    def save(self, session: Session) -> None:
        self._sessions[session.session_id] = copy.deepcopy(session)

