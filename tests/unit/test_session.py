"""
tests/unit/test_session.py — Session and SessionStore Unit Tests

Run with:
    pytest tests/unit/test_session.py -v
"""

from __future__ import annotations

import json

import pytest

from agent.session import Session
from agent.session_store import FileSessionStore, InMemorySessionStore
from brain.types import Message, Role
from exceptions import SessionStoreError


@pytest.fixture
def store(tmp_path):
    return FileSessionStore(tmp_path / "sessions")


def make_session(session_id: str = "sess_test") -> Session:
    session = Session.create(session_id)
    session.add_user_message("What is 10 / 4?")
    session.add_assistant_message("Using tool 'calculator' with input: {\"a\":10}")
    session.add_message(Message.user("Tool 'calculator' returned: 2.5"))
    session.add_assistant_message("It is 2.5.")
    return session


class TestSession:
    def test_create_mints_id(self):
        session = Session.create()
        assert session.session_id.startswith("sess_")
        assert len(session.session_id) == len("sess_") + 12
        assert session.messages == []

    def test_create_with_id(self):
        assert Session.create("abc").session_id == "abc"

    def test_ids_are_unique(self):
        assert Session.create().session_id != Session.create().session_id

    def test_append_order(self):
        session = make_session()
        assert [m.role for m in session.messages] == [
            Role.USER, Role.ASSISTANT, Role.USER, Role.ASSISTANT,
        ]

    def test_get_messages_is_a_copy(self):
        session = make_session()
        msgs = session.get_messages()
        msgs.append(Message.user("sneaky"))
        assert len(session.messages) == 4


class TestFileSessionStore:
    def test_round_trip(self, store):
        original = make_session()
        store.save(original)
        loaded = store.load("sess_test")

        assert loaded.session_id == original.session_id
        assert loaded.messages == original.messages
        assert loaded.created_at == original.created_at

    def test_exists(self, store):
        assert not store.exists("sess_test")
        store.save(make_session())
        assert store.exists("sess_test")

    def test_snapshot_layout(self, store, tmp_path):
        store.save(make_session())
        path = tmp_path / "sessions" / "sess_test" / "messages.json"
        data = json.loads(path.read_text(encoding="utf-8"))

        assert data["session_id"] == "sess_test"
        assert data["messages"][0] == {"role": "user", "content": "What is 10 / 4?"}
        assert "created_at" in data

    def test_save_overwrites(self, store):
        session = make_session()
        store.save(session)
        session.add_user_message("again")
        store.save(session)

        assert len(store.load("sess_test").messages) == 5

    def test_no_temp_files_left(self, store, tmp_path):
        store.save(make_session())
        files = sorted(p.name for p in (tmp_path / "sessions" / "sess_test").iterdir())
        assert files == ["messages.json"]

    def test_load_missing(self, store):
        with pytest.raises(SessionStoreError) as exc_info:
            store.load("sess_missing")
        assert exc_info.value.session_id == "sess_missing"

    def test_load_corrupt_json(self, store, tmp_path):
        path = tmp_path / "sessions" / "sess_bad" / "messages.json"
        path.parent.mkdir(parents=True)
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(SessionStoreError, match="Corrupt"):
            store.load("sess_bad")

    def test_load_wrong_shape(self, store, tmp_path):
        path = tmp_path / "sessions" / "sess_bad" / "messages.json"
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"messages": [{"role": "robot"}]}), encoding="utf-8")

        with pytest.raises(SessionStoreError):
            store.load("sess_bad")

    @pytest.mark.parametrize("bad_id", ["../escape", "a/b", "", ".hidden"])
    def test_rejects_unsafe_ids(self, store, bad_id):
        with pytest.raises(SessionStoreError, match="Invalid session id"):
            store.exists(bad_id)

    def test_uuid_style_ids_allowed(self, store):
        session = Session.create("2f1c7a4e-58b2-4c55-9a0e-0d5f1f3b9c11")
        store.save(session)
        assert store.exists(session.session_id)

    def test_save_failure_raises(self, tmp_path):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("file in the way", encoding="utf-8")
        store = FileSessionStore(blocker)

        with pytest.raises(SessionStoreError, match="Failed to save"):
            store.save(make_session())


class TestInMemorySessionStore:
    def test_round_trip(self):
        store = InMemorySessionStore()
        store.save(make_session())
        assert store.load("sess_test").messages == make_session().messages

    def test_holds_copies(self):
        store = InMemorySessionStore()
        session = make_session()
        store.save(session)
        session.add_user_message("after save")

        loaded = store.load("sess_test")
        loaded.add_user_message("after load")
        assert len(store.load("sess_test").messages) == 4

    def test_load_missing(self):
        with pytest.raises(SessionStoreError):
            InMemorySessionStore().load("nope")
