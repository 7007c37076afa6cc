"""Unit tests for conversation history persistence (in-memory)."""

import pytest
from relay.core.database import get_recent_turns, save_turn


@pytest.fixture(autouse=True)
def setup_db(db):
    yield


class TestSaveAndRetrieve:

    def test_save_and_fetch(self):
        save_turn("c1", "user", "hello")
        save_turn("c1", "assistant", "hi there")
        turns = get_recent_turns("c1")
        assert [t.role for t in turns] == ["user", "assistant"]

    def test_turns_have_timestamps(self):
        save_turn("c1", "user", "test")
        assert get_recent_turns("c1")[0].created_at is not None

    def test_content_stored_untruncated(self):
        save_turn("c1", "assistant", "x" * 5000)
        assert len(get_recent_turns("c1")[0].content) == 5000

    def test_invalid_role_rejected(self):
        with pytest.raises(ValueError):
            save_turn("c1", "tool", "nope")


class TestRecentTurns:

    def test_respects_limit(self):
        for i in range(25):
            save_turn("c1", "user", f"msg {i}")
        assert len(get_recent_turns("c1")) == 20
        assert len(get_recent_turns("c1", limit=4)) == 4

    def test_returns_most_recent_oldest_first(self):
        for i in range(6):
            save_turn("c1", "user", f"msg {i}")
        recent = get_recent_turns("c1", limit=3)
        assert [t.content for t in recent] == ["msg 3", "msg 4", "msg 5"]


class TestConversationIsolation:

    def test_conversations_isolated(self):
        save_turn("c1", "user", "conversation 1")
        save_turn("c2", "user", "conversation 2")
        assert len(get_recent_turns("c1")) == 1
        assert len(get_recent_turns("c2")) == 1

    def test_empty_conversation(self):
        assert get_recent_turns("nonexistent") == []
