"""Tests for the in-memory session store."""

import asyncio

from ragdesk.core.models.chat import ConversationTurn
from ragdesk.core.protocols.session_store import SessionStoreProtocol
from ragdesk.infrastructure.sessions.memory_store import InMemorySessionStore


class TestInMemorySessionStore:
    """Test bounded FIFO history."""

    def test_satisfies_protocol(self):
        assert isinstance(InMemorySessionStore(), SessionStoreProtocol)

    async def test_unknown_session_is_empty(self):
        assert await InMemorySessionStore().get("nope") == []

    async def test_session_bound_is_fifo(self):
        store = InMemorySessionStore(max_turns=10)
        for i in range(13):
            await store.append("s1", ConversationTurn("user", f"turn {i}"))

        history = await store.get("s1")
        assert len(history) == 10
        assert [t.content for t in history] == [f"turn {i}" for i in range(3, 13)]

    async def test_sessions_are_isolated(self):
        store = InMemorySessionStore()
        await store.append("a", ConversationTurn("user", "for a"))
        await store.append("b", ConversationTurn("user", "for b"))

        assert [t.content for t in await store.get("a")] == ["for a"]
        assert [t.content for t in await store.get("b")] == ["for b"]

    async def test_get_returns_copy(self):
        store = InMemorySessionStore()
        await store.append("s", ConversationTurn("user", "q"))
        history = await store.get("s")
        history.clear()
        assert len(await store.get("s")) == 1

    async def test_evict_oldest(self):
        store = InMemorySessionStore()
        for i in range(4):
            await store.append("s", ConversationTurn("user", str(i)))

        assert await store.evict_oldest("s", 3) == 3
        assert [t.content for t in await store.get("s")] == ["3"]
        assert await store.evict_oldest("s", 5) == 1
        assert await store.evict_oldest("missing") == 0

    async def test_clear(self):
        store = InMemorySessionStore()
        await store.append("s", ConversationTurn("user", "q"))
        await store.clear("s")
        assert await store.get("s") == []
        assert len(store) == 0

    async def test_concurrent_appends_are_not_lost(self):
        store = InMemorySessionStore(max_turns=100)
        await asyncio.gather(
            *(store.append("s", ConversationTurn("user", str(i))) for i in range(50))
        )
        assert len(await store.get("s")) == 50

    async def test_clear_keeps_lock_for_waiters(self):
        store = InMemorySessionStore()
        lock = store._lock("s")

        async with lock:
            cleared = asyncio.create_task(store.clear("s"))
            appended = asyncio.create_task(store.append("s", ConversationTurn("user", "q")))
            await asyncio.sleep(0)
        await asyncio.gather(cleared, appended)

        assert store._lock("s") is lock
        assert [t.content for t in await store.get("s")] == ["q"]
