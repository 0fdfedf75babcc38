"""Tests for SessionManager and session stores."""

import json
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from codetrain.config.app_config import AppConfig
from codetrain.web.sessions import (
    MemorySessionStore,
    RedisSessionStore,
    Session,
    SessionManager,
    SessionStoreError,
    create_session_store,
)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def manager(clock):
    """Session manager over a memory store with a fake clock."""
    return SessionManager(MemorySessionStore(clock=clock), secret="s3cret", ttl_seconds=60)


class TestSessionManagerCreate:
    """Tests for session creation."""

    @pytest.mark.asyncio
    async def test_create_session_returns_session(self, manager):
        """Create returns a Session bound to the user."""
        session = await manager.create_session(7, "alice")
        assert isinstance(session, Session)
        assert session.user_id == 7
        assert session.username == "alice"
        assert session.created_at

    @pytest.mark.asyncio
    async def test_create_session_unique_ids(self, manager):
        """Each session has an unguessable unique id."""
        s1 = await manager.create_session(1, "alice")
        s2 = await manager.create_session(1, "alice")
        assert s1.session_id != s2.session_id
        assert len(s1.session_id) >= 32


class TestSessionManagerGet:
    """Tests for session lookup and expiry."""

    @pytest.mark.asyncio
    async def test_get_session_exists(self, manager):
        """Get returns the stored identity."""
        created = await manager.create_session(1, "alice")
        fetched = await manager.get_session(created.session_id)
        assert fetched is not None
        assert fetched.username == "alice"

    @pytest.mark.asyncio
    async def test_get_session_not_found(self, manager):
        """Get returns None for unknown ids."""
        assert await manager.get_session("nonexistent") is None

    @pytest.mark.asyncio
    async def test_session_expires_after_ttl(self, manager, clock):
        """Idle sessions expire."""
        session = await manager.create_session(1, "alice")
        clock.now += 61
        assert await manager.get_session(session.session_id) is None

    @pytest.mark.asyncio
    async def test_activity_refreshes_expiry(self, manager, clock):
        """Each lookup pushes expiry forward."""
        session = await manager.create_session(1, "alice")
        for _ in range(3):
            clock.now += 45
            assert await manager.get_session(session.session_id) is not None

    @pytest.mark.asyncio
    async def test_lookup_without_touch_does_not_refresh(self, manager, clock):
        """touch=False leaves expiry alone."""
        session = await manager.create_session(1, "alice")
        clock.now += 45
        assert await manager.get_session(session.session_id, touch=False) is not None
        clock.now += 20
        assert await manager.get_session(session.session_id) is None


class TestSessionManagerRegenerate:
    """Tests for session id regeneration."""

    @pytest.mark.asyncio
    async def test_regenerate_replaces_old_id(self, manager):
        """The previous id stops working."""
        old = await manager.create_session(1, "alice")
        new = await manager.regenerate(old.session_id, 1, "alice")
        assert new.session_id != old.session_id
        assert await manager.get_session(old.session_id) is None
        assert await manager.get_session(new.session_id) is not None

    @pytest.mark.asyncio
    async def test_regenerate_without_previous(self, manager):
        """Regenerate works when there was no session."""
        session = await manager.regenerate(None, 2, "bob")
        assert session.username == "bob"


class TestSessionManagerEnd:
    """Tests for ending sessions."""

    @pytest.mark.asyncio
    async def test_end_session_removes(self, manager):
        """End removes the session."""
        session = await manager.create_session(1, "alice")
        assert await manager.end_session(session.session_id) is True
        assert await manager.get_session(session.session_id) is None

    @pytest.mark.asyncio
    async def test_end_session_not_found(self, manager):
        """End returns False for unknown ids."""
        assert await manager.end_session("nonexistent") is False


class TestCookieSigning:
    """Tests for cookie value signing."""

    def test_sign_roundtrip(self, manager):
        """A signed id unsigns to itself."""
        assert manager.unsign(manager.sign("abc")) == "abc"

    def test_unsign_rejects_tampering(self, manager):
        """Altered values are rejected."""
        assert manager.unsign("abc.bad-signature") is None
        assert manager.unsign("abc") is None

    def test_other_secret_rejected(self, manager):
        """Cookies signed with another secret are rejected."""
        other = SessionManager(MemorySessionStore(), secret="other", ttl_seconds=60)
        assert manager.unsign(other.sign("abc")) is None


class TestRedisSessionStore:
    """Tests for the Redis-backed store with a mocked client."""

    @pytest.fixture
    def redis_client(self):
        return AsyncMock()

    @pytest.mark.asyncio
    async def test_set_uses_expiry(self, redis_client):
        """Values are written with a TTL."""
        store = RedisSessionStore(redis_client)
        await store.set("sid", {"user_id": 1, "username": "alice"}, 60)

        key, value = redis_client.set.await_args.args
        assert key == "codetrain:session:sid"
        assert json.loads(value) == {"user_id": 1, "username": "alice"}
        assert redis_client.set.await_args.kwargs == {"ex": 60}

    @pytest.mark.asyncio
    async def test_get_decodes_json(self, redis_client):
        """Stored JSON is decoded."""
        redis_client.get.return_value = json.dumps({"user_id": 1, "username": "alice"})
        store = RedisSessionStore(redis_client)
        assert await store.get("sid") == {"user_id": 1, "username": "alice"}

    @pytest.mark.asyncio
    async def test_get_missing(self, redis_client):
        """Missing keys read as None."""
        redis_client.get.return_value = None
        assert await RedisSessionStore(redis_client).get("sid") is None

    @pytest.mark.asyncio
    async def test_touch_and_delete(self, redis_client):
        """Touch maps to EXPIRE, delete to DEL."""
        redis_client.expire.return_value = 1
        redis_client.delete.return_value = 0
        store = RedisSessionStore(redis_client)

        assert await store.touch("sid", 60) is True
        redis_client.expire.assert_awaited_once_with("codetrain:session:sid", 60)
        assert await store.delete("sid") is False

    @pytest.mark.asyncio
    async def test_backend_errors_are_wrapped(self, redis_client):
        """Redis failures surface as SessionStoreError."""
        redis_client.get.side_effect = RedisConnectionError("refused")
        with pytest.raises(SessionStoreError):
            await RedisSessionStore(redis_client).get("sid")

    @pytest.mark.asyncio
    async def test_close(self, redis_client):
        """Close releases the client."""
        await RedisSessionStore(redis_client).close()
        redis_client.aclose.assert_awaited_once()


class TestCreateSessionStore:
    """Tests for store selection from config."""

    def test_memory_by_default(self):
        """Default config selects the memory store."""
        assert isinstance(create_session_store(AppConfig()), MemorySessionStore)

    def test_redis_when_configured(self):
        """session_store 'redis' selects the Redis store."""
        store = create_session_store(AppConfig(session_store="redis"))
        assert isinstance(store, RedisSessionStore)
