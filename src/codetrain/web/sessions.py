"""Server-side session management.

Sessions are stored server-side and referenced by an opaque id that the
client carries in a signed cookie. Two store backends are available:

- MemorySessionStore: process memory, default for development
- RedisSessionStore: shared Redis cache for hosted deployments

The SessionManager is created once in the app lifespan and reached by
request handlers through FastAPI dependencies.
"""

from __future__ import annotations

import asyncio
import json
import secrets
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

import structlog
from itsdangerous import BadSignature, Signer
from redis import asyncio as aioredis
from redis.exceptions import RedisError

from codetrain.config.app_config import AppConfig

logger = structlog.get_logger(__name__)

SIGNER_SALT = "codetrain.sid"
REDIS_KEY_PREFIX = "codetrain:session:"


class SessionStoreError(Exception):
    """Raised when the session backend cannot be reached."""


@dataclass
class Session:
    """An authenticated session."""

    session_id: str
    user_id: int
    username: str
    created_at: str = ""

    def __post_init__(self):
        if not self.created_at:
            self.created_at = datetime.now(timezone.utc).isoformat()

    def to_dict(self) -> dict[str, Any]:
        """Payload stored in the backend (the id is the key)."""
        return {
            "user_id": self.user_id,
            "username": self.username,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, session_id: str, data: dict[str, Any]) -> Session:
        return cls(
            session_id=session_id,
            user_id=int(data["user_id"]),
            username=data["username"],
            created_at=data.get("created_at", ""),
        )


class SessionStore:
    """Interface for session backends. All values expire after a TTL."""

    async def get(self, session_id: str) -> dict[str, Any] | None:
        raise NotImplementedError

    async def set(self, session_id: str, data: dict[str, Any], ttl_seconds: int) -> None:
        raise NotImplementedError

    async def touch(self, session_id: str, ttl_seconds: int) -> bool:
        raise NotImplementedError

    async def delete(self, session_id: str) -> bool:
        raise NotImplementedError

    async def close(self) -> None:
        return None


class MemorySessionStore(SessionStore):
    """In-process session store.

    Expired entries are dropped lazily when read and swept on write.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._entries: dict[str, tuple[dict[str, Any], float]] = {}
        self._lock = asyncio.Lock()
        self._clock = clock

    async def get(self, session_id: str) -> dict[str, Any] | None:
        async with self._lock:
            entry = self._entries.get(session_id)
            if entry is None:
                return None
            data, expires_at = entry
            if expires_at <= self._clock():
                del self._entries[session_id]
                return None
            return dict(data)

    async def set(self, session_id: str, data: dict[str, Any], ttl_seconds: int) -> None:
        async with self._lock:
            self._sweep()
            self._entries[session_id] = (dict(data), self._clock() + ttl_seconds)

    async def touch(self, session_id: str, ttl_seconds: int) -> bool:
        async with self._lock:
            entry = self._entries.get(session_id)
            if entry is None or entry[1] <= self._clock():
                self._entries.pop(session_id, None)
                return False
            self._entries[session_id] = (entry[0], self._clock() + ttl_seconds)
            return True

    async def delete(self, session_id: str) -> bool:
        async with self._lock:
            return self._entries.pop(session_id, None) is not None

    def _sweep(self) -> None:
        now = self._clock()
        expired = [sid for sid, (_, expires_at) in self._entries.items() if expires_at <= now]
        for sid in expired:
            del self._entries[sid]


class RedisSessionStore(SessionStore):
    """Session store backed by Redis keys with native expiry."""

    def __init__(self, client: aioredis.Redis):
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> RedisSessionStore:
        return cls(aioredis.Redis.from_url(url, decode_responses=True))

    @staticmethod
    def _key(session_id: str) -> str:
        return f"{REDIS_KEY_PREFIX}{session_id}"

    async def get(self, session_id: str) -> dict[str, Any] | None:
        try:
            raw = await self._client.get(self._key(session_id))
        except RedisError as e:
            raise SessionStoreError(f"Session read failed: {e}") from e
        if raw is None:
            return None
        return json.loads(raw)

    async def set(self, session_id: str, data: dict[str, Any], ttl_seconds: int) -> None:
        try:
            await self._client.set(self._key(session_id), json.dumps(data), ex=ttl_seconds)
        except RedisError as e:
            raise SessionStoreError(f"Session write failed: {e}") from e

    async def touch(self, session_id: str, ttl_seconds: int) -> bool:
        try:
            return bool(await self._client.expire(self._key(session_id), ttl_seconds))
        except RedisError as e:
            raise SessionStoreError(f"Session refresh failed: {e}") from e

    async def delete(self, session_id: str) -> bool:
        try:
            return bool(await self._client.delete(self._key(session_id)))
        except RedisError as e:
            raise SessionStoreError(f"Session delete failed: {e}") from e

    async def close(self) -> None:
        await self._client.aclose()


def create_session_store(config: AppConfig) -> SessionStore:
    """Build the session store selected in config."""
    if config.session_store == "redis":
        logger.info("session_store_selected", kind="redis", url=config.redis_url)
        return RedisSessionStore.from_url(config.redis_url)

    if config.is_production:
        logger.warning("memory_session_store_in_production")
    logger.info("session_store_selected", kind="memory")
    return MemorySessionStore()


class SessionManager:
    """Creates, resolves, refreshes and destroys sessions.

    Also signs and verifies the cookie value carrying the session id.
    """

    def __init__(self, store: SessionStore, secret: str, ttl_seconds: int):
        self.store = store
        self.ttl_seconds = ttl_seconds
        self._signer = Signer(secret, salt=SIGNER_SALT)

    def sign(self, session_id: str) -> str:
        """Cookie value for a session id."""
        return self._signer.sign(session_id).decode("ascii")

    def unsign(self, cookie_value: str) -> str | None:
        """Session id from a cookie value, or None if tampered."""
        try:
            return self._signer.unsign(cookie_value).decode("ascii")
        except BadSignature:
            logger.warning("session_cookie_bad_signature")
            return None

    async def create_session(self, user_id: int, username: str) -> Session:
        """Create a new session bound to a user.

        Args:
            user_id: ID of the authenticated user
            username: Username of the authenticated user

        Returns:
            The created Session
        """
        session = Session(
            session_id=secrets.token_urlsafe(32),
            user_id=user_id,
            username=username,
        )
        await self.store.set(session.session_id, session.to_dict(), self.ttl_seconds)

        logger.info("session_created", user_id=user_id, username=username)
        return session

    async def get_session(self, session_id: str, touch: bool = True) -> Session | None:
        """Get a live session, refreshing its expiry by default."""
        data = await self.store.get(session_id)
        if data is None:
            return None

        if touch:
            await self.store.touch(session_id, self.ttl_seconds)

        return Session.from_dict(session_id, data)

    async def regenerate(self, old_session_id: str | None, user_id: int, username: str) -> Session:
        """Replace any previous session with a fresh id.

        Prevents session fixation: the id held before authentication is
        never the one that carries the authenticated identity.
        """
        if old_session_id:
            await self.store.delete(old_session_id)
        return await self.create_session(user_id, username)

    async def end_session(self, session_id: str) -> bool:
        """End a session.

        Returns:
            True if session was ended, False if not found
        """
        ended = await self.store.delete(session_id)
        if ended:
            logger.info("session_ended")
        return ended

    async def close(self) -> None:
        await self.store.close()
