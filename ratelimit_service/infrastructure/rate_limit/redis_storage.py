"""Redis-backed fixed-window storage.

Implements RateLimitStorageProtocol against Redis. The window is anchored to
the first consumption after the key is clear:

    count = INCRBY key cost
    if count == cost:            # this increment created the key
        PEXPIRE key window       # reset_at = now + window
    else:
        ttl = PTTL key           # reset_at = now + ttl

    allowed = count <= limit; remaining = max(0, limit - count)

Consistency:
    INCRBY is atomic, so concurrent increments for a key are never lost. In
    ConsistencyMode.NON_ATOMIC (default) the increment and the expiry are two
    round trips: a crash or delay between them can leave a key without expiry
    (it never resets on its own until reset() is called) or with a late one.
    ConsistencyMode.ATOMIC runs both steps in one Lua script (EVALSHA) so the
    key always carries its window.

Errors:
    Redis failures are returned as Failure(RateLimitError) and never
    retried here. A stored value that is not an integer is reported as
    ErrorCode.RATE_LIMIT_CORRUPT_VALUE on both the read and the
    consume path (INCRBY refuses such a value), never coerced to zero.

Ownership:
    The storage owns its Redis client. close() releases the client and, when
    the storage built it, the connection pool.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from functools import partial
from pathlib import Path
from typing import Any

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import NoScriptError, RedisError, ResponseError

from ratelimit_service.core.enums import ErrorCode
from ratelimit_service.core.errors import DomainError, NotFoundError
from ratelimit_service.core.result import Failure, Result, Success
from ratelimit_service.domain.enums import ConsistencyMode
from ratelimit_service.domain.errors import RateLimitError
from ratelimit_service.domain.value_objects.rate_limit_result import RateLimitResult


# Redis reply to INCRBY on a value that does not parse as an integer
_NOT_AN_INTEGER = "not an integer"


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class _LuaRefs:
    """Holds loaded Lua script SHA references."""

    fixed_window_sha: str | None = None


class RedisStorage:
    """Distributed fixed-window counter on Redis.

    Args:
        redis_client: An async Redis client (redis.asyncio.Redis compatible).
        key_prefix: Prepended to every caller-supplied key.
        consistency: Increment/expire sequencing (see module docstring).
        clock: UTC clock used to derive reset_at, injectable for tests.
        connection_pool: Pool to disconnect on close(), when the storage
            created it.
    """

    def __init__(
        self,
        *,
        redis_client: Any,
        key_prefix: str = "ratelimit:",
        consistency: ConsistencyMode = ConsistencyMode.NON_ATOMIC,
        clock: Callable[[], datetime] = _utc_now,
        connection_pool: ConnectionPool | None = None,
    ) -> None:
        self.redis = redis_client
        self._key_prefix = key_prefix
        self._consistency = consistency
        self._clock = clock
        self._pool = connection_pool
        self._lua = _LuaRefs()
        self._script_lock = asyncio.Lock()

    @classmethod
    def from_url(
        cls,
        url: str,
        *,
        key_prefix: str = "ratelimit:",
        consistency: ConsistencyMode = ConsistencyMode.NON_ATOMIC,
        max_connections: int = 50,
        socket_timeout: float = 5.0,
    ) -> RedisStorage:
        """Build a storage that owns its own connection pool.

        No connection is opened until the first command; call ping() to
        verify reachability at startup.
        """
        pool = ConnectionPool.from_url(
            url,
            max_connections=max_connections,
            decode_responses=False,
            socket_connect_timeout=socket_timeout,
            socket_timeout=socket_timeout,
            socket_keepalive=True,
        )
        return cls(
            redis_client=Redis(connection_pool=pool),
            key_prefix=key_prefix,
            consistency=consistency,
            connection_pool=pool,
        )

    @property
    def key_prefix(self) -> str:
        """Prefix prepended to caller keys."""
        return self._key_prefix

    @property
    def consistency(self) -> ConsistencyMode:
        """Configured increment/expire sequencing."""
        return self._consistency

    # ---------------------------------------------------------------------
    # RateLimitStorageProtocol implementation
    # ---------------------------------------------------------------------
    async def check_and_update(
        self,
        key: str,
        limit: int,
        window: timedelta,
        cost: int,
    ) -> Result[RateLimitResult, DomainError]:
        """Increment the window counter by `cost` and evaluate it.

        The increment is charged even when the result is denied.
        """
        redis_key = self._format_key(key)
        window_ms = _to_millis(window)
        try:
            if self._consistency is ConsistencyMode.ATOMIC:
                count, ttl_ms = await self._incr_with_script(redis_key, cost, window_ms)
            else:
                count, ttl_ms = await self._incr_then_expire(
                    redis_key, cost, window_ms
                )
        except ResponseError as exc:
            if _NOT_AN_INTEGER in str(exc):
                return Failure(error=_corrupt_value_error(key, redis_error=str(exc)))
            return Failure(error=_storage_error("check", key, exc))
        except RedisError as exc:
            return Failure(error=_storage_error("check", key, exc))

        return Success(
            value=RateLimitResult.evaluate(
                consumed=count,
                limit=limit,
                reset_at=self._reset_at(ttl_ms),
            )
        )

    async def get_status(
        self,
        key: str,
        limit: int,
    ) -> Result[RateLimitResult, DomainError]:
        """Read the window counter without writing."""
        redis_key = self._format_key(key)
        try:
            raw = await self.redis.get(redis_key)
            if raw is None:
                return Success(
                    value=RateLimitResult(
                        allowed=True,
                        remaining=limit,
                        reset_at=self._clock(),
                        limit=limit,
                    )
                )
            ttl_ms = int(await self.redis.pttl(redis_key))
        except RedisError as exc:
            return Failure(error=_storage_error("status", key, exc))

        try:
            count = int(raw)
        except ValueError:
            return Failure(error=_corrupt_value_error(key, stored_value=repr(raw)))

        return Success(
            value=RateLimitResult.evaluate(
                consumed=count,
                limit=limit,
                reset_at=self._reset_at(ttl_ms),
            )
        )

    async def reset(self, key: str) -> Result[None, DomainError]:
        """Delete the window counter for `key`."""
        try:
            deleted = await self.redis.delete(self._format_key(key))
        except RedisError as exc:
            return Failure(error=_storage_error("reset", key, exc))

        if deleted == 0:
            return Failure(
                error=NotFoundError(
                    code=ErrorCode.KEY_NOT_FOUND,
                    message=f"No rate limit state for key '{key}'",
                    resource_type="rate_limit_key",
                    resource_id=key,
                )
            )
        return Success(value=None)

    async def close(self) -> Result[None, DomainError]:
        """Close the client and, if owned, disconnect the pool."""
        try:
            await self.redis.aclose()
            if self._pool is not None:
                await self._pool.disconnect()
        except RedisError as exc:
            return Failure(
                error=RateLimitError(
                    code=ErrorCode.RATE_LIMIT_CLOSE_FAILED,
                    message=f"Failed to close Redis connection: {exc}",
                    details={"error": str(exc)},
                )
            )
        return Success(value=None)

    # ---------------------------------------------------------------------
    # Lifecycle
    # ---------------------------------------------------------------------
    async def ping(self) -> Result[None, DomainError]:
        """Verify Redis is reachable."""
        try:
            await self.redis.ping()
        except RedisError as exc:
            return Failure(error=_storage_error("ping", "", exc))
        return Success(value=None)

    # ---------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------
    def _format_key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    def _reset_at(self, ttl_ms: int) -> datetime:
        # PTTL is -1 for a key left without expiry and -2 for a key that
        # expired between the two commands.
        now = self._clock()
        if ttl_ms < 0:
            return now
        return now + timedelta(milliseconds=ttl_ms)

    async def _incr_then_expire(
        self, redis_key: str, cost: int, window_ms: int
    ) -> tuple[int, int]:
        """Two round trips: INCRBY, then PEXPIRE or PTTL."""
        count = int(await self.redis.incrby(redis_key, cost))
        if count == cost:
            await self.redis.pexpire(redis_key, window_ms)
            return count, window_ms
        ttl_ms = int(await self.redis.pttl(redis_key))
        return count, ttl_ms

    async def _incr_with_script(
        self, redis_key: str, cost: int, window_ms: int
    ) -> tuple[int, int]:
        """One round trip: fixed_window.lua via EVALSHA.

        Reloads the script once if Redis lost it (SCRIPT FLUSH, failover).
        """
        sha = await self._ensure_fixed_window_script()
        try:
            resp = await self.redis.evalsha(sha, 1, redis_key, cost, window_ms)
        except NoScriptError:
            self._lua.fixed_window_sha = None
            sha = await self._ensure_fixed_window_script()
            resp = await self.redis.evalsha(sha, 1, redis_key, cost, window_ms)
        return int(resp[0]), int(resp[1])

    async def _ensure_fixed_window_script(self) -> str:
        """Load the fixed window Lua script into Redis and cache the SHA."""
        if self._lua.fixed_window_sha:
            return self._lua.fixed_window_sha
        async with self._script_lock:
            if self._lua.fixed_window_sha:
                return self._lua.fixed_window_sha
            script = await _read_lua_script("lua_scripts/fixed_window.lua")
            sha = await self.redis.script_load(script)
            if isinstance(sha, bytes):
                sha = sha.decode()
            self._lua.fixed_window_sha = sha
            return sha


def _to_millis(window: timedelta) -> int:
    """Window length in whole milliseconds, at least 1."""
    return max(1, window // timedelta(milliseconds=1))


def _corrupt_value_error(key: str, **details: str) -> RateLimitError:
    return RateLimitError(
        code=ErrorCode.RATE_LIMIT_CORRUPT_VALUE,
        message=f"Stored counter for '{key}' is not an integer",
        details={"key": key, **details},
    )


def _storage_error(operation: str, key: str, exc: Exception) -> RateLimitError:
    return RateLimitError(
        code=ErrorCode.RATE_LIMIT_STORAGE_UNAVAILABLE,
        message=f"Rate limit {operation} failed: {exc}",
        details={
            "operation": operation,
            "key": key,
            "error_type": type(exc).__name__,
        },
    )


def _read_lua_script_sync(path: Path) -> str:
    """Synchronous helper to read a Lua script (called via run_in_executor)."""
    return path.read_text(encoding="utf-8")


async def _read_lua_script(rel_path: str) -> str:
    """Read a Lua script file relative to this module without blocking the loop.

    Args:
        rel_path: Relative path from this module's directory.

    Returns:
        Script contents as string.
    """
    full_path = Path(__file__).parent / rel_path
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, partial(_read_lua_script_sync, full_path))
