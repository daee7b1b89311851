"""Redis-backed OTP store shared across service instances."""

import contextlib
import logging
from collections.abc import Iterator
from datetime import timedelta

from redis.asyncio import Redis
from redis.exceptions import RedisError, ResponseError, WatchError

from healthlink_auth.exceptions import OTPStoreUnavailableError
from healthlink_auth.safe_logger import SafeLogger

logger = logging.getLogger(__name__)

OTP_PREFIX = "otp:"
OTP_ATTEMPTS_PREFIX = "otp_attempts:"


def otp_key(email: str) -> str:
    return f"{OTP_PREFIX}{email}"


def attempts_key(email: str) -> str:
    return f"{OTP_ATTEMPTS_PREFIX}{email}"


def _text(value: str | bytes | None) -> str | None:
    if isinstance(value, bytes):
        return value.decode()
    return value


@contextlib.contextmanager
def _store_errors() -> Iterator[None]:
    """Translate any driver error into :class:`OTPStoreUnavailableError`."""
    try:
        yield
    except RedisError as e:
        raise OTPStoreUnavailableError(str(e) or e.__class__.__name__) from e


class RedisOTPStore:
    """
    OTP store on a shared Redis server.

    Codes live under ``otp:{email}`` with a millisecond TTL; request counters
    live under ``otp_attempts:{email}`` and expire with the rate-limit window.
    All mutation goes through Redis' atomic primitives, so several service
    instances can share one server without application-level locks.

    Every driver failure surfaces as :class:`OTPStoreUnavailableError`.

    Example:
        ```python
        from redis.asyncio import Redis

        client = Redis.from_url("redis://localhost:6379/0", decode_responses=True)
        store = RedisOTPStore(client, SafeLogger())
        ```
    """

    def __init__(self, redis: Redis, safe_logger: SafeLogger) -> None:
        """
        Initialize the store.

        Args:
            redis: Async Redis client, ideally with ``decode_responses=True``
            safe_logger: Audit logger for counter corruption events
        """
        self.redis = redis
        self.safe_logger = safe_logger

    async def put(self, email: str, code: str, ttl: timedelta) -> None:
        ttl_ms = max(int(ttl.total_seconds() * 1000), 1)
        with _store_errors():
            await self.redis.set(otp_key(email), code, px=ttl_ms)

    async def get(self, email: str) -> str | None:
        with _store_errors():
            return _text(await self.redis.get(otp_key(email)))

    async def delete(self, email: str) -> None:
        with _store_errors():
            await self.redis.delete(otp_key(email))

    async def exists(self, email: str) -> bool:
        with _store_errors():
            return bool(await self.redis.exists(otp_key(email)))

    async def consume(self, email: str, code: str) -> bool:
        """
        Delete the code iff it still equals ``code``, using WATCH/MULTI.

        If another client changes or deletes the key between the read and the
        delete, the transaction aborts and this caller loses.

        Returns:
            True if this call removed the code
        """
        key = otp_key(email)
        with _store_errors():
            async with self.redis.pipeline(transaction=True) as pipe:
                await pipe.watch(key)
                stored = _text(await pipe.get(key))
                if stored is None or stored != code:
                    await pipe.unwatch()
                    return False
                pipe.multi()
                pipe.delete(key)
                try:
                    (deleted,) = await pipe.execute()
                except WatchError:
                    logger.debug("OTP changed during consume, giving up")
                    return False
        return deleted == 1

    async def incr_attempts(self, email: str, window: timedelta) -> int:
        """
        Increment the request counter and refresh its expiry to ``window``.

        A counter holding a non-integer value is deleted and counting restarts
        from zero.

        Returns:
            Post-increment count
        """
        key = attempts_key(email)
        window_seconds = max(int(window.total_seconds()), 1)
        with _store_errors():
            try:
                return await self._incr_with_expiry(key, window_seconds)
            except ResponseError:
                self.safe_logger.event("invalid_attempt_count").masked("email", email).log(
                    logging.WARNING
                )
                await self.redis.delete(key)
                return await self._incr_with_expiry(key, window_seconds)

    async def _incr_with_expiry(self, key: str, window_seconds: int) -> int:
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.incr(key)
            pipe.expire(key, window_seconds)
            count, _ = await pipe.execute()
        return int(count)

    async def ping(self) -> bool:
        """Check that the server answers. Never raises."""
        try:
            return bool(await self.redis.ping())
        except RedisError:
            return False
