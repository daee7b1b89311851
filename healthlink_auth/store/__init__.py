"""OTP storage backends."""

from redis.asyncio import Redis

from healthlink_auth.config import OTPSettings
from healthlink_auth.safe_logger import SafeLogger
from healthlink_auth.store.memory import InMemoryOTPStore, OTPEntry, OTPSweeper
from healthlink_auth.store.protocols import AttemptCounter, OTPStore
from healthlink_auth.store.redis import RedisOTPStore

__all__ = [
    "AttemptCounter",
    "InMemoryOTPStore",
    "OTPEntry",
    "OTPStore",
    "OTPSweeper",
    "RedisOTPStore",
    "build_otp_store",
]


def build_otp_store(
    settings: OTPSettings,
    safe_logger: SafeLogger,
    redis: Redis | None = None,
) -> OTPStore:
    """
    Create the backend selected by ``settings.backend``.

    Selection happens once at startup. Creating a Redis client does not
    connect, so an unreachable server shows up later as degraded OTP calls
    rather than a startup failure.

    Args:
        settings: OTP configuration
        safe_logger: Audit logger handed to the Redis store
        redis: Existing client to reuse; built from ``settings.redis_url`` if omitted

    Returns:
        A store implementing :class:`OTPStore`
    """
    if not settings.uses_shared_store:
        return InMemoryOTPStore()

    if redis is None:
        redis = Redis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_connect_timeout=settings.redis_socket_timeout,
            socket_timeout=settings.redis_socket_timeout,
        )
    return RedisOTPStore(redis, safe_logger)
