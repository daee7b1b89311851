"""Redis OTP backend."""

from healthlink_auth.store.redis.adapter import (
    OTP_ATTEMPTS_PREFIX,
    OTP_PREFIX,
    RedisOTPStore,
    attempts_key,
    otp_key,
)

__all__ = ["OTP_ATTEMPTS_PREFIX", "OTP_PREFIX", "RedisOTPStore", "attempts_key", "otp_key"]
