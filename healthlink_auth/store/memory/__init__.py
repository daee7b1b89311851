"""In-process OTP backend."""

from healthlink_auth.store.memory.adapter import InMemoryOTPStore, OTPEntry
from healthlink_auth.store.memory.sweeper import OTPSweeper

__all__ = ["InMemoryOTPStore", "OTPEntry", "OTPSweeper"]
