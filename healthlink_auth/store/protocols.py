"""Protocols defining the OTP store contract."""

from datetime import timedelta
from typing import Protocol, runtime_checkable


@runtime_checkable
class OTPStore(Protocol):
    """
    Protocol every OTP backend implements.

    At most one code is held per email; ``put`` replaces any previous one.
    Missing and expired entries are indistinguishable to callers.
    """

    async def put(self, email: str, code: str, ttl: timedelta) -> None:
        """Store ``code`` for ``email``, replacing any existing entry."""
        ...

    async def get(self, email: str) -> str | None:
        """Return the active code, or None if missing or expired."""
        ...

    async def delete(self, email: str) -> None:
        """Remove the entry. Idempotent."""
        ...

    async def exists(self, email: str) -> bool:
        """True iff :meth:`get` would return a code."""
        ...

    async def consume(self, email: str, code: str) -> bool:
        """Atomically delete the entry iff it still holds ``code``."""
        ...


@runtime_checkable
class AttemptCounter(Protocol):
    """
    Optional capability: per-email request counting within a window.

    Only stores shared between instances implement it; rate limiting is
    inactive for stores without it.
    """

    async def incr_attempts(self, email: str, window: timedelta) -> int:
        """Increment the counter, (re)apply the window expiry, return the new count."""
        ...
