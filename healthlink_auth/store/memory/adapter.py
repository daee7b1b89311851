"""In-process OTP store with expiry timestamps."""

import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class OTPEntry:
    """A stored code and the instant it stops being valid."""

    code: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class InMemoryOTPStore:
    """
    OTP store backed by a dict owned by a single process.

    Expiry is checked lazily on every read, so expired codes are never
    returned even between sweeper passes. A lock guards the map because
    request handlers and the sweeper may touch it from different threads.

    This store does not count attempts, so rate limiting is inactive when it
    is used.

    Example:
        ```python
        store = InMemoryOTPStore()
        await store.put("a@b.com", "123456", timedelta(minutes=5))
        await store.consume("a@b.com", "123456")  # True
        ```
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        """
        Initialize an empty store.

        Args:
            clock: Returns the current UTC time; injectable for tests
        """
        self._clock = clock
        self._entries: dict[str, OTPEntry] = {}
        self._lock = threading.Lock()

    def _live_entry(self, email: str, now: datetime) -> OTPEntry | None:
        # Caller holds the lock
        entry = self._entries.get(email)
        if entry is None:
            return None
        if entry.is_expired(now):
            del self._entries[email]
            return None
        return entry

    async def put(self, email: str, code: str, ttl: timedelta) -> None:
        entry = OTPEntry(code=code, expires_at=self._clock() + ttl)
        with self._lock:
            self._entries[email] = entry

    async def get(self, email: str) -> str | None:
        with self._lock:
            entry = self._live_entry(email, self._clock())
        return entry.code if entry else None

    async def delete(self, email: str) -> None:
        with self._lock:
            self._entries.pop(email, None)

    async def exists(self, email: str) -> bool:
        with self._lock:
            return self._live_entry(email, self._clock()) is not None

    async def consume(self, email: str, code: str) -> bool:
        """
        Remove the entry if it still holds ``code``.

        Returns:
            True if this call removed the entry, False if it was missing,
            expired, or replaced by a newer code
        """
        with self._lock:
            entry = self._live_entry(email, self._clock())
            if entry is None or entry.code != code:
                return False
            del self._entries[email]
            return True

    def purge_expired(self) -> int:
        """
        Remove every expired entry.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        with self._lock:
            expired = [email for email, entry in self._entries.items() if entry.is_expired(now)]
            for email in expired:
                del self._entries[email]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
