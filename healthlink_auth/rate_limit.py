"""Per-email limit on OTP requests."""

from datetime import timedelta

from healthlink_auth.exceptions import OTPRateLimitExceeded
from healthlink_auth.store.protocols import AttemptCounter


class RateLimiter:
    """
    Fixed-size budget of OTP requests per email within a rolling window.

    Each call to :meth:`hit` counts, including rejected ones; the counter is
    never decremented and only disappears when its window expires.
    """

    def __init__(self, counter: AttemptCounter, max_attempts: int, window: timedelta) -> None:
        self.counter = counter
        self.max_attempts = max_attempts
        self.window = window

    async def hit(self, email: str) -> int:
        """
        Record one OTP request for ``email``.

        Returns:
            Post-increment request count

        Raises:
            OTPRateLimitExceeded: If the count exceeds ``max_attempts``
            OTPStoreUnavailableError: If the counter store cannot be reached
        """
        count = await self.counter.incr_attempts(email, self.window)
        if count > self.max_attempts:
            raise OTPRateLimitExceeded()
        return count
