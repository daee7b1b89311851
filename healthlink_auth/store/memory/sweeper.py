"""Periodic eviction of expired codes from the in-process store."""

import asyncio
import logging
from datetime import timedelta

from healthlink_auth.safe_logger import SafeLogger
from healthlink_auth.store.memory.adapter import InMemoryOTPStore

logger = logging.getLogger(__name__)


class OTPSweeper:
    """
    Background task that calls :meth:`InMemoryOTPStore.purge_expired` on a fixed schedule.

    A failing pass is logged and the loop carries on with the next one.

    Example:
        ```python
        sweeper = OTPSweeper(store, timedelta(minutes=5), SafeLogger())
        sweeper.start()
        ...
        await sweeper.stop()
        ```
    """

    def __init__(
        self,
        store: InMemoryOTPStore,
        interval: timedelta,
        safe_logger: SafeLogger,
    ) -> None:
        self.store = store
        self.interval = interval
        self.safe_logger = safe_logger
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> int:
        """
        Run a single sweep pass.

        Returns:
            Number of expired entries removed, 0 if the pass failed
        """
        try:
            removed = self.store.purge_expired()
        except Exception as e:
            self.safe_logger.event("otp_sweep_failed").field("error", str(e)).log(
                logging.ERROR
            )
            return 0

        if removed:
            logger.debug("Cleaned up %d expired OTPs from memory", removed)
        return removed

    async def _loop(self) -> None:
        seconds = self.interval.total_seconds()
        while True:
            await asyncio.sleep(seconds)
            await self.run_once()

    def start(self) -> None:
        """Schedule the sweep loop on the running event loop. No-op if already running."""
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name="otp-sweeper")

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
