"""Assembly of the OTP subsystem and its startup/shutdown hooks."""

import logging
import random
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from redis.asyncio import Redis

from healthlink_auth.config import MailSettings, OTPSettings
from healthlink_auth.mail import MailDispatcher
from healthlink_auth.safe_logger import SafeLogger
from healthlink_auth.service import OTPService
from healthlink_auth.store import InMemoryOTPStore, OTPSweeper, RedisOTPStore, build_otp_store

logger = logging.getLogger(__name__)


@dataclass
class OTPRuntime:
    """The wired OTP service together with the resources it owns."""

    service: OTPService
    mailer: MailDispatcher
    sweeper: OTPSweeper | None = None
    owns_redis: bool = False

    async def start(self) -> None:
        self.service.log_configuration()
        store = self.service.store
        if isinstance(store, RedisOTPStore):
            reachable = await store.ping()
            self.service.audit.event("otp_redis_health").field("reachable", reachable).log(
                logging.INFO if reachable else logging.WARNING
            )
        if self.sweeper is not None:
            self.sweeper.start()

    async def stop(self) -> None:
        """Stop the sweeper, drain pending mail and close the Redis client if owned."""
        try:
            if self.sweeper is not None:
                await self.sweeper.stop()
        finally:
            try:
                await self.mailer.aclose()
            finally:
                store = self.service.store
                if self.owns_redis and isinstance(store, RedisOTPStore):
                    await store.redis.aclose()
        logger.info("OTP runtime stopped")


def build_otp_runtime(
    settings: OTPSettings | None = None,
    mail_settings: MailSettings | None = None,
    *,
    safe_logger: SafeLogger | None = None,
    redis: Redis | None = None,
    rng: random.Random | None = None,
) -> OTPRuntime:
    """
    Wire store, mailer, service and (for the in-process backend) the sweeper.

    Args:
        settings: OTP configuration; read from the environment if omitted
        mail_settings: SMTP configuration; read from the environment if omitted
        safe_logger: Audit logger shared by every component
        redis: Redis client to reuse for the shared backend; the caller keeps
            ownership and closes it
        rng: Random source for codes

    Returns:
        An unstarted OTPRuntime

    Example:
        ```python
        runtime = build_otp_runtime()

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            async with otp_lifespan(runtime):
                yield

        app = FastAPI(lifespan=lifespan)
        app.include_router(get_otp_router(lambda: runtime.service), prefix="/auth")
        ```
    """
    settings = settings or OTPSettings()
    mail_settings = mail_settings or MailSettings()
    safe_logger = safe_logger or SafeLogger()

    store = build_otp_store(settings, safe_logger, redis=redis)
    mailer = MailDispatcher(mail_settings, safe_logger)
    service = OTPService(settings, store, mailer, safe_logger, rng=rng)

    sweeper = None
    if isinstance(store, InMemoryOTPStore):
        sweeper = OTPSweeper(store, settings.sweep_interval, safe_logger)

    return OTPRuntime(
        service=service,
        mailer=mailer,
        sweeper=sweeper,
        owns_redis=redis is None and isinstance(store, RedisOTPStore),
    )


@asynccontextmanager
async def otp_lifespan(runtime: OTPRuntime) -> AsyncIterator[OTPRuntime]:
    """Start the runtime on entry and stop it on exit."""
    await runtime.start()
    try:
        yield runtime
    finally:
        await runtime.stop()
