"""OTP service façade: generate, verify, delete and check one-time codes."""

import logging
import random
from typing import Protocol

from healthlink_auth.config import OTPSettings
from healthlink_auth.exceptions import MailSendError, OTPStoreUnavailableError
from healthlink_auth.rate_limit import RateLimiter
from healthlink_auth.safe_logger import SafeLogger
from healthlink_auth.security import codes_match, generate_otp
from healthlink_auth.store.protocols import AttemptCounter, OTPStore

OTP_EMAIL_SUBJECT = "Your HealthLink verification code"


def otp_email_body(code: str, ttl_minutes: float) -> str:
    minutes = int(ttl_minutes) if float(ttl_minutes).is_integer() else ttl_minutes
    return (
        f"Your one-time verification code is: {code}\n\n"
        f"This code will expire in {minutes} minutes."
    )


class Mailer(Protocol):
    """What the service needs from a mail dispatcher."""

    async def send_sync(self, to: str, subject: str, body: str) -> None: ...

    def send_async(self, to: str, subject: str, body: str) -> object: ...


class OTPService:
    """
    Orchestrates the lifecycle of email OTP codes.

    The store decides the deployment mode: a store that counts attempts (Redis)
    enables rate limiting, one that does not (in-process) stores
    unconditionally. When the shared store is unreachable the service
    chooses availability: ``generate`` still mails and returns a code that
    was never stored, and ``verify``/``exists`` answer False. Every such
    downgrade is audited as ``otp_redis_unavailable*``.

    Example:
        ```python
        service = OTPService(settings, store, mailer, SafeLogger())
        code = await service.generate("patient@example.com", registration=True)
        await service.verify("patient@example.com", code)  # True
        ```
    """

    def __init__(
        self,
        settings: OTPSettings,
        store: OTPStore,
        mailer: Mailer,
        safe_logger: SafeLogger,
        rng: random.Random | None = None,
    ) -> None:
        """
        Initialize the service.

        Args:
            settings: Frozen OTP configuration
            store: Backend holding OTP records
            mailer: Dispatcher used to deliver codes
            safe_logger: Redaction-aware audit logger
            rng: Random source for codes; the system CSPRNG if omitted
        """
        self.settings = settings
        self.store = store
        self.mailer = mailer
        self.audit = safe_logger
        self.rng = rng
        self.rate_limiter: RateLimiter | None = None
        if isinstance(store, AttemptCounter):
            self.rate_limiter = RateLimiter(
                store, settings.max_attempts_per_window, settings.window
            )

    @property
    def rate_limited(self) -> bool:
        return self.rate_limiter is not None

    def log_configuration(self) -> None:
        """Emit the startup audit event describing the active mode."""
        self.audit.event("otp_service_initialized").field(
            "backend", self.settings.backend.value
        ).field("mail_enabled", self.settings.mail_enabled).field(
            "rate_limited", self.rate_limited
        ).log()
        if not self.settings.mail_enabled:
            self.audit.event("otp_mail_disabled").field(
                "hint", "set HEALTHLINK_OTP_MAIL_ENABLED=true to send codes"
            ).log(logging.WARNING)

    async def admit_request(self, email: str) -> None:
        """
        Count one OTP request for ``email`` against its rate-limit budget.

        Callers that must answer before deciding whether to generate (for
        example, after an account lookup) admit the request first so that
        every email spends its budget the same way. An unreachable store lets
        the request through.

        Raises:
            OTPRateLimitExceeded: If the email exhausted its request budget
        """
        if self.rate_limiter is None:
            return
        try:
            await self.rate_limiter.hit(email)
        except OTPStoreUnavailableError as e:
            self.audit.event("otp_redis_unavailable").masked("email", email).field(
                "error", str(e)
            ).log(logging.WARNING)

    async def generate(
        self, email: str, *, registration: bool = False, admitted: bool = False
    ) -> str:
        """
        Generate, store and deliver a new code for ``email``.

        Any previous code for the same email stops verifying once this call
        has stored the new one.

        Args:
            email: Recipient; must be non-empty
            registration: Deliver synchronously, for flows that must only
                continue once the relay accepted the message
            admitted: The request was already counted by :meth:`admit_request`

        Returns:
            The generated code

        Raises:
            ValueError: If email is empty
            OTPRateLimitExceeded: If the email exhausted its request budget
        """
        if not email:
            raise ValueError("email must not be empty")

        code = generate_otp(self.settings.code_length, self.rng)

        try:
            if self.rate_limiter is not None and not admitted:
                await self.rate_limiter.hit(email)
            await self.store.put(email, code, self.settings.ttl)
        except OTPStoreUnavailableError as e:
            self.audit.event("otp_redis_unavailable").masked("email", email).field(
                "error", str(e)
            ).log(logging.WARNING)
            await self._deliver(email, code, registration)
            return code

        event = "otp_generated" if self.rate_limited else "otp_generated_dev_mode"
        self.audit.event(event).masked("email", email).log()
        await self._deliver(email, code, registration)
        return code

    async def verify(self, email: str, code: str) -> bool:
        """
        Check ``code`` against the active code and consume it on success.

        Misses, mismatches, expired codes and store outages all return False;
        only a successful verification removes the record.

        Args:
            email: Email the code was sent to
            code: Code provided by the user

        Returns:
            True if the code matched and this call consumed it
        """
        try:
            stored = await self.store.get(email)
            if stored is None:
                self.audit.event("otp_not_found").masked("email", email).log()
                return False

            if not codes_match(stored, code):
                self.audit.event("otp_invalid").masked("email", email).log()
                return False

            consumed = await self.store.consume(email, stored)
        except OTPStoreUnavailableError as e:
            self.audit.event("otp_redis_unavailable_verify").masked("email", email).field(
                "error", str(e)
            ).log(logging.WARNING)
            return False

        if not consumed:
            # Lost a race with another verify or a newer generate
            self.audit.event("otp_invalid").masked("email", email).field(
                "reason", "consumed_concurrently"
            ).log()
            return False

        self.audit.event("otp_verified").masked("email", email).log()
        return True

    async def delete(self, email: str) -> None:
        """Remove any active code for ``email``; attempt counters are untouched."""
        try:
            await self.store.delete(email)
        except OTPStoreUnavailableError as e:
            self.audit.event("otp_redis_unavailable_delete").masked("email", email).field(
                "error", str(e)
            ).log(logging.WARNING)
        self.audit.event("otp_deleted").masked("email", email).log()

    async def exists(self, email: str) -> bool:
        """Whether a non-expired code is active for ``email``."""
        try:
            return await self.store.exists(email)
        except OTPStoreUnavailableError as e:
            self.audit.event("otp_redis_unavailable_exists").masked("email", email).field(
                "error", str(e)
            ).log(logging.WARNING)
            return False

    async def _deliver(self, email: str, code: str, registration: bool) -> None:
        if not self.settings.mail_enabled:
            self.audit.event("otp_email_skipped_disabled").masked("email", email).field(
                "otp", code
            ).log(logging.WARNING)
            return

        body = otp_email_body(code, self.settings.ttl_minutes)

        if not registration:
            self.mailer.send_async(email, OTP_EMAIL_SUBJECT, body)
            return

        self.audit.event("otp_email_attempting").masked("email", email).log()
        try:
            await self.mailer.send_sync(email, OTP_EMAIL_SUBJECT, body)
        except MailSendError as e:
            # The code is already stored; log it so an operator can relay it by hand
            self.audit.event("otp_email_send_failed").masked("email", email).field(
                "otp", code
            ).field("error", e.reason).log(logging.ERROR)
            return

        self.audit.event("otp_email_sent_success").masked("email", email).log()
