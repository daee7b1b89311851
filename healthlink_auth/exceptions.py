"""Errors raised by the OTP subsystem."""

from fastapi import HTTPException, status  # type: ignore[import-untyped]


class OTPStoreUnavailableError(Exception):
    """The shared key-value store could not be reached or returned a driver error."""


class MailSendError(Exception):
    """The SMTP relay rejected or failed to accept a message."""

    def __init__(self, to: str, reason: str) -> None:
        super().__init__(f"Failed to send email: {reason}")
        self.to = to
        self.reason = reason


class OTPRateLimitExceeded(HTTPException):
    """Too many OTP requests for one email within the rate-limit window."""

    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many OTP requests. Please try again later.",
        )
