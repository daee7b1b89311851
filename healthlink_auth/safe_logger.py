"""Structured audit events with email masking."""

import logging
from typing import Any, Self


def mask_email(email: str | None) -> str:
    """
    Redact the local part of an email address, keeping its first character.

    Example:
        >>> mask_email("john@example.com")
        'j***@example.com'
        >>> mask_email("not-an-email")
        '***'
    """
    if not email or "@" not in email:
        return "***"
    local, _, domain = email.partition("@")
    if not local:
        return f"***@{domain}"
    return f"{local[0]}***@{domain}"


class AuditEvent:
    """
    Builder for a single audit event.

    Created through :meth:`SafeLogger.event`; nothing is written until
    :meth:`log` is called.
    """

    def __init__(self, safe_logger: "SafeLogger", name: str) -> None:
        self._safe_logger = safe_logger
        self.name = name
        self.fields: dict[str, Any] = {}

    def field(self, key: str, value: Any) -> Self:  # noqa: ANN401
        """Attach a field verbatim."""
        self.fields[key] = value
        return self

    def masked(self, key: str, email: str | None) -> Self:
        """Attach an email address through :func:`mask_email`."""
        self.fields[key] = mask_email(email)
        return self

    def log(self, level: int = logging.INFO) -> None:
        """Emit the event at ``level``."""
        self._safe_logger.emit(self, level)


class SafeLogger:
    """
    Redaction-aware audit logger over a standard library logger.

    Every event becomes one log record whose message reads
    ``event_name key=value ...`` and whose ``extra`` carries ``event`` and
    ``fields`` for structured handlers.

    Example:
        ```python
        audit = SafeLogger(logging.getLogger("healthlink.audit"))
        audit.event("otp_generated").masked("email", email).log()
        ```
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("healthlink_auth.audit")

    def event(self, name: str) -> AuditEvent:
        return AuditEvent(self, name)

    def emit(self, event: AuditEvent, level: int) -> None:
        rendered = " ".join(f"{key}={value}" for key, value in event.fields.items())
        self.logger.log(
            level,
            "%s %s",
            event.name,
            rendered,
            extra={"event": event.name, "fields": dict(event.fields)},
        )
