"""Mail dispatcher sending plain-text email through async SMTP."""

import asyncio
import logging
from email.message import EmailMessage
from email.utils import formataddr

import aiosmtplib

from healthlink_auth.config import MailSettings
from healthlink_auth.exceptions import MailSendError
from healthlink_auth.safe_logger import SafeLogger

logger = logging.getLogger(__name__)


class MailDispatcher:
    """
    Sends transactional emails through the configured SMTP relay.

    ``send_sync`` waits for the relay and raises on failure, for flows that
    must observe the outcome. ``send_async`` hands the message to a background
    task and only logs failures.
    """

    def __init__(self, settings: MailSettings, safe_logger: SafeLogger) -> None:
        self.settings = settings
        self.safe_logger = safe_logger
        self._pending: set[asyncio.Task[None]] = set()

    def build_message(self, to: str, subject: str, body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = formataddr((self.settings.from_name, self.settings.from_address))
        msg["To"] = to
        msg.set_content(body)
        return msg

    async def _deliver(self, to: str, subject: str, body: str) -> None:
        msg = self.build_message(to, subject, body)
        await aiosmtplib.send(
            msg,
            hostname=self.settings.smtp_host,
            port=self.settings.smtp_port,
            username=self.settings.smtp_username or None,
            password=self.settings.smtp_password or None,
            start_tls=self.settings.smtp_start_tls,
            timeout=self.settings.smtp_timeout,
        )

    async def send_sync(self, to: str, subject: str, body: str) -> None:
        """
        Send a message and wait for the relay's answer.

        Raises:
            MailSendError: If the SMTP transport fails for any reason
        """
        try:
            await self._deliver(to, subject, body)
        except (aiosmtplib.SMTPException, OSError) as e:
            self.safe_logger.event("email_send_failed").field("type", "simple").masked(
                "email", to
            ).field("error", str(e)).field("error_class", e.__class__.__name__).log(
                logging.ERROR
            )
            raise MailSendError(to, str(e)) from e

        self.safe_logger.event("email_sent").field("type", "simple").masked("email", to).log()

    def send_async(self, to: str, subject: str, body: str) -> asyncio.Task[None]:
        """Schedule a message for best-effort delivery on the running loop."""
        task = asyncio.create_task(self._send_quietly(to, subject, body))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _send_quietly(self, to: str, subject: str, body: str) -> None:
        try:
            await self.send_sync(to, subject, body)
        except MailSendError:
            logger.warning("Background email delivery failed")

    async def aclose(self) -> None:
        """Wait for every background send to finish."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
