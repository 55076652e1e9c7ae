"""Email service — sends OTP emails via async SMTP."""

from __future__ import annotations

import logging
from email.message import EmailMessage

import aiosmtplib

from tilu_booking.config import Settings, settings as default_settings
from tilu_booking.errors import DeliveryFailure

logger = logging.getLogger(__name__)

OTP_SUBJECT = "Your booking OTP code"


class EmailService:
    """Sends transactional emails using the configured SMTP server.

    With no ``smtp_host`` configured the message is logged instead of
    sent, which keeps local development usable without a mail server.
    """

    def __init__(self, config: Settings | None = None) -> None:
        self._config = config or default_settings

    async def send(
        self, to_email: str, subject: str, body: str, html: str | None = None
    ) -> None:
        """Deliver one message. Raises ``DeliveryFailure`` on SMTP errors."""
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self._config.email_from
        msg["To"] = to_email
        msg.set_content(body)
        if html is not None:
            msg.add_alternative(html, subtype="html")

        if not self._config.smtp_host:
            logger.warning("SMTP_HOST not set — email to %s logged only:\n%s", to_email, body)
            return

        logger.info("Sending email %r to %s", subject, to_email)
        try:
            await aiosmtplib.send(
                msg,
                hostname=self._config.smtp_host,
                port=self._config.smtp_port,
                username=self._config.smtp_username or None,
                password=self._config.smtp_password or None,
                start_tls=self._config.smtp_start_tls,
            )
        except (aiosmtplib.SMTPException, OSError) as exc:
            raise DeliveryFailure(f"Could not send email to {to_email}: {exc}") from exc
        logger.info("Email sent to %s", to_email)

    async def send_otp(self, to_email: str, otp: str, ttl_minutes: int = 5) -> None:
        """Send the booking verification code to *to_email*."""
        body = (
            "Use the following code to verify your booking:\n\n"
            f"    {otp}\n\n"
            f"The code is valid for {ttl_minutes} minutes.\n\n"
            f"The {self._config.app_name} Team"
        )
        html = (
            '<div style="font-family: Arial; padding: 10px;">'
            f"<h2>{self._config.app_name} booking OTP</h2>"
            "<p>Use the following code to verify your booking:</p>"
            f'<h1 style="letter-spacing:4px;">{otp}</h1>'
            f"<p>The code is valid for {ttl_minutes} minutes.</p>"
            "</div>"
        )
        await self.send(to_email, OTP_SUBJECT, body, html=html)
