"""Tests for the EmailService."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import aiosmtplib
import pytest

from tilu_booking.config import Settings
from tilu_booking.errors import DeliveryFailure
from tilu_booking.services.email_service import OTP_SUBJECT, EmailService


@pytest.fixture
def smtp_settings():
    return Settings(
        smtp_host="smtp.example.com",
        smtp_port=2525,
        smtp_username="mailer",
        smtp_password="secret",
        email_from="Pineus Tilu <noreply@example.com>",
    )


@pytest.mark.asyncio
async def test_send_otp_builds_message(smtp_settings):
    with patch("tilu_booking.services.email_service.aiosmtplib.send", new=AsyncMock()) as send:
        await EmailService(smtp_settings).send_otp("a@x.com", "123456", ttl_minutes=5)

    send.assert_awaited_once()
    msg = send.call_args.args[0]
    assert msg["To"] == "a@x.com"
    assert msg["Subject"] == OTP_SUBJECT
    assert msg["From"] == "Pineus Tilu <noreply@example.com>"
    plain = msg.get_body(preferencelist=("plain",)).get_content()
    html = msg.get_body(preferencelist=("html",)).get_content()
    assert "123456" in plain and "5 minutes" in plain
    assert "123456" in html
    assert send.call_args.kwargs["hostname"] == "smtp.example.com"
    assert send.call_args.kwargs["port"] == 2525


@pytest.mark.asyncio
async def test_smtp_error_raises_delivery_failure(smtp_settings):
    failing = AsyncMock(side_effect=aiosmtplib.SMTPConnectError("refused"))
    with patch("tilu_booking.services.email_service.aiosmtplib.send", new=failing):
        with pytest.raises(DeliveryFailure):
            await EmailService(smtp_settings).send("a@x.com", "hi", "body")


@pytest.mark.asyncio
async def test_without_smtp_host_email_is_only_logged(caplog):
    with patch("tilu_booking.services.email_service.aiosmtplib.send", new=AsyncMock()) as send:
        await EmailService(Settings(smtp_host="")).send_otp("a@x.com", "123456")

    send.assert_not_called()
    assert "a@x.com" in caplog.text
