import dataclasses
import logging
import smtplib
from datetime import date

import pytest

from backend.madrasha_module import email_service
from backend.madrasha_module.email_service import (
    EmailDispatchError,
    MailgunEmailService,
    MockEmailService,
    SendGridEmailService,
    SmtpEmailService,
    get_email_service,
)

from .conftest import RecordingMailer


def test_typed_emails_render_through_send_email():
    mailer = RecordingMailer(from_email="office@test.local", from_name="Darul Abraar")
    assert mailer.send_welcome_email("a@test.local", "Ahmad", "pass1234") is True
    assert mailer.send_fee_reminder_email("a@test.local", "Ahmad", 1500.0, date(2024, 2, 1)) is True
    assert mailer.send_password_reset_email("a@test.local", "Ahmad", "https://example.test/reset") is True
    assert mailer.send_announcement_email("a@test.local", "Eid", "Closed") is True

    welcome, reminder, reset, announcement = mailer.outbox
    assert welcome["subject"] == "Welcome to Darul Abraar"
    assert "pass1234" in welcome["html"]
    assert "01/02/2024" in reminder["html"]
    assert "https://example.test/reset" in reset["html"]
    assert announcement["subject"].startswith("ঘোষণা: Eid")


def test_mock_mailer_only_logs(caplog):
    mailer = MockEmailService(from_email="office@test.local", from_name="Darul Abraar")
    with caplog.at_level(logging.INFO, logger=email_service.__name__):
        assert mailer.send_welcome_email("a@test.local", "Ahmad", "pass1234") is True
    assert "Mock email sent: To=a@test.local, Subject=Welcome to Darul Abraar" in caplog.text
    assert "pass1234" not in caplog.text
    assert not hasattr(mailer, "outbox")


@pytest.mark.parametrize(
    "provider, expected",
    [
        ("mock", MockEmailService),
        ("smtp", SmtpEmailService),
        ("sendgrid", SendGridEmailService),
        ("MAILGUN", MailgunEmailService),
        ("pigeon", MockEmailService),
    ],
)
def test_factory_picks_provider(provider, expected):
    assert type(get_email_service(provider)) is expected


@pytest.mark.parametrize("service_cls", [SendGridEmailService, MailgunEmailService])
def test_unimplemented_providers_raise(service_cls):
    with pytest.raises(EmailDispatchError):
        service_cls().send_email("a@test.local", "Hi", "<p>Hi</p>")


def test_smtp_requires_credentials(monkeypatch):
    monkeypatch.setattr(
        email_service,
        "settings",
        dataclasses.replace(email_service.settings, smtp_username="", smtp_password=""),
    )
    with pytest.raises(EmailDispatchError, match="credentials"):
        SmtpEmailService().send_email("a@test.local", "Hi", "<p>Hi</p>")


def test_smtp_wraps_transport_errors(monkeypatch):
    monkeypatch.setattr(
        email_service,
        "settings",
        dataclasses.replace(email_service.settings, smtp_username="office@test.local", smtp_password="app-password"),
    )

    def refuse(*args, **kwargs):
        raise smtplib.SMTPConnectError(421, "try later")

    monkeypatch.setattr(email_service.smtplib, "SMTP", refuse)
    with pytest.raises(EmailDispatchError, match="Failed to send email"):
        SmtpEmailService().send_email("a@test.local", "Hi", "<p>Hi</p>")
