import logging
import smtplib
from abc import ABC, abstractmethod
from datetime import date
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from functools import lru_cache

from .config import settings


logger = logging.getLogger(__name__)


class EmailDispatchError(Exception):
    pass


class EmailService(ABC):
    """Typed school emails built on a single ``send_email`` primitive."""

    def __init__(self, from_email: str | None = None, from_name: str | None = None):
        self.from_email = from_email or settings.email_from
        self.from_name = from_name or settings.email_from_name

    @abstractmethod
    def send_email(self, to: str, subject: str, html: str) -> bool:
        ...

    def send_welcome_email(self, to: str, name: str, password: str) -> bool:
        subject = f"Welcome to {self.from_name}"
        html = (
            f"<h2>আসসালামু আলাইকুম {name}</h2>"
            f"<p>{self.from_name}য় আপনাকে স্বাগতম!</p>"
            "<p>আপনার লগইন তথ্য:</p>"
            f"<ul><li>ইমেইল: {to}</li><li>পাসওয়ার্ড: {password}</li></ul>"
            "<p>দয়া করে লগইন করার পর পাসওয়ার্ড পরিবর্তন করুন।</p>"
            "<p>ধন্যবাদ</p>"
        )
        return self.send_email(to, subject, html)

    def send_password_reset_email(self, to: str, name: str, reset_link: str) -> bool:
        subject = f"পাসওয়ার্ড রিসেট - {self.from_name}"
        html = (
            f"<h2>আসসালামু আলাইকুম {name}</h2>"
            "<p>আপনার পাসওয়ার্ড রিসেট করার জন্য নিচের লিংকে ক্লিক করুন:</p>"
            f'<a href="{reset_link}">পাসওয়ার্ড রিসেট করুন</a>'
            "<p>এই লিংকটি ২৪ ঘন্টার জন্য বৈধ।</p>"
            "<p>ধন্যবাদ</p>"
        )
        return self.send_email(to, subject, html)

    def send_fee_reminder_email(self, to: str, student_name: str, amount: float, due_date: date) -> bool:
        subject = f"ফি পরিশোধের অনুস্মারক - {self.from_name}"
        html = (
            "<h2>আসসালামু আলাইকুম</h2>"
            f"<p>{student_name} এর ফি পরিশোধের অনুস্মারক:</p>"
            f"<ul><li>পরিমাণ: {amount:g} টাকা</li><li>শেষ তারিখ: {due_date.strftime('%d/%m/%Y')}</li></ul>"
            "<p>দয়া করে নির্ধারিত সময়ের মধ্যে ফি পরিশোধ করুন।</p>"
            "<p>ধন্যবাদ</p>"
        )
        return self.send_email(to, subject, html)

    def send_announcement_email(self, to: str, title: str, content: str) -> bool:
        subject = f"ঘোষণা: {title} - {self.from_name}"
        html = f"<h2>{title}</h2><div>{content}</div><br><p>{self.from_name}</p>"
        return self.send_email(to, subject, html)


class MockEmailService(EmailService):
    """Logs each message instead of delivering it; nothing is kept after the call."""

    def send_email(self, to: str, subject: str, html: str) -> bool:
        logger.info(f"Mock email sent: To={to}, Subject={subject}")
        return True


class SmtpEmailService(EmailService):
    def send_email(self, to: str, subject: str, html: str) -> bool:
        if not settings.smtp_username or not settings.smtp_password:
            raise EmailDispatchError("SMTP credentials are missing")

        msg = MIMEMultipart()
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = to
        msg["Subject"] = subject
        msg.attach(MIMEText(html, "html", "utf-8"))

        try:
            with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=15) as server:
                server.starttls()
                server.login(settings.smtp_username, settings.smtp_password)
                server.sendmail(self.from_email, [to], msg.as_string())
        except (smtplib.SMTPException, OSError) as exc:
            raise EmailDispatchError(f"Failed to send email to {to}: {exc}") from exc
        logger.info(f"Email sent via SMTP: To={to}, Subject={subject}")
        return True


class SendGridEmailService(EmailService):
    def send_email(self, to: str, subject: str, html: str) -> bool:
        raise EmailDispatchError("SendGrid email provider not implemented yet")


class MailgunEmailService(EmailService):
    def send_email(self, to: str, subject: str, html: str) -> bool:
        raise EmailDispatchError("Mailgun email provider not implemented yet")


PROVIDERS: dict[str, type[EmailService]] = {
    "mock": MockEmailService,
    "smtp": SmtpEmailService,
    "sendgrid": SendGridEmailService,
    "mailgun": MailgunEmailService,
}


def get_email_service(provider: str | None = None) -> EmailService:
    provider = (provider or settings.email_provider).lower()
    service_cls = PROVIDERS.get(provider)
    if service_cls is None:
        logger.warning(f"Unknown EMAIL_PROVIDER '{provider}', using mock email")
        service_cls = MockEmailService
    return service_cls()


@lru_cache(maxsize=1)
def get_mailer() -> EmailService:
    mailer = get_email_service()
    logger.info(f"Email provider: {type(mailer).__name__}")
    return mailer
