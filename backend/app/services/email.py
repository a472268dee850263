"""
Email delivery and message templates.

Follow-up reminders go to students and staff from the nightly job; staff
notifications cover account creation and password resets. Delivery is async
SMTP through aiosmtplib; a failed send raises EmailDeliveryError so callers
decide whether it is fatal.
"""

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid
from html import escape
from typing import Dict, Optional

import aiosmtplib

from backend.app.core.exceptions import EmailDeliveryError
from backend.app.core.logging_config import get_logger
from backend.app.core.settings import Settings, get_settings
from backend.app.core.time import utc_now

logger = get_logger(__name__)

FOLLOW_UP_SUBJECT = "Scheduled Follow-up Reminder"
TEST_EMAIL_SUBJECT = "Launchpad Student Form - Email Test"
SIGNATURE = "Launchpad Student Services"


class Mailer:
    """Async SMTP sender configured from settings."""

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        self.host = settings.email_host
        self.port = settings.email_port
        self.use_tls = settings.email_secure
        self.username = settings.email_from
        self.password = settings.email_password
        self.from_address = settings.email_from

    @property
    def is_configured(self) -> bool:
        return bool(self.host and self.username and self.password)

    async def send(
        self,
        to: str,
        subject: str,
        text: str,
        html: Optional[str] = None,
        *,
        from_address: Optional[str] = None,
        reply_to: Optional[str] = None,
        bcc: Optional[str] = None,
    ) -> str:
        """Send one message and return its Message-ID."""
        if not self.is_configured:
            logger.warning("Email service not configured, cannot send to %s", to)
            raise EmailDeliveryError("Email service is not configured", recipient=to)

        sender = from_address or self.from_address
        message = MIMEMultipart("alternative")
        message["From"] = sender
        message["To"] = to
        message["Subject"] = subject
        message["Message-ID"] = make_msgid(domain=sender.split("@")[-1] if "@" in sender else None)
        if reply_to:
            message["Reply-To"] = reply_to
        message.attach(MIMEText(text, "plain"))
        if html:
            message.attach(MIMEText(html, "html"))

        recipients = [to] + ([bcc] if bcc else [])
        try:
            await aiosmtplib.send(
                message,
                sender=sender,
                recipients=recipients,
                hostname=self.host,
                port=self.port,
                username=self.username,
                password=self.password,
                use_tls=self.use_tls,
                start_tls=False if self.use_tls else None,
            )
        except (aiosmtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send email to %s: %s", to, exc)
            raise EmailDeliveryError(f"Failed to send email to {to}: {exc}", recipient=to) from exc

        logger.info("Sent email to %s: %s", to, subject)
        return message["Message-ID"]


def get_mailer() -> Mailer:
    return Mailer()


def build_follow_up_email(interaction, recipient_type: str) -> str:
    """Plain-text reminder for a scheduled follow-up."""
    recipient_name = interaction.student_first_name if recipient_type == "student" else interaction.staff_member
    return (
        f"Hello {recipient_name},\n\n"
        "This is a reminder for your scheduled follow-up.\n\n"
        "Session Details:\n"
        f"- Student: {interaction.student_name}\n"
        f"- Program: {interaction.program}\n"
        f"- Type: {interaction.type}\n"
        f"- Reason: {interaction.reason}\n"
        f"- Notes: {interaction.notes}\n"
        f"- Follow-up Date: {interaction.follow_up_date or 'N/A'}\n\n"
        f"Best regards,\n{SIGNATURE}"
    )


def _wrap_html(title: str, body_html: str) -> str:
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        '<div style="background: #1d4ed8; padding: 20px; text-align: center; color: white;">'
        f'<h1 style="margin: 0; font-size: 24px;">{escape(title)}</h1>'
        f'<p style="margin: 10px 0 0;">{SIGNATURE}</p>'
        "</div>"
        f'<div style="background: #f8fafc; padding: 30px; color: #1e293b; line-height: 1.6;">{body_html}</div>'
        "</div>"
    )


def build_custom_email_html(body: str) -> str:
    return _wrap_html("Student Interaction Follow-up", escape(body).replace("\n", "<br>"))


def build_test_email() -> Dict[str, str]:
    stamp = utc_now().strftime("%Y-%m-%d %H:%M UTC")
    text = (
        "Email Test Successful!\n\n"
        f"Your email configuration is working correctly. Test completed at: {stamp}"
    )
    html = _wrap_html(
        "Email Configuration Test",
        "<h2>Email Test Successful!</h2>"
        "<p>The system can now send student follow-up notifications, staff reminder emails, "
        "interaction summaries and system alerts.</p>"
        f"<p>Test completed at: {stamp}</p>",
    )
    return {"subject": TEST_EMAIL_SUBJECT, "text": text, "html": html}


def build_staff_notification(
    kind: str,
    *,
    to: str,
    staff_name: str,
    temporary_password: Optional[str] = None,
    reset_token: Optional[str] = None,
    reset_by_name: Optional[str] = None,
) -> Dict[str, str]:
    """Subject, text and html for account-created, password-reset and forgot-password messages."""
    if kind == "account-created":
        subject = "Welcome to Launchpad Student Services - Your Account is Ready"
        text = (
            f"Hello {staff_name},\n\n"
            "Welcome to the Launchpad Student Services team! Your account has been created and is ready to use.\n\n"
            "Your Login Credentials:\n"
            f"- Email: {to}\n"
            f"- Temporary Password: {temporary_password}\n\n"
            "For security reasons, please log in and change your password immediately.\n\n"
            f"Best regards,\n{SIGNATURE} Team"
        )
    elif kind == "password-reset":
        subject = "Your Launchpad Password Has Been Reset"
        text = (
            f"Hello {staff_name},\n\n"
            f"Your password has been reset by {reset_by_name or 'an administrator'}.\n\n"
            f"Your New Temporary Password: {temporary_password}\n\n"
            "Please log in and change your password immediately. If you did not expect this reset, "
            "contact your administrator.\n\n"
            f"Best regards,\n{SIGNATURE} Team"
        )
    elif kind == "forgot-password":
        subject = "Reset Your Launchpad Password"
        text = (
            f"Hello {staff_name},\n\n"
            "We received a request to reset your password. Use the reset code below within 24 hours:\n\n"
            f"{reset_token}\n\n"
            "If you did not request a password reset, you can ignore this email.\n\n"
            f"Best regards,\n{SIGNATURE} Team"
        )
    else:
        raise ValueError(f"Unknown staff notification type: {kind}")

    html = _wrap_html(subject, escape(text).replace("\n", "<br>"))
    return {"subject": subject, "text": text, "html": html}
