"""Verification mail over SMTP."""

from __future__ import annotations

import smtplib
from email.message import EmailMessage
from urllib.parse import quote

from ..config import Settings
from ..errors import MailDeliveryError

VERIFY_SUBJECT = "Verify your email address"
VERIFY_BODY = """\
<p>Thanks for signing up with Storefront Solutions!</p>
<p>Click the link below to verify your email address:</p>
<p><a href="{url}">{url}</a></p>
<p>If you did not request this, you can ignore this email.</p>
"""


class Mailer:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def verification_url(self, token: str) -> str:
        base = self.settings.app_base_url.rstrip("/")
        return f"{base}/auth/verify-email?token={quote(token, safe='')}"

    def build_verification(self, to_email: str, token: str) -> EmailMessage:
        url = self.verification_url(token)
        sender = self.settings.mail_sender or self.settings.smtp_user or "no-reply@storefrontsolutions.shop"
        message = EmailMessage()
        message["Subject"] = VERIFY_SUBJECT
        message["From"] = f"Storefront Solutions <{sender}>"
        message["To"] = to_email
        message.set_content(f"Verify your email address: {url}")
        message.add_alternative(VERIFY_BODY.format(url=url), subtype="html")
        return message

    def send_verification(self, to_email: str, token: str) -> None:
        if not self.settings.smtp_host:
            raise MailDeliveryError("SMTP host is not configured")

        message = self.build_verification(to_email, token)
        try:
            with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port, timeout=10) as smtp:
                if self.settings.smtp_use_tls:
                    smtp.starttls()
                if self.settings.smtp_user and self.settings.smtp_password:
                    smtp.login(self.settings.smtp_user, self.settings.smtp_password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            raise MailDeliveryError(str(exc)) from exc
