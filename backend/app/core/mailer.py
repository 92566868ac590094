"""
Outbound email over SMTP
"""
import smtplib
from email.message import EmailMessage
from typing import Optional
import structlog

from app.core.config import Settings

logger = structlog.get_logger()


class MailerNotConfigured(RuntimeError):
    """SMTP credentials are missing"""


class Mailer:
    """
    Minimal SMTP client built from settings.

    Port 465 uses implicit TLS, anything else upgrades with STARTTLS when the
    server offers it.
    """

    def __init__(self, settings: Settings, timeout: float = 10.0):
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.user = settings.SMTP_USER
        self.password = settings.SMTP_PASS
        self.default_sender = settings.SMTP_FROM
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.host and self.user and self.password)

    def _connect(self) -> smtplib.SMTP:
        if not self.is_configured:
            raise MailerNotConfigured("SMTP_HOST, SMTP_USER and SMTP_PASS must be set")

        if self.port == 465:
            client = smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)
        else:
            client = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
            client.ehlo()
            if client.has_extn("starttls"):
                client.starttls()
                client.ehlo()
        client.login(self.user, self.password)
        return client

    def send(
        self,
        to: str,
        subject: str,
        html: str,
        text: Optional[str] = None,
        sender: Optional[str] = None,
        reply_to: Optional[str] = None,
    ) -> None:
        message = EmailMessage()
        message["From"] = sender or self.default_sender
        message["To"] = to
        message["Subject"] = subject
        if reply_to:
            message["Reply-To"] = reply_to
        message.set_content(text or "This message requires an HTML-capable mail client.")
        message.add_alternative(html, subtype="html")

        with self._connect() as client:
            client.send_message(message)

        logger.info("email_sent", to=to, subject=subject)
