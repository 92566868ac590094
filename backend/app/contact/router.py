"""
Public contact form
"""
import html
import smtplib
from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import Field
import structlog

from app.core.config import Settings
from app.core.dependencies import get_app_settings, get_mailer
from app.core.exceptions import InternalError
from app.core.mailer import Mailer, MailerNotConfigured
from app.core.schemas import CamelModel, MessageResponse

router = APIRouter(prefix="/api/contact", tags=["Contact"])
logger = structlog.get_logger()


class ContactRequest(CamelModel):
    """Contact form submission"""
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    subject: Optional[str] = None
    message: str = Field(..., min_length=1)


def render_contact_email(data: ContactRequest) -> str:
    body = html.escape(data.message).replace("\n", "<br/>")
    return (
        "<h2>New Contact Message</h2>"
        f"<p><strong>Name:</strong> {html.escape(data.name)}</p>"
        f"<p><strong>Email:</strong> {html.escape(data.email)}</p>"
        f"<p><strong>Subject:</strong> {html.escape(data.subject or '-')}</p>"
        "<p><strong>Message:</strong></p>"
        f"<p>{body}</p>"
    )


@router.post("", response_model=MessageResponse)
def send_contact_message(
    data: ContactRequest,
    settings: Settings = Depends(get_app_settings),
    mailer: Mailer = Depends(get_mailer),
):
    """Forward a contact form message to the support inbox"""
    logger.info("contact_message_received", subject=data.subject)

    try:
        if not settings.CONTACT_RECEIVER_EMAIL:
            raise MailerNotConfigured("CONTACT_RECEIVER_EMAIL is not set")
        mailer.send(
            to=settings.CONTACT_RECEIVER_EMAIL,
            subject=data.subject or "New Contact Message",
            html=render_contact_email(data),
            text=f"{data.name} <{data.email}> wrote:\n\n{data.message}",
            sender=f'"{settings.APP_NAME} Contact" <{settings.SMTP_FROM}>',
            reply_to=data.email,
        )
    except (MailerNotConfigured, smtplib.SMTPException, OSError) as e:
        logger.error("contact_message_failed", error=str(e))
        details = {"error": str(e)} if settings.is_development else {}
        raise InternalError("Failed to send message", details=details)

    return MessageResponse(message="Message sent successfully")
