"""SendGrid email sender.

Uses asyncio.to_thread to wrap the synchronous SendGrid client. Raises on
failure; callers decide whether a failed send matters.
"""

import asyncio
import logging
from typing import Optional

import sendgrid
from sendgrid.helpers.mail import Mail, Email, To, HtmlContent

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """The provider rejected the message or could not be reached."""


class EmailSender:
    """Sends HTML email through SendGrid."""

    def __init__(self, api_key: str, from_email: str, from_name: str = "Property Portal") -> None:
        self._api_key = api_key
        self._from_email = from_email
        self._from_name = from_name

    def _send_mail(self, mail: Mail) -> None:
        """Synchronous send via SendGrid."""
        client = sendgrid.SendGridAPIClient(api_key=self._api_key)
        response = client.send(mail)
        if response.status_code not in (200, 201, 202):
            raise EmailDeliveryError(f"SendGrid returned status {response.status_code}: {response.body}")

    async def send(self, to: str, subject: str, html: str, reply_to: Optional[str] = None) -> None:
        """
        Send one message.

        Raises:
            EmailDeliveryError: If the API key is missing or SendGrid rejects the send
        """
        if not self._api_key:
            raise EmailDeliveryError("SENDGRID_API_KEY not set")

        mail = Mail(
            from_email=Email(self._from_email, self._from_name),
            to_emails=To(to),
            subject=subject,
            html_content=HtmlContent(html),
        )
        if reply_to:
            mail.reply_to = Email(reply_to)

        try:
            await asyncio.to_thread(self._send_mail, mail)
        except EmailDeliveryError:
            raise
        except Exception as e:
            raise EmailDeliveryError(str(e)) from e

        logger.info("Email sent to %s: %s", to, subject)
