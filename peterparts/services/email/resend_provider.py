import logging
from typing import Optional

import httpx

from peterparts.core.config import settings
from peterparts.services.email.base import EmailMessage, EmailProvider, SendEmailResult


logger = logging.getLogger(__name__)


class ResendEmailProvider(EmailProvider):
    """
    Delivers email through the Resend HTTP API.

    Transport errors and non-2xx responses are returned as failed results.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        sender: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key or settings.resend_api_key
        self.sender = sender or settings.email_from
        self.base_url = base_url or settings.resend_base_url
        self.transport = transport

    async def send(self, message: EmailMessage) -> SendEmailResult:
        if not self.api_key:
            logger.error("Resend API key is not configured")
            return SendEmailResult(success=False, error="Resend API key is not configured")

        payload = {
            "from": self.sender,
            "to": [message.to],
            "subject": message.subject,
            "html": message.html,
            "text": message.text,
        }

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                timeout=30.0,
                transport=self.transport,
            ) as client:
                response = await client.post("/emails", json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Error sending email via Resend: {e}")
            return SendEmailResult(success=False, error=str(e))

        if not response.is_success:
            try:
                error_msg = response.json().get("message", response.text)
            except ValueError:
                error_msg = response.text
            logger.error(f"Resend API error ({response.status_code}): {error_msg}")
            return SendEmailResult(success=False, error=error_msg)

        email_id = response.json().get("id")
        logger.info(f"Sent email {email_id} via Resend")
        return SendEmailResult(success=True, id=email_id)
