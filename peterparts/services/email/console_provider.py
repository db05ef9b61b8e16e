import logging
import uuid

from peterparts.services.email.base import EmailMessage, EmailProvider, SendEmailResult


logger = logging.getLogger(__name__)


class ConsoleEmailProvider(EmailProvider):
    """Development provider: writes the plain-text body to the log instead of sending."""

    async def send(self, message: EmailMessage) -> SendEmailResult:
        logger.info(f"[DEV] Email to {message.to}: {message.subject}\n{message.text}")
        return SendEmailResult(success=True, id=f"console-{uuid.uuid4()}")
