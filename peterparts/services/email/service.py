import logging
from functools import lru_cache
from typing import Optional

from peterparts.core.config import settings
from peterparts.services.email import templates
from peterparts.services.email.base import EmailMessage, EmailProvider, SendEmailResult
from peterparts.services.email.console_provider import ConsoleEmailProvider
from peterparts.services.email.resend_provider import ResendEmailProvider


logger = logging.getLogger(__name__)


class EmailService:
    """
    Renders transactional emails and hands them to the configured provider.

    The provider is fixed at construction time.
    """

    def __init__(self, provider: EmailProvider):
        self.provider = provider

    async def send_otp_email(self, to: str, code: str, expires_in_minutes: int) -> SendEmailResult:
        """
        Send a login code.

        Args:
            to: Recipient address.
            code: The 6-digit code.
            expires_in_minutes: Lifetime shown to the user.

        Returns:
            SendEmailResult: Provider outcome.
        """
        message = EmailMessage(
            to=to,
            subject=f"Your {templates.BRAND_NAME} Verification Code",
            html=templates.otp_email_html(code, expires_in_minutes),
            text=templates.otp_email_text(code, expires_in_minutes),
        )
        return await self.provider.send(message)

    async def send_welcome_email(self, to: str, name: Optional[str] = None) -> SendEmailResult:
        """Send the one-time welcome message to a new customer."""
        message = EmailMessage(
            to=to,
            subject=f"Welcome to {templates.BRAND_NAME}!",
            html=templates.welcome_email_html(name),
            text=templates.welcome_email_text(name),
        )
        return await self.provider.send(message)


def build_email_provider(name: str) -> EmailProvider:
    """
    Build the provider named in configuration.

    Raises:
        ValueError: If the provider name is unknown.
    """
    name = name.lower()
    if name == "resend":
        return ResendEmailProvider()
    if name == "console":
        return ConsoleEmailProvider()
    raise ValueError(f"Unknown email provider: {name}")


@lru_cache
def get_email_service() -> EmailService:
    """
    Dependency returning the process-wide email service.

    Built once on first use from ``EMAIL_PROVIDER``.
    """
    provider = build_email_provider(settings.email_provider)
    logger.info(f"Email provider: {type(provider).__name__}")
    return EmailService(provider)
