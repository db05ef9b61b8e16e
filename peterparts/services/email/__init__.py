from peterparts.services.email.base import EmailMessage, EmailProvider, SendEmailResult
from peterparts.services.email.service import EmailService, get_email_service

__all__ = [
    "EmailMessage",
    "EmailProvider",
    "EmailService",
    "SendEmailResult",
    "get_email_service",
]
