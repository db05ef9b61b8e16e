from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class EmailMessage:
    """A rendered email ready for delivery."""
    to: str
    subject: str
    html: str
    text: str


@dataclass
class SendEmailResult:
    """Outcome of a delivery attempt. Providers report failure here instead of raising."""
    success: bool
    id: Optional[str] = None
    error: Optional[str] = None


class EmailProvider(ABC):
    """Capability interface for anything that can deliver an ``EmailMessage``."""

    @abstractmethod
    async def send(self, message: EmailMessage) -> SendEmailResult:
        ...
