import re
from typing import List

from peterparts.core.security import issue_token
from peterparts.models.user import AuthProvider, Role, User
from peterparts.schemas.auth import TokenPayload
from peterparts.services.email import EmailMessage, EmailProvider, SendEmailResult


class RecordingEmailProvider(EmailProvider):
    """Keeps every message in memory; can be switched to fail."""

    def __init__(self):
        self.sent: List[EmailMessage] = []
        self.fail = False

    async def send(self, message: EmailMessage) -> SendEmailResult:
        self.sent.append(message)
        if self.fail:
            return SendEmailResult(success=False, error="provider unavailable")
        return SendEmailResult(success=True, id=f"test-{len(self.sent)}")

    def last_code(self) -> str:
        return re.search(r"\b(\d{6})\b", self.sent[-1].text).group(1)


async def make_user(db, email: str, role: Role = Role.CUSTOMER, **fields) -> User:
    user = User(
        email=email,
        role=role,
        provider=fields.pop("provider", AuthProvider.EMAIL),
        **fields
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


def bearer_for(user: User) -> dict:
    token = issue_token(TokenPayload(user_id=str(user.id), email=user.email, role=user.role))
    return {"Authorization": f"Bearer {token}"}
