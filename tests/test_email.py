import json

import httpx
import pytest

from peterparts.services.email import EmailMessage, EmailService
from peterparts.services.email.console_provider import ConsoleEmailProvider
from peterparts.services.email.resend_provider import ResendEmailProvider
from peterparts.services.email.service import build_email_provider
from peterparts.services.email import templates
from tests.helpers import RecordingEmailProvider


MESSAGE = EmailMessage(to="a@b.com", subject="Hi", html="<p>Hi</p>", text="Hi")


def _resend(handler) -> ResendEmailProvider:
    return ResendEmailProvider(
        api_key="re_test",
        sender="PeterParts <noreply@peterparts.io>",
        base_url="https://api.resend.test",
        transport=httpx.MockTransport(handler),
    )


async def test_resend_success_returns_message_id():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["authorization"]
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "email-123"})

    result = await _resend(handler).send(MESSAGE)

    assert result.success is True
    assert result.id == "email-123"
    assert seen["auth"] == "Bearer re_test"
    assert seen["url"] == "https://api.resend.test/emails"
    assert seen["body"]["to"] == ["a@b.com"]
    assert seen["body"]["from"] == "PeterParts <noreply@peterparts.io>"


async def test_resend_error_response_is_a_failed_result():
    def handler(request):
        return httpx.Response(422, json={"message": "Invalid `to` field"})

    result = await _resend(handler).send(MESSAGE)

    assert result.success is False
    assert result.error == "Invalid `to` field"


async def test_resend_network_error_is_a_failed_result():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    result = await _resend(handler).send(MESSAGE)

    assert result.success is False
    assert "connection refused" in result.error


async def test_resend_without_api_key_fails_without_calling_out():
    calls = []
    provider = _resend(lambda request: calls.append(request))
    provider.api_key = None

    result = await provider.send(MESSAGE)

    assert result.success is False
    assert calls == []


async def test_console_provider_always_succeeds():
    result = await ConsoleEmailProvider().send(MESSAGE)

    assert result.success is True
    assert result.id.startswith("console-")


def test_provider_is_chosen_by_name():
    assert isinstance(build_email_provider("console"), ConsoleEmailProvider)
    assert isinstance(build_email_provider("Resend"), ResendEmailProvider)
    with pytest.raises(ValueError):
        build_email_provider("carrier-pigeon")


async def test_otp_email_contains_code_and_expiry():
    provider = RecordingEmailProvider()

    await EmailService(provider).send_otp_email("a@b.com", "123456", 10)

    message = provider.sent[0]
    assert message.to == "a@b.com"
    assert message.subject == "Your PeterParts Verification Code"
    assert "123456" in message.html and "123456" in message.text
    assert "10 minutes" in message.text


async def test_welcome_email_greets_by_name_or_default():
    provider = RecordingEmailProvider()
    service = EmailService(provider)

    await service.send_welcome_email("a@b.com", "Peter")
    await service.send_welcome_email("b@b.com")

    assert "Peter" in provider.sent[0].text
    assert "Welcome to PeterParts, there!" in provider.sent[1].text


def test_templates_escape_html():
    html = templates.welcome_email_html("<script>")

    assert "<script>" not in html
    assert "&lt;script&gt;" in html
