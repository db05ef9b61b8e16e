from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs, urlparse

import pytest
from sqlalchemy import select

from peterparts.core.config import settings
from peterparts.core.security import COOKIE_NAME, verify_token
from peterparts.models.user import AuthProvider, Role, User
from peterparts.models.verification_code import VerificationCode
from peterparts.schemas.auth import GoogleProfile
from peterparts.services import google_oauth
from peterparts.services.user_service import UserService, VerificationCodeService
from tests.helpers import bearer_for, make_user


async def _send(client, email="a@b.com"):
    return await client.post("/auth/otp/send", json={"email": email})


async def _verify(client, code, email="a@b.com"):
    return await client.post("/auth/otp/verify", json={"email": email, "code": code})


async def test_send_then_verify_logs_in(client, email_provider):
    response = await _send(client)

    assert response.status_code == 200
    assert response.json() == {"message": "Verification code sent successfully"}
    assert email_provider.sent[-1].to == "a@b.com"

    response = await _verify(client, email_provider.last_code())

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Authentication successful"
    assert body["user"]["email"] == "a@b.com"
    assert body["user"]["role"] == "Customer"
    assert body["user"]["provider"] == "Email"
    assert "avatarUrl" in body["user"]

    token = response.cookies.get(COOKIE_NAME)
    assert token
    assert verify_token(token).email == "a@b.com"
    set_cookie = response.headers["set-cookie"].lower()
    assert "httponly" in set_cookie
    assert "path=/" in set_cookie
    assert "max-age=604800" in set_cookie
    assert "samesite=lax" in set_cookie


async def test_code_verifies_only_once(client, email_provider):
    await _send(client)
    code = email_provider.last_code()

    assert (await _verify(client, code)).status_code == 200

    second = await _verify(client, code)
    assert second.status_code == 401
    assert second.json() == {"message": "Invalid or expired verification code"}


async def test_new_code_invalidates_previous_one(client, email_provider, monkeypatch):
    codes = iter(["111111", "222222"])
    monkeypatch.setattr(VerificationCodeService, "generate_otp_code", staticmethod(lambda: next(codes)))

    await _send(client)
    await _send(client)

    assert (await _verify(client, "111111")).status_code == 401
    assert (await _verify(client, "222222")).status_code == 200


async def test_expired_code_is_rejected(client, db):
    user = await make_user(db, "a@b.com")
    await VerificationCodeService.create_code(
        user.id, "424242", datetime.now(timezone.utc) - timedelta(minutes=11), db
    )

    response = await _verify(client, "424242")

    assert response.status_code == 401


async def test_wrong_code_and_unknown_email_look_the_same(client, email_provider):
    await _send(client)

    wrong_code = await _verify(client, "000000")
    unknown_email = await _verify(client, email_provider.last_code(), email="nobody@b.com")

    assert wrong_code.status_code == unknown_email.status_code == 401
    assert wrong_code.json() == unknown_email.json()


async def test_send_rejects_invalid_email(client):
    assert (await _send(client, "not-an-email")).status_code == 400
    assert (await client.post("/auth/otp/send", json={})).status_code == 400


async def test_verify_requires_email_and_code(client):
    response = await client.post("/auth/otp/verify", json={"email": "a@b.com"})

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid request payload"


async def test_send_fails_when_email_provider_fails(client, email_provider, session_factory):
    email_provider.fail = True

    response = await _send(client)

    assert response.status_code == 500
    assert response.json() == {"message": "Failed to send verification email"}
    async with session_factory() as session:
        codes = (await session.execute(select(VerificationCode))).scalars().all()
    assert len(codes) == 1


async def test_logout_clears_cookie(client):
    response = await client.post("/auth/logout")

    assert response.status_code == 200
    assert response.json() == {"message": "Logged out successfully"}
    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith(f"{COOKIE_NAME}=")
    assert "Max-Age=0" in set_cookie


async def test_logout_is_idempotent(client):
    assert (await client.post("/auth/logout")).status_code == 200
    assert (await client.post("/auth/logout")).status_code == 200


async def test_me_uses_session_cookie(client, email_provider):
    await _send(client)
    await _verify(client, email_provider.last_code())

    response = await client.get("/auth/me")

    assert response.status_code == 200
    assert response.json()["email"] == "a@b.com"


async def test_me_reflects_current_database_row(client, db, session_factory):
    user = await make_user(db, "me@peterparts.io")
    headers = bearer_for(user)
    async with session_factory() as session:
        row = await session.get(User, user.id)
        row.name = "Renamed"
        row.role = Role.ADMIN
        await session.commit()

    body = (await client.get("/auth/me", headers=headers)).json()

    assert body["name"] == "Renamed"
    assert body["role"] == "Admin"


async def test_me_requires_session(client):
    response = await client.get("/auth/me")

    assert response.status_code == 401
    assert response.json() == {"message": "Authentication required"}


async def test_me_rejects_invalid_token(client):
    response = await client.get("/auth/me", headers={"Authorization": "Bearer nope"})

    assert response.status_code == 401
    assert response.json() == {"message": "Invalid or expired token"}


async def test_me_returns_404_for_deleted_user(client, db, session_factory):
    user = await make_user(db, "gone@peterparts.io")
    headers = bearer_for(user)
    async with session_factory() as session:
        await session.delete(await session.get(User, user.id))
        await session.commit()

    response = await client.get("/auth/me", headers=headers)

    assert response.status_code == 404
    assert response.json() == {"message": "User not found"}


async def test_me_reports_database_failure(client, db, monkeypatch):
    user = await make_user(db, "flaky@peterparts.io")

    async def broken_lookup(user_id, db):
        raise RuntimeError("connection reset")

    monkeypatch.setattr(UserService, "get_user_by_id", broken_lookup)

    response = await client.get("/auth/me", headers=bearer_for(user))

    assert response.status_code == 500
    assert response.json() == {"message": "Failed to get user"}


@pytest.fixture
def google_configured(monkeypatch):
    monkeypatch.setattr(settings, "google_client_id", "client-id")
    monkeypatch.setattr(settings, "google_client_secret", "client-secret")


@pytest.fixture
def fake_google(monkeypatch, google_configured):
    profiles = {}

    async def exchange_code(code):
        if code not in profiles:
            raise google_oauth.GoogleOAuthError("bad code")
        return profiles[code]

    monkeypatch.setattr(google_oauth, "exchange_code", exchange_code)
    return profiles


def _callback_query(response) -> dict:
    location = urlparse(response.headers["location"])
    assert f"{location.scheme}://{location.netloc}" == "http://frontend.test"
    assert location.path == "/auth/callback"
    return parse_qs(location.query)


async def test_google_redirects_to_consent_screen(client, google_configured):
    response = await client.get("/auth/google")

    assert response.status_code == 302
    location = urlparse(response.headers["location"])
    assert location.netloc == "accounts.google.com"
    query = parse_qs(location.query)
    assert query["client_id"] == ["client-id"]
    assert query["response_type"] == ["code"]
    assert query["scope"] == ["openid email profile"]


async def test_google_without_configuration_fails(client, monkeypatch):
    monkeypatch.setattr(settings, "google_client_id", None)

    response = await client.get("/auth/google")

    assert response.status_code == 500


async def test_google_callback_success_sets_cookie_and_redirects(client, fake_google, email_provider):
    fake_google["good"] = GoogleProfile(sub="g-1", email="g@peterparts.io", name="Gina")

    response = await client.get("/auth/google/callback", params={"code": "good"})

    assert response.status_code == 302
    assert _callback_query(response) == {"success": ["true"]}
    payload = verify_token(response.cookies.get(COOKIE_NAME))
    assert payload.email == "g@peterparts.io"
    assert payload.role == Role.CUSTOMER
    assert email_provider.sent[-1].subject.startswith("Welcome")


async def test_google_callback_twice_keeps_one_user(client, fake_google, session_factory, email_provider):
    fake_google["first"] = GoogleProfile(sub="g-1", email="g@peterparts.io", name="Gina")
    fake_google["second"] = GoogleProfile(sub="g-1", email="g@peterparts.io", name="Gina B.")

    await client.get("/auth/google/callback", params={"code": "first"})
    await client.get("/auth/google/callback", params={"code": "second"})

    async with session_factory() as session:
        users = (await session.execute(select(User))).scalars().all()
    assert len(users) == 1
    assert users[0].name == "Gina B."
    assert users[0].provider == AuthProvider.GOOGLE
    assert len(email_provider.sent) == 1


async def test_google_callback_survives_welcome_email_failure(client, fake_google, email_provider):
    fake_google["good"] = GoogleProfile(sub="g-2", email="h@peterparts.io")
    email_provider.fail = True

    response = await client.get("/auth/google/callback", params={"code": "good"})

    assert _callback_query(response) == {"success": ["true"]}


async def test_google_callback_failure_redirects_with_error(client, fake_google):
    response = await client.get("/auth/google/callback", params={"code": "rejected"})

    assert response.status_code == 302
    assert _callback_query(response) == {"error": ["authentication_failed"]}
    assert COOKIE_NAME not in response.cookies


async def test_google_callback_passes_provider_error_through(client, fake_google):
    response = await client.get("/auth/google/callback", params={"error": "access_denied"})

    assert response.status_code == 302
    assert _callback_query(response) == {"error": ["access_denied"]}


async def test_google_callback_without_code_redirects(client, fake_google):
    response = await client.get("/auth/google/callback")

    assert response.status_code == 302
    assert _callback_query(response) == {"error": ["missing_code"]}
