"""
tests.test_auth

JWT helpers, role checks, and the CSRF-protected login/registration flow.
"""

from __future__ import annotations

from datetime import timedelta

import httpx
import pytest

from vibe_affiliate.auth.jwt import JwtConfig, JwtValidationError, decode_and_validate, issue_token
from vibe_affiliate.auth.models import Principal
from vibe_affiliate.domain.models import UserRole
from vibe_affiliate.mock_data.fixtures import DEMO_PASSWORD
from vibe_affiliate.settings import Settings


def _client(app) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")


async def _csrf(client: httpx.AsyncClient) -> dict[str, str]:
    r = await client.get("/api/v1/auth/csrf")
    assert r.status_code == 200
    token = r.json()["data"]["csrfToken"]
    assert client.cookies.get("csrf_token") == token
    return {"X-CSRF-Token": token}


def test_jwt_roundtrip(settings: Settings) -> None:
    cfg = JwtConfig.from_settings(settings)
    token = issue_token(cfg=cfg, subject="user_2", role="affiliate")
    payload = decode_and_validate(cfg=cfg, token=token)
    assert payload["sub"] == "user_2"
    assert payload["role"] == "affiliate"
    assert payload["iss"] == settings.jwt_issuer


def test_jwt_rejects_expired_and_foreign_tokens(settings: Settings) -> None:
    cfg = JwtConfig.from_settings(settings)
    expired = issue_token(cfg=cfg, subject="user_2", role="affiliate", ttl=timedelta(minutes=-5))
    with pytest.raises(JwtValidationError):
        decode_and_validate(cfg=cfg, token=expired)

    other = JwtConfig(alg=cfg.alg, issuer=cfg.issuer, audience="someone-else", secret=cfg.secret)
    with pytest.raises(JwtValidationError):
        decode_and_validate(cfg=cfg, token=issue_token(cfg=other, subject="user_2", role="affiliate"))


def test_principal_ownership() -> None:
    assert Principal(subject="user_1", role=UserRole.admin).can_manage("user_3")
    assert Principal(subject="user_3", role=UserRole.advertiser).can_manage("user_3")
    assert not Principal(subject="user_99", role=UserRole.advertiser).can_manage("user_3")


@pytest.mark.asyncio
async def test_missing_and_invalid_bearer(app) -> None:
    async with _client(app) as client:
        r = await client.get("/api/v1/users/me")
        assert r.status_code == 401
        assert r.json()["error"] == "unauthorized"

        r = await client.get("/api/v1/users/me", headers={"Authorization": "Bearer nope"})
        assert r.status_code == 401


@pytest.mark.asyncio
async def test_unknown_role_claim_is_rejected(app, settings: Settings) -> None:
    token = issue_token(cfg=JwtConfig.from_settings(settings), subject="user_2", role="superuser")
    async with _client(app) as client:
        r = await client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_role_checks(app, headers) -> None:
    async with _client(app) as client:
        r = await client.get("/api/v1/users", headers=headers["affiliate"])
        assert r.status_code == 403
        assert r.json()["error"] == "forbidden"

        r = await client.get("/api/v1/users", headers=headers["manager"])
        assert r.status_code == 200
        assert len(r.json()["data"]) == 3

        # Admin passes every role check.
        r = await client.get("/api/v1/users/user_3", headers=headers["admin"])
        assert r.status_code == 200
        assert r.json()["data"]["role"] == "advertiser"


@pytest.mark.asyncio
async def test_login_requires_csrf(app) -> None:
    async with _client(app) as client:
        r = await client.post(
            "/api/v1/auth/login",
            json={"email": "affiliate@example.com", "password": DEMO_PASSWORD},
        )
    assert r.status_code == 403
    assert r.json()["error"] == "csrf_failed"


@pytest.mark.asyncio
async def test_login_rejects_mismatched_csrf(app) -> None:
    async with _client(app) as client:
        await _csrf(client)
        r = await client.post(
            "/api/v1/auth/login",
            json={"email": "affiliate@example.com", "password": DEMO_PASSWORD},
            headers={"X-CSRF-Token": "x" * 40},
        )
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_login_flow(app) -> None:
    async with _client(app) as client:
        csrf = await _csrf(client)
        r = await client.post(
            "/api/v1/auth/login",
            json={"email": "affiliate@example.com", "password": DEMO_PASSWORD},
            headers=csrf,
        )
        assert r.status_code == 200
        data = r.json()["data"]
        assert data["tokenType"] == "bearer"
        assert data["expiresIn"] == 3600
        assert data["user"]["id"] == "user_2"

        me = await client.get(
            "/api/v1/users/me", headers={"Authorization": f"Bearer {data['accessToken']}"}
        )
        assert me.status_code == 200
        assert me.json()["data"]["email"] == "affiliate@example.com"


@pytest.mark.asyncio
async def test_login_remember_me_extends_ttl(app) -> None:
    async with _client(app) as client:
        csrf = await _csrf(client)
        r = await client.post(
            "/api/v1/auth/login",
            json={
                "email": "advertiser@company.com",
                "password": DEMO_PASSWORD,
                "rememberMe": True,
            },
            headers=csrf,
        )
    assert r.status_code == 200
    assert r.json()["data"]["expiresIn"] == 7 * 24 * 3600


@pytest.mark.asyncio
async def test_login_wrong_password(app) -> None:
    async with _client(app) as client:
        csrf = await _csrf(client)
        r = await client.post(
            "/api/v1/auth/login",
            json={"email": "affiliate@example.com", "password": "wrong-password"},
            headers=csrf,
        )
    assert r.status_code == 401
    assert r.json() == {
        "success": False,
        "error": "unauthorized",
        "message": "Invalid email or password",
    }


@pytest.mark.asyncio
async def test_register_flow(app) -> None:
    body = {
        "name": "<b>Ana</b>",
        "email": "ana@example.com",
        "password": "password-1",
        "confirmPassword": "password-1",
        "acceptTerms": True,
    }
    async with _client(app) as client:
        csrf = await _csrf(client)
        r = await client.post("/api/v1/auth/register", json=body, headers=csrf)
        assert r.status_code == 201
        user = r.json()["data"]
        assert user["name"] == "bAna/b"
        assert user["role"] == "affiliate"
        assert user["isVerified"] is False

        r = await client.post("/api/v1/auth/register", json=body, headers=csrf)
        assert r.status_code == 409
        assert r.json()["error"] == "conflict"

        r = await client.post(
            "/api/v1/auth/register", json={**body, "email": "x@example.com", "name": "<>"}, headers=csrf
        )
        assert r.status_code == 422
        assert r.json()["error"] == "validation_error"

        r = await client.post(
            "/api/v1/auth/register", json={**body, "confirmPassword": "other-pass"}, headers=csrf
        )
        assert r.status_code == 422
