"""
vibe_affiliate.api.routers.auth

Login, registration and CSRF token endpoints.

Responsibilities:
- Issue CSRF tokens (double-submit cookie) for the cookie-bound forms.
- Verify credentials against the mock provider and mint session JWTs.
- Register affiliate/advertiser accounts.
"""

from __future__ import annotations

from datetime import timedelta

from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from starlette.status import (
    HTTP_201_CREATED,
    HTTP_401_UNAUTHORIZED,
    HTTP_409_CONFLICT,
    HTTP_422_UNPROCESSABLE_ENTITY,
)

from vibe_affiliate.api.deps import provider_dep, settings_dep
from vibe_affiliate.auth.deps import CSRF_COOKIE, require_csrf
from vibe_affiliate.auth.jwt import JwtConfig, issue_token
from vibe_affiliate.domain.forms import LoginForm, RegisterForm
from vibe_affiliate.domain.models import User
from vibe_affiliate.domain.responses import APIResponse
from vibe_affiliate.errors import AppError, ErrorCode
from vibe_affiliate.mock_data import MockDataProvider
from vibe_affiliate.mock_data.provider import DuplicateEmailError
from vibe_affiliate.security.audit import SecurityEvent, log_security_event
from vibe_affiliate.security.helpers import (
    generate_csrf_token,
    get_client_ip,
    get_rate_limit_key,
    sanitize_string,
)
from vibe_affiliate.settings import Settings

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])

REMEMBER_ME_TTL = timedelta(days=7)


class _Body(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CsrfTokenResponse(_Body):
    csrf_token: str


class LoginResponse(_Body):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: User


@router.get("/csrf")
async def csrf_token(
    response: Response, settings: Settings = Depends(settings_dep)
) -> APIResponse[CsrfTokenResponse]:
    token = generate_csrf_token()
    response.set_cookie(
        CSRF_COOKIE,
        token,
        httponly=True,
        samesite="strict",
        secure=settings.env == "production",
    )
    return APIResponse.ok(CsrfTokenResponse(csrf_token=token))


@router.post("/login", dependencies=[Depends(require_csrf)])
async def login(
    request: Request,
    body: LoginForm,
    provider: MockDataProvider = Depends(provider_dep),
    settings: Settings = Depends(settings_dep),
) -> APIResponse[LoginResponse]:
    user = await provider.verify_credentials(body.email, body.password)
    if user is None:
        client_ip = get_client_ip(request.headers, request.client.host if request.client else None)
        log_security_event(
            SecurityEvent(
                event="login_failed",
                level="medium",
                ip=client_ip,
                user_agent=request.headers.get("user-agent"),
                details={"rate_limit_key": get_rate_limit_key(client_ip, "login")},
            ),
            env=settings.env,
        )
        raise AppError(
            ErrorCode.unauthorized,
            "Invalid email or password",
            status_code=HTTP_401_UNAUTHORIZED,
        )

    ttl = REMEMBER_ME_TTL if body.remember_me else timedelta(minutes=settings.jwt_ttl_minutes)
    token = issue_token(
        cfg=JwtConfig.from_settings(settings),
        subject=user.id,
        role=user.role.value,
        ttl=ttl,
    )
    return APIResponse.ok(
        LoginResponse(access_token=token, expires_in=int(ttl.total_seconds()), user=user)
    )


@router.post("/register", status_code=HTTP_201_CREATED, dependencies=[Depends(require_csrf)])
async def register(
    body: RegisterForm,
    provider: MockDataProvider = Depends(provider_dep),
) -> APIResponse[User]:
    name = sanitize_string(body.name)
    if not name:
        raise AppError(
            ErrorCode.validation_error,
            "Name is empty after sanitization",
            status_code=HTTP_422_UNPROCESSABLE_ENTITY,
        )
    try:
        user = await provider.create_user(
            name=name, email=body.email, password=body.password, role=body.role
        )
    except DuplicateEmailError as e:
        raise AppError(ErrorCode.conflict, str(e), status_code=HTTP_409_CONFLICT) from e
    return APIResponse.ok(user, message="Account created")
