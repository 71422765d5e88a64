"""
vibe_affiliate.auth.deps

FastAPI dependency functions for authentication, authorization and CSRF.

Responsibilities:
- Convert a bearer token into a typed `Principal`.
- Enforce role checks via reusable dependency factories.
- Enforce the double-submit CSRF check on cookie-bound form endpoints.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_403_FORBIDDEN

from vibe_affiliate.api.deps import settings_dep
from vibe_affiliate.auth.jwt import JwtConfig, JwtValidationError, decode_and_validate
from vibe_affiliate.auth.models import Principal
from vibe_affiliate.domain.models import UserRole
from vibe_affiliate.errors import AppError, ErrorCode
from vibe_affiliate.security.audit import SecurityEvent, log_security_event
from vibe_affiliate.security.helpers import get_client_ip, validate_csrf_token
from vibe_affiliate.settings import Settings

CSRF_COOKIE = "csrf_token"
CSRF_HEADER = "x-csrf-token"

_bearer = HTTPBearer(auto_error=False)


def get_principal(
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: Settings = Depends(settings_dep),
) -> Principal:
    if creds is None or not creds.credentials:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Missing bearer token")

    try:
        payload = decode_and_validate(cfg=JwtConfig.from_settings(settings), token=creds.credentials)
    except JwtValidationError as e:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail=f"Invalid token: {e}") from e

    subject = str(payload.get("sub", ""))
    if not subject:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Invalid token subject")
    try:
        role = UserRole(payload.get("role"))
    except ValueError as e:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Invalid token role") from e

    return Principal(subject=subject, role=role)


def require_roles(*allowed: UserRole):
    allowed_set = frozenset(allowed)

    def _dep(principal: Principal = Depends(get_principal)) -> Principal:
        # Admin bypasses role checks.
        if principal.is_admin:
            return principal
        if principal.role not in allowed_set:
            raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Insufficient role")
        return principal

    return _dep


def require_csrf(request: Request, settings: Settings = Depends(settings_dep)) -> None:
    if validate_csrf_token(request.headers.get(CSRF_HEADER), request.cookies.get(CSRF_COOKIE)):
        return
    log_security_event(
        SecurityEvent(
            event="csrf_validation_failed",
            level="high",
            ip=get_client_ip(request.headers, request.client.host if request.client else None),
            user_agent=request.headers.get("user-agent"),
            details={"path": request.url.path},
        ),
        env=settings.env,
    )
    raise AppError(ErrorCode.csrf_failed, "Invalid CSRF token", status_code=HTTP_403_FORBIDDEN)


# --- Module Notes -----------------------------------------------------------
# Bearer-authenticated JSON endpoints do not need CSRF; only the cookie-bound
# login/registration forms use `require_csrf`.
