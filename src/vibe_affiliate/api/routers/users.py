"""
vibe_affiliate.api.routers.users

User directory and self-service profile endpoints.

Responsibilities:
- Let admins/managers list and inspect users.
- Let any signed-in user read and update their own profile.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from starlette.status import HTTP_422_UNPROCESSABLE_ENTITY

from vibe_affiliate.api.deps import provider_dep
from vibe_affiliate.auth.deps import get_principal, require_roles
from vibe_affiliate.auth.models import Principal
from vibe_affiliate.domain.forms import UpdateProfileForm
from vibe_affiliate.domain.models import User, UserProfile, UserRole
from vibe_affiliate.domain.responses import APIResponse
from vibe_affiliate.errors import AppError, ErrorCode
from vibe_affiliate.mock_data import MockDataProvider
from vibe_affiliate.security.helpers import sanitize_fields, validate_url

router = APIRouter(prefix="/api/v1/users", tags=["users"])

_PROFILE_TEXT_FIELDS = ("name", "bio", "company")


@router.get("")
async def list_users(
    _: Principal = Depends(require_roles(UserRole.manager)),
    provider: MockDataProvider = Depends(provider_dep),
) -> APIResponse[list[User]]:
    return APIResponse.ok(await provider.list_users())


@router.get("/me")
async def me(
    principal: Principal = Depends(get_principal),
    provider: MockDataProvider = Depends(provider_dep),
) -> APIResponse[User]:
    user = await provider.get_user(principal.subject)
    if user is None:
        raise AppError.not_found("User")
    return APIResponse.ok(user)


@router.get("/me/profile")
async def my_profile(
    principal: Principal = Depends(get_principal),
    provider: MockDataProvider = Depends(provider_dep),
) -> APIResponse[UserProfile]:
    profile = await provider.get_user_profile(principal.subject)
    if profile is None:
        raise AppError.not_found("User")
    return APIResponse.ok(profile)


@router.patch("/me")
async def update_me(
    body: UpdateProfileForm,
    principal: Principal = Depends(get_principal),
    provider: MockDataProvider = Depends(provider_dep),
) -> APIResponse[UserProfile]:
    data = sanitize_fields(body.model_dump(exclude_unset=True), _PROFILE_TEXT_FIELDS)
    if not data.get("name"):
        raise AppError(
            ErrorCode.validation_error,
            "name is empty after sanitization",
            status_code=HTTP_422_UNPROCESSABLE_ENTITY,
        )
    website = data.get("website")
    if website and not validate_url(website):
        raise AppError(
            ErrorCode.invalid_url,
            "Website URL is not allowed",
            status_code=HTTP_422_UNPROCESSABLE_ENTITY,
            details={"field": "website"},
        )

    profile = await provider.update_user(principal.subject, data)
    if profile is None:
        raise AppError.not_found("User")
    return APIResponse.ok(profile, message="Profile updated")


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    _: Principal = Depends(require_roles(UserRole.manager)),
    provider: MockDataProvider = Depends(provider_dep),
) -> APIResponse[User]:
    user = await provider.get_user(user_id)
    if user is None:
        raise AppError.not_found("User")
    return APIResponse.ok(user)
