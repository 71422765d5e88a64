"""
vibe_affiliate.api.routers.campaigns

Campaign endpoints over the mock provider.

Responsibilities:
- List/search campaigns (paginated) with role-aware visibility.
- Create, update and delete campaigns with sanitized text and validated landing URLs.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from starlette.status import (
    HTTP_201_CREATED,
    HTTP_403_FORBIDDEN,
    HTTP_422_UNPROCESSABLE_ENTITY,
)

from vibe_affiliate.api.deps import provider_dep
from vibe_affiliate.auth.deps import get_principal, require_roles
from vibe_affiliate.auth.models import Principal
from vibe_affiliate.domain.forms import CampaignFilter, CreateCampaignForm, UpdateCampaignForm
from vibe_affiliate.domain.models import Campaign, CampaignStatus, UserRole
from vibe_affiliate.domain.responses import APIResponse, PaginatedResponse, paginate
from vibe_affiliate.errors import AppError, ErrorCode
from vibe_affiliate.mock_data import MockDataProvider
from vibe_affiliate.mock_data.provider import InvalidCampaignError
from vibe_affiliate.security.helpers import sanitize_fields, validate_url

router = APIRouter(prefix="/api/v1/campaigns", tags=["campaigns"])

_TEXT_FIELDS = ("name", "description", "category")
_MANAGING_ROLES = (UserRole.advertiser, UserRole.manager)
# Campaign fields that may be cleared with an explicit null on update.
_NULLABLE_FIELDS = frozenset({"description", "end_date", "max_daily_budget"})


def _visible_to(principal: Principal, campaigns: list[Campaign]) -> list[Campaign]:
    # Affiliates never see private campaigns; everyone else sees all of them.
    if principal.role == UserRole.affiliate:
        return [c for c in campaigns if not c.is_private]
    return campaigns


def _clean(data: dict[str, Any]) -> dict[str, Any]:
    cleaned = sanitize_fields(data, _TEXT_FIELDS)
    for name in ("name", "category"):
        if name in cleaned and not cleaned[name]:
            raise AppError(
                ErrorCode.validation_error,
                f"{name} is empty after sanitization",
                status_code=HTTP_422_UNPROCESSABLE_ENTITY,
            )
    url = cleaned.get("landing_page_url")
    if url is not None and not validate_url(url):
        raise AppError(
            ErrorCode.invalid_url,
            "Landing page URL is not allowed",
            status_code=HTTP_422_UNPROCESSABLE_ENTITY,
            details={"field": "landingPageUrl"},
        )
    return cleaned


async def _owned_campaign(
    provider: MockDataProvider, campaign_id: str, principal: Principal
) -> Campaign:
    campaign = await provider.get_campaign(campaign_id)
    if campaign is None:
        raise AppError.not_found("Campaign")
    if not principal.can_manage(campaign.created_by):
        raise AppError(
            ErrorCode.forbidden, "Not the campaign owner", status_code=HTTP_403_FORBIDDEN
        )
    return campaign


@router.get("")
async def list_campaigns(
    status: CampaignStatus | None = None,
    search: str | None = Query(default=None, max_length=200),
    mine: bool = False,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    principal: Principal = Depends(get_principal),
    provider: MockDataProvider = Depends(provider_dep),
) -> PaginatedResponse[Campaign]:
    campaigns = await provider.list_campaigns(
        status=status.value if status else None,
        user_id=principal.subject if mine else None,
        search=search,
    )
    return paginate(_visible_to(principal, campaigns), page=page, limit=limit)


@router.post("/search")
async def search_campaigns(
    body: CampaignFilter,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    principal: Principal = Depends(get_principal),
    provider: MockDataProvider = Depends(provider_dep),
) -> PaginatedResponse[Campaign]:
    campaigns = await provider.filter_campaigns(body)
    return paginate(_visible_to(principal, campaigns), page=page, limit=limit)


@router.get("/{campaign_id}")
async def get_campaign(
    campaign_id: str,
    principal: Principal = Depends(get_principal),
    provider: MockDataProvider = Depends(provider_dep),
) -> APIResponse[Campaign]:
    campaign = await provider.get_campaign(campaign_id)
    if campaign is None or not _visible_to(principal, [campaign]):
        raise AppError.not_found("Campaign")
    return APIResponse.ok(campaign)


@router.post("", status_code=HTTP_201_CREATED)
async def create_campaign(
    body: CreateCampaignForm,
    principal: Principal = Depends(require_roles(*_MANAGING_ROLES)),
    provider: MockDataProvider = Depends(provider_dep),
) -> APIResponse[Campaign]:
    data = _clean(body.model_dump())
    data.update(advertiser_id=principal.subject, created_by=principal.subject)
    campaign = await provider.create_campaign(data)
    return APIResponse.ok(campaign, message="Campaign created")


@router.patch("/{campaign_id}")
async def update_campaign(
    campaign_id: str,
    body: UpdateCampaignForm,
    principal: Principal = Depends(require_roles(*_MANAGING_ROLES)),
    provider: MockDataProvider = Depends(provider_dep),
) -> APIResponse[Campaign]:
    await _owned_campaign(provider, campaign_id, principal)
    changes = {
        k: v
        for k, v in body.model_dump(exclude_unset=True).items()
        if v is not None or k in _NULLABLE_FIELDS
    }
    try:
        updated = await provider.update_campaign(campaign_id, _clean(changes))
    except InvalidCampaignError as e:
        raise AppError(
            ErrorCode.validation_error, str(e), status_code=HTTP_422_UNPROCESSABLE_ENTITY
        ) from e
    if updated is None:
        raise AppError.not_found("Campaign")
    return APIResponse.ok(updated, message="Campaign updated")


@router.delete("/{campaign_id}")
async def delete_campaign(
    campaign_id: str,
    principal: Principal = Depends(require_roles(*_MANAGING_ROLES)),
    provider: MockDataProvider = Depends(provider_dep),
) -> APIResponse[dict[str, bool]]:
    await _owned_campaign(provider, campaign_id, principal)
    if not await provider.delete_campaign(campaign_id):
        raise AppError.not_found("Campaign")
    return APIResponse.ok({"deleted": True}, message="Campaign deleted")


# --- Module Notes -----------------------------------------------------------
# Ownership is `created_by`; admins pass every ownership check via `Principal.can_manage`.
