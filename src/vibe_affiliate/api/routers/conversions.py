"""
vibe_affiliate.api.routers.conversions

Conversion listing and review endpoints.

Responsibilities:
- Scope conversion lists by role (affiliates see their own, advertisers their campaigns').
- Move conversions through the review lifecycle (pending -> approved/rejected -> paid).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from starlette.status import HTTP_403_FORBIDDEN, HTTP_409_CONFLICT

from vibe_affiliate.api.deps import provider_dep
from vibe_affiliate.auth.deps import get_principal, require_roles
from vibe_affiliate.auth.models import Principal
from vibe_affiliate.domain.forms import ConversionFilter, ConversionStatusUpdate
from vibe_affiliate.domain.models import Conversion, ConversionStatus, UserRole
from vibe_affiliate.domain.responses import APIResponse, PaginatedResponse, paginate
from vibe_affiliate.errors import AppError, ErrorCode
from vibe_affiliate.mock_data import MockDataProvider
from vibe_affiliate.mock_data.provider import InvalidTransitionError
from vibe_affiliate.observability.logging import get_logger

router = APIRouter(prefix="/api/v1/conversions", tags=["conversions"])
log = get_logger(__name__)


def _scoped(principal: Principal, conversions: list[Conversion]) -> list[Conversion]:
    if principal.role == UserRole.affiliate:
        return [c for c in conversions if c.affiliate_id == principal.subject]
    if principal.role == UserRole.advertiser:
        return [c for c in conversions if c.advertiser_id == principal.subject]
    return conversions


@router.get("")
async def list_conversions(
    status: ConversionStatus | None = None,
    campaign_id: str | None = Query(default=None, alias="campaignId"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    principal: Principal = Depends(get_principal),
    provider: MockDataProvider = Depends(provider_dep),
) -> PaginatedResponse[Conversion]:
    conversions = await provider.list_conversions(
        campaign_id=campaign_id,
        status=status.value if status else None,
    )
    return paginate(_scoped(principal, conversions), page=page, limit=limit)


@router.post("/search")
async def search_conversions(
    body: ConversionFilter,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    principal: Principal = Depends(get_principal),
    provider: MockDataProvider = Depends(provider_dep),
) -> PaginatedResponse[Conversion]:
    conversions = await provider.filter_conversions(body)
    return paginate(_scoped(principal, conversions), page=page, limit=limit)


@router.post("/{conversion_id}/status")
async def update_status(
    conversion_id: str,
    body: ConversionStatusUpdate,
    principal: Principal = Depends(require_roles(UserRole.advertiser, UserRole.manager)),
    provider: MockDataProvider = Depends(provider_dep),
) -> APIResponse[Conversion]:
    conversion = await provider.get_conversion(conversion_id)
    if conversion is None:
        raise AppError.not_found("Conversion")
    if principal.role == UserRole.advertiser and conversion.advertiser_id != principal.subject:
        raise AppError(
            ErrorCode.forbidden,
            "Conversion belongs to another advertiser",
            status_code=HTTP_403_FORBIDDEN,
        )

    try:
        updated = await provider.update_conversion_status(conversion_id, body.status)
    except InvalidTransitionError as e:
        raise AppError(
            ErrorCode.conflict,
            str(e),
            status_code=HTTP_409_CONFLICT,
            details={"current": e.current.value, "requested": e.requested.value},
        ) from e
    if updated is None:
        raise AppError.not_found("Conversion")

    log.info(
        "conversion_status_changed",
        conversion_id=conversion_id,
        status=updated.status.value,
        actor=principal.subject,
    )
    return APIResponse.ok(updated, message="Conversion updated")


# --- Module Notes -----------------------------------------------------------
# Managers and admins see and review every conversion; advertisers only those
# attributed to them via `advertiser_id`.
