"""
vibe_affiliate.api.routers.account

Per-user read endpoints: affiliate links, payments and notifications.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from vibe_affiliate.api.deps import provider_dep
from vibe_affiliate.auth.deps import get_principal
from vibe_affiliate.auth.models import Principal
from vibe_affiliate.domain.models import AffiliateLink, Notification, Payment, PaymentMethod
from vibe_affiliate.domain.responses import APIResponse
from vibe_affiliate.mock_data import MockDataProvider

router = APIRouter(prefix="/api/v1", tags=["account"])


@router.get("/links")
async def list_links(
    principal: Principal = Depends(get_principal),
    provider: MockDataProvider = Depends(provider_dep),
) -> APIResponse[list[AffiliateLink]]:
    return APIResponse.ok(await provider.list_affiliate_links(principal.subject))


@router.get("/payments")
async def list_payments(
    principal: Principal = Depends(get_principal),
    provider: MockDataProvider = Depends(provider_dep),
) -> APIResponse[list[Payment]]:
    return APIResponse.ok(await provider.list_payments(principal.subject))


@router.get("/payments/methods")
async def list_payment_methods(
    principal: Principal = Depends(get_principal),
    provider: MockDataProvider = Depends(provider_dep),
) -> APIResponse[list[PaymentMethod]]:
    return APIResponse.ok(await provider.list_payment_methods(principal.subject))


@router.get("/notifications")
async def list_notifications(
    principal: Principal = Depends(get_principal),
    provider: MockDataProvider = Depends(provider_dep),
) -> APIResponse[list[Notification]]:
    # Newest first.
    return APIResponse.ok(await provider.list_notifications(principal.subject))
