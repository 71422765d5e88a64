"""
vibe_affiliate.api.routers.dashboard

Dashboard aggregates and chart series.

Responsibilities:
- Serve the precomputed dashboard metrics snapshot.
- Serve a synthetic daily revenue series for the chart widgets.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from vibe_affiliate.api.deps import provider_dep
from vibe_affiliate.auth.deps import get_principal
from vibe_affiliate.auth.models import Principal
from vibe_affiliate.domain.models import ChartSeries, DashboardMetrics
from vibe_affiliate.domain.responses import APIResponse
from vibe_affiliate.mock_data import MockDataProvider, generate_chart_data

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])


@router.get("/metrics")
async def metrics(
    _: Principal = Depends(get_principal),
    provider: MockDataProvider = Depends(provider_dep),
) -> APIResponse[DashboardMetrics]:
    return APIResponse.ok(await provider.get_dashboard_metrics())


@router.get("/chart")
async def chart(
    days: int = Query(default=30, ge=1, le=365),
    _: Principal = Depends(get_principal),
) -> APIResponse[ChartSeries]:
    return APIResponse.ok(ChartSeries(name="revenue", data=generate_chart_data(days)))
