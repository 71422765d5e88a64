"""
vibe_affiliate.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness probe (`/healthz`).
- Provide readiness probe (`/readyz`) confirming the data provider is attached.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from starlette.status import HTTP_503_SERVICE_UNAVAILABLE

from vibe_affiliate.domain.responses import APIResponse

router = APIRouter()


@router.get("/healthz")
async def healthz() -> APIResponse[dict[str, str]]:
    return APIResponse.ok({"status": "ok"})


@router.get("/readyz")
async def readyz(request: Request) -> APIResponse[dict[str, str]]:
    if getattr(request.app.state, "provider", None) is None:
        raise HTTPException(status_code=HTTP_503_SERVICE_UNAVAILABLE, detail="Provider not ready")
    return APIResponse.ok({"status": "ready"})
