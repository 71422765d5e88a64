"""
vibe_affiliate.api.routers.public

Unauthenticated, cross-origin endpoints: click tracking, short-link redirects and
the conversion webhook.

Responsibilities:
- Count clicks on active affiliate links and hand back a click id.
- Resolve slugs to tracking URLs, refusing targets that fail outbound URL validation.
- Accept conversion webhooks, verifying the HMAC signature when a secret is configured.

CORS and preflight for these prefixes are handled by `SecurityHeadersMiddleware`.
"""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel
from starlette.status import (
    HTTP_307_TEMPORARY_REDIRECT,
    HTTP_401_UNAUTHORIZED,
    HTTP_409_CONFLICT,
    HTTP_422_UNPROCESSABLE_ENTITY,
)

from vibe_affiliate.api.deps import provider_dep, settings_dep
from vibe_affiliate.domain.models import AffiliateLink, ConversionWebhook
from vibe_affiliate.domain.responses import APIResponse
from vibe_affiliate.errors import AppError, ErrorCode
from vibe_affiliate.mock_data import MockDataProvider
from vibe_affiliate.mock_data.provider import InvalidTransitionError
from vibe_affiliate.observability.logging import get_logger
from vibe_affiliate.security.audit import SecurityEvent, log_security_event
from vibe_affiliate.security.helpers import (
    generate_secure_token,
    get_client_ip,
    validate_url,
    validate_webhook_signature,
)
from vibe_affiliate.settings import Settings

router = APIRouter(prefix="/api/v1", tags=["public"])
log = get_logger(__name__)

SIGNATURE_HEADER = "x-signature"
CLICK_COOKIE_PREFIX = "vclk_"
CLICK_COOKIE_MAX_AGE = 30 * 24 * 3600


class _Body(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TrackRequest(_Body):
    link_id: str = Field(min_length=1, max_length=64)
    unique: bool = False


class TrackResponse(_Body):
    click_id: str
    link_id: str
    clicks: int


class WebhookAck(_Body):
    event: str
    conversion_id: str
    created: bool


def _client_ip(request: Request) -> str:
    return get_client_ip(request.headers, request.client.host if request.client else None)


def _ensure_live(link: AffiliateLink | None) -> AffiliateLink:
    if link is None or not link.is_active or link.is_expired(datetime.now(tz=UTC)):
        raise AppError.not_found("Link")
    return link


@router.post("/track")
async def track(
    body: TrackRequest,
    provider: MockDataProvider = Depends(provider_dep),
) -> APIResponse[TrackResponse]:
    link = _ensure_live(await provider.get_link(body.link_id))
    updated = await provider.record_click(link.id, unique=body.unique)
    if updated is None:
        raise AppError.not_found("Link")
    return APIResponse.ok(
        TrackResponse(click_id=generate_secure_token(), link_id=updated.id, clicks=updated.clicks)
    )


@router.get("/redirect/{slug}")
async def redirect(
    slug: str,
    request: Request,
    provider: MockDataProvider = Depends(provider_dep),
    settings: Settings = Depends(settings_dep),
) -> RedirectResponse:
    link = _ensure_live(await provider.get_link_by_slug(slug))
    target = link.tracking_url()
    if not validate_url(target, settings.allowed_redirect_domains):
        log_security_event(
            SecurityEvent(
                event="redirect_blocked",
                level="high",
                ip=_client_ip(request),
                user_agent=request.headers.get("user-agent"),
                details={"slug": slug, "target": target},
            ),
            env=settings.env,
        )
        raise AppError(
            ErrorCode.invalid_url,
            "Redirect target is not allowed",
            status_code=HTTP_422_UNPROCESSABLE_ENTITY,
        )

    cookie = f"{CLICK_COOKIE_PREFIX}{link.id}"
    unique = cookie not in request.cookies
    await provider.record_click(link.id, unique=unique)

    response = RedirectResponse(target, status_code=HTTP_307_TEMPORARY_REDIRECT)
    if unique:
        response.set_cookie(
            cookie,
            "1",
            max_age=CLICK_COOKIE_MAX_AGE,
            httponly=True,
            samesite="lax",
            secure=settings.env == "production",
        )
    return response


@router.post("/webhook")
async def webhook(
    request: Request,
    provider: MockDataProvider = Depends(provider_dep),
    settings: Settings = Depends(settings_dep),
) -> APIResponse[WebhookAck]:
    body = await request.body()

    if settings.webhook_secret and not validate_webhook_signature(
        body, request.headers.get(SIGNATURE_HEADER), settings.webhook_secret
    ):
        log_security_event(
            SecurityEvent(
                event="webhook_signature_invalid",
                level="high",
                ip=_client_ip(request),
                user_agent=request.headers.get("user-agent"),
                details={"path": request.url.path},
            ),
            env=settings.env,
        )
        raise AppError(
            ErrorCode.invalid_signature,
            "Invalid webhook signature",
            status_code=HTTP_401_UNAUTHORIZED,
        )

    try:
        payload = ConversionWebhook.model_validate_json(body)
    except ValidationError as e:
        raise AppError(
            ErrorCode.validation_error,
            "Invalid webhook payload",
            status_code=HTTP_422_UNPROCESSABLE_ENTITY,
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e

    conversion = payload.data.conversion
    try:
        created = await provider.upsert_conversion(conversion)
    except InvalidTransitionError as e:
        raise AppError(
            ErrorCode.conflict,
            str(e),
            status_code=HTTP_409_CONFLICT,
            details={"current": e.current.value, "requested": e.requested.value},
        ) from e
    log.info(
        "webhook_conversion_received",
        webhook_event=payload.event,
        conversion_id=conversion.id,
        created=created,
    )
    return APIResponse.ok(
        WebhookAck(event=payload.event, conversion_id=conversion.id, created=created)
    )


# --- Module Notes -----------------------------------------------------------
# Unique-click detection is per browser: a `vclk_<link id>` cookie marks links this
# client has already been redirected through.
