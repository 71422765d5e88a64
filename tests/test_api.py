"""
tests.test_api

End-to-end API behaviour over the mock provider: campaigns, conversions, account
reads, dashboard, uploads and the public tracking/redirect/webhook endpoints.
"""

from __future__ import annotations

import json
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest

from vibe_affiliate.api.app import create_app
from vibe_affiliate.domain.models import ConversionStatus
from vibe_affiliate.mock_data.fixtures import seed_campaigns, seed_conversions
from vibe_affiliate.security.helpers import compute_webhook_signature
from vibe_affiliate.settings import Settings


def _client(app) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")


NEW_CAMPAIGN = {
    "name": "<b>Promo</b> de Verão",
    "description": "Campanha sazonal",
    "category": "Moda",
    "landingPageUrl": "https://loja.example.com/verao",
    "budget": 5000,
    "commissionRate": 15,
    "startDate": "2024-12-01T00:00:00Z",
    "endDate": "2025-02-28T00:00:00Z",
    "requiresApproval": False,
}


# --- Campaigns --------------------------------------------------------------


@pytest.mark.asyncio
async def test_campaign_list_hides_private_from_affiliates(app, headers) -> None:
    async with _client(app) as client:
        r = await client.get("/api/v1/campaigns", headers=headers["affiliate"])
        body = r.json()
        assert r.status_code == 200
        assert body["success"] is True
        assert {c["id"] for c in body["data"]} == {"camp_1", "camp_2"}
        assert body["meta"]["total"] == 2

        r = await client.get("/api/v1/campaigns", headers=headers["advertiser"])
        assert r.json()["meta"]["total"] == 3

        r = await client.get("/api/v1/campaigns/camp_3", headers=headers["affiliate"])
        assert r.status_code == 404


@pytest.mark.asyncio
async def test_campaign_list_pagination_and_filters(app, headers) -> None:
    async with _client(app) as client:
        r = await client.get("/api/v1/campaigns?limit=1&page=2", headers=headers["admin"])
        meta = r.json()["meta"]
        assert len(r.json()["data"]) == 1
        assert meta == {
            "page": 2,
            "limit": 1,
            "total": 3,
            "totalPages": 3,
            "hasNext": True,
            "hasPrev": True,
        }

        r = await client.get("/api/v1/campaigns?status=paused", headers=headers["admin"])
        assert [c["id"] for c in r.json()["data"]] == ["camp_3"]

        r = await client.get("/api/v1/campaigns?limit=0", headers=headers["admin"])
        assert r.status_code == 422


@pytest.mark.asyncio
async def test_campaign_search(app, headers) -> None:
    async with _client(app) as client:
        r = await client.post(
            "/api/v1/campaigns/search",
            json={"sortBy": "revenue", "sortOrder": "desc"},
            headers=headers["affiliate"],
        )
    assert r.status_code == 200
    assert [c["id"] for c in r.json()["data"]] == ["camp_1", "camp_2"]


@pytest.mark.asyncio
async def test_create_campaign_sanitizes_and_owns(app, headers) -> None:
    async with _client(app) as client:
        r = await client.post("/api/v1/campaigns", json=NEW_CAMPAIGN, headers=headers["advertiser"])
        assert r.status_code == 201
        created = r.json()["data"]
        assert created["name"] == "bPromo/b de Verão"
        assert created["status"] == "draft"
        assert created["createdBy"] == "user_3"
        assert created["requiresApproval"] is False

        r = await client.get(f"/api/v1/campaigns/{created['id']}", headers=headers["advertiser"])
        assert r.status_code == 200


@pytest.mark.asyncio
async def test_create_campaign_rejections(app, headers) -> None:
    async with _client(app) as client:
        r = await client.post("/api/v1/campaigns", json=NEW_CAMPAIGN, headers=headers["affiliate"])
        assert r.status_code == 403

        r = await client.post(
            "/api/v1/campaigns",
            json={**NEW_CAMPAIGN, "landingPageUrl": "http://169.254.169.254/latest"},
            headers=headers["advertiser"],
        )
        assert r.status_code == 422
        assert r.json()["error"] == "invalid_url"
        assert r.json()["details"] == {"field": "landingPageUrl"}

        r = await client.post(
            "/api/v1/campaigns",
            json={**NEW_CAMPAIGN, "endDate": "2024-11-01T00:00:00Z"},
            headers=headers["advertiser"],
        )
        assert r.status_code == 422
        assert r.json()["error"] == "validation_error"


@pytest.mark.asyncio
async def test_update_campaign_ownership(app, headers) -> None:
    async with _client(app) as client:
        r = await client.patch(
            "/api/v1/campaigns/camp_1",
            json={"name": "Black Friday 2025", "description": None},
            headers=headers["advertiser"],
        )
        assert r.status_code == 200
        assert r.json()["data"]["name"] == "Black Friday 2025"
        assert r.json()["data"]["description"] is None

        # Explicit null on a required field is ignored.
        r = await client.patch(
            "/api/v1/campaigns/camp_1", json={"name": None}, headers=headers["advertiser"]
        )
        assert r.status_code == 200
        assert r.json()["data"]["name"] == "Black Friday 2025"

        r = await client.patch(
            "/api/v1/campaigns/camp_1", json={"name": "x"}, headers=headers["other_advertiser"]
        )
        assert r.status_code == 403

        r = await client.patch(
            "/api/v1/campaigns/missing", json={"name": "x"}, headers=headers["advertiser"]
        )
        assert r.status_code == 404


@pytest.mark.asyncio
async def test_update_campaign_keeps_commission_and_schedule_rules(app, headers) -> None:
    async with _client(app) as client:
        # camp_1 is a percentage campaign starting 2024-11-01.
        r = await client.patch(
            "/api/v1/campaigns/camp_1", json={"commissionRate": 250}, headers=headers["advertiser"]
        )
        assert r.status_code == 422
        assert r.json()["error"] == "validation_error"

        r = await client.patch(
            "/api/v1/campaigns/camp_1",
            json={"endDate": "2000-01-01T00:00:00Z"},
            headers=headers["advertiser"],
        )
        assert r.status_code == 422
        assert r.json()["error"] == "validation_error"

        r = await client.get("/api/v1/campaigns/camp_1", headers=headers["advertiser"])
        stored = r.json()["data"]
        assert stored["commissionRate"] == 8.5
        assert stored["endDate"].startswith("2024-12-01")

        r = await client.patch(
            "/api/v1/campaigns/camp_1", json={"commissionRate": 100}, headers=headers["advertiser"]
        )
        assert r.status_code == 200
        assert r.json()["data"]["commissionRate"] == 100


@pytest.mark.asyncio
async def test_delete_campaign(app, headers) -> None:
    async with _client(app) as client:
        r = await client.delete("/api/v1/campaigns/camp_2", headers=headers["other_advertiser"])
        assert r.status_code == 403

        r = await client.delete("/api/v1/campaigns/camp_2", headers=headers["admin"])
        assert r.status_code == 200
        assert r.json()["data"] == {"deleted": True}

        r = await client.get("/api/v1/campaigns/camp_2", headers=headers["admin"])
        assert r.status_code == 404


# --- Conversions ------------------------------------------------------------


@pytest.mark.asyncio
async def test_conversions_are_scoped_by_role(app, headers) -> None:
    async with _client(app) as client:
        r = await client.get("/api/v1/conversions", headers=headers["affiliate"])
        assert r.json()["meta"]["total"] == 2

        r = await client.get("/api/v1/conversions", headers=headers["other_advertiser"])
        assert r.json()["meta"]["total"] == 0

        r = await client.get("/api/v1/conversions?status=pending", headers=headers["advertiser"])
        assert [c["id"] for c in r.json()["data"]] == ["conv_2"]
        assert r.json()["data"][0]["customerOS"] == "Windows"


@pytest.mark.asyncio
async def test_conversion_search(app, headers) -> None:
    async with _client(app) as client:
        r = await client.post(
            "/api/v1/conversions/search",
            json={"start": "2024-08-01T00:00:00Z", "end": "2024-08-31T00:00:00Z", "minAmount": 400},
            headers=headers["admin"],
        )
    assert [c["id"] for c in r.json()["data"]] == ["conv_2"]


@pytest.mark.asyncio
async def test_conversion_search_reads_offsetless_dates_as_utc(app, headers) -> None:
    async with _client(app) as client:
        r = await client.post(
            "/api/v1/conversions/search",
            json={"start": "2024-08-01T00:00:00", "end": "2024-08-31T00:00:00"},
            headers=headers["admin"],
        )
    assert r.status_code == 200
    assert [c["id"] for c in r.json()["data"]] == ["conv_1", "conv_2"]


@pytest.mark.asyncio
async def test_conversion_status_updates(app, headers) -> None:
    async with _client(app) as client:
        r = await client.post(
            "/api/v1/conversions/conv_2/status",
            json={"status": "approved"},
            headers=headers["affiliate"],
        )
        assert r.status_code == 403

        r = await client.post(
            "/api/v1/conversions/conv_2/status",
            json={"status": "approved"},
            headers=headers["other_advertiser"],
        )
        assert r.status_code == 403

        r = await client.post(
            "/api/v1/conversions/conv_2/status",
            json={"status": "approved"},
            headers=headers["advertiser"],
        )
        assert r.status_code == 200
        assert r.json()["data"]["status"] == "approved"

        r = await client.post(
            "/api/v1/conversions/conv_1/status",
            json={"status": "pending"},
            headers=headers["advertiser"],
        )
        assert r.status_code == 409
        assert r.json()["details"] == {"current": "approved", "requested": "pending"}

        r = await client.post(
            "/api/v1/conversions/missing/status",
            json={"status": "paid"},
            headers=headers["admin"],
        )
        assert r.status_code == 404


# --- Users / account --------------------------------------------------------


@pytest.mark.asyncio
async def test_profile_read_and_update(app, headers) -> None:
    async with _client(app) as client:
        r = await client.get("/api/v1/users/me/profile", headers=headers["affiliate"])
        assert r.status_code == 200
        assert r.json()["data"]["stats"]["totalConversions"] == 2

        r = await client.patch(
            "/api/v1/users/me",
            json={"name": "João <i>S.</i>", "bio": "Afiliado", "website": "https://joao.dev"},
            headers=headers["affiliate"],
        )
        assert r.status_code == 200
        data = r.json()["data"]
        assert data["name"] == "João iS./i"
        assert data["website"] == "https://joao.dev"

        r = await client.patch(
            "/api/v1/users/me",
            json={"name": "João", "website": "javascript:alert(1)"},
            headers=headers["affiliate"],
        )
        assert r.status_code == 422
        assert r.json()["error"] == "invalid_url"


@pytest.mark.asyncio
async def test_account_reads(app, headers) -> None:
    async with _client(app) as client:
        r = await client.get("/api/v1/links", headers=headers["affiliate"])
        assert [link["id"] for link in r.json()["data"]] == ["link_1", "link_2"]

        r = await client.get("/api/v1/payments", headers=headers["affiliate"])
        assert [p["id"] for p in r.json()["data"]] == ["pay_1"]

        r = await client.get("/api/v1/payments/methods", headers=headers["affiliate"])
        assert r.json()["data"][0]["type"] == "pix"

        r = await client.get("/api/v1/notifications", headers=headers["advertiser"])
        assert [n["id"] for n in r.json()["data"]] == ["notif_2"]


# --- Dashboard --------------------------------------------------------------


@pytest.mark.asyncio
async def test_dashboard(app, headers) -> None:
    async with _client(app) as client:
        r = await client.get("/api/v1/dashboard/metrics", headers=headers["advertiser"])
        assert r.status_code == 200
        assert r.json()["data"]["totalRevenue"] == pytest.approx(125487.50)

        r = await client.get("/api/v1/dashboard/chart?days=7", headers=headers["advertiser"])
        assert r.status_code == 200
        assert len(r.json()["data"]["data"]) == 7

        r = await client.get("/api/v1/dashboard/chart?days=0", headers=headers["advertiser"])
        assert r.status_code == 422


# --- Uploads ----------------------------------------------------------------


@pytest.mark.asyncio
async def test_upload_validation(app, headers) -> None:
    async with _client(app) as client:
        r = await client.post(
            "/api/v1/uploads",
            files={"file": ("banner.png", b"\x89PNG\r\n\x1a\n" + b"0" * 64, "image/png")},
            headers=headers["advertiser"],
        )
        assert r.status_code == 200
        assert r.json()["data"] == {"filename": "banner.png", "contentType": "image/png", "size": 72}

        r = await client.post(
            "/api/v1/uploads",
            files={"file": ("banner.exe", b"MZ", "image/png")},
            headers=headers["advertiser"],
        )
        assert r.status_code == 422
        assert r.json()["error"] == "invalid_file"
        assert r.json()["message"] == "File extension not allowed"


@pytest.mark.asyncio
async def test_upload_size_limit(headers) -> None:
    app = create_app(settings=Settings(env="test", mock_latency_enabled=False, upload_max_bytes=16))
    async with _client(app) as client:
        r = await client.post(
            "/api/v1/uploads",
            files={"file": ("banner.png", b"0" * 64, "image/png")},
            headers=headers["advertiser"],
        )
    assert r.status_code == 422
    assert r.json()["message"] == "File size exceeds limit"


# --- Public endpoints -------------------------------------------------------


@pytest.mark.asyncio
async def test_track_click(app) -> None:
    async with _client(app) as client:
        r = await client.post("/api/v1/track", json={"linkId": "link_1", "unique": True})
        assert r.status_code == 200
        data = r.json()["data"]
        assert len(data["clickId"]) == 32
        assert data["clicks"] == 5421

        r = await client.post("/api/v1/track", json={"linkId": "missing"})
        assert r.status_code == 404


@pytest.mark.asyncio
async def test_redirect_counts_unique_clicks(app) -> None:
    async with _client(app) as client:
        r = await client.get("/api/v1/redirect/bf2024")
        assert r.status_code == 307
        target = urlsplit(r.headers["location"])
        assert target.netloc == "exemplo-loja.com"
        query = parse_qs(target.query)
        assert query["utm_source"] == ["vibe"]
        assert query["aff"] == ["user_2"]
        assert r.headers["Access-Control-Allow-Origin"] == "*"

        r = await client.get("/api/v1/redirect/bf2024")
        assert r.status_code == 307

    link = await app.state.provider.get_link("link_1")
    assert (link.clicks, link.unique_clicks) == (5422, 4891)


@pytest.mark.asyncio
async def test_redirect_unknown_slug(app) -> None:
    async with _client(app) as client:
        r = await client.get("/api/v1/redirect/does-not-exist")
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_redirect_respects_allow_list() -> None:
    app = create_app(
        settings=Settings(
            env="test", mock_latency_enabled=False, allowed_redirect_domains=["other.example"]
        )
    )
    async with _client(app) as client:
        r = await client.get("/api/v1/redirect/bf2024")
    assert r.status_code == 422
    assert r.json()["error"] == "invalid_url"


def _webhook_body(
    conversion_id: str = "conv_hook", event: str = "conversion.created", status: str = "pending"
) -> bytes:
    conversion = seed_conversions()[1].model_copy(
        update={"id": conversion_id, "status": ConversionStatus(status)}
    )
    campaign = seed_campaigns()[1]
    payload = {
        "event": event,
        "timestamp": "2024-08-24T10:31:00Z",
        "data": {
            "conversion": conversion.model_dump(mode="json", by_alias=True),
            "campaign": campaign.model_dump(mode="json", by_alias=True),
            "affiliate": {"id": "user_2", "name": "João Silva"},
        },
    }
    return json.dumps(payload).encode("utf-8")


@pytest.mark.asyncio
async def test_webhook_without_secret_upserts(app) -> None:
    async with _client(app) as client:
        r = await client.post(
            "/api/v1/webhook", content=_webhook_body(), headers={"Content-Type": "application/json"}
        )
        assert r.status_code == 200
        assert r.json()["data"] == {
            "event": "conversion.created",
            "conversionId": "conv_hook",
            "created": True,
        }

        r = await client.post(
            "/api/v1/webhook",
            content=_webhook_body(event="conversion.updated"),
            headers={"Content-Type": "application/json"},
        )
        assert r.json()["data"]["created"] is False

    stored = await app.state.provider.get_conversion("conv_hook")
    assert stored is not None and stored.customer_os == "Windows"


@pytest.mark.asyncio
async def test_webhook_signature_enforced_when_secret_set() -> None:
    app = create_app(
        settings=Settings(env="test", mock_latency_enabled=False, webhook_secret="whsec_test")
    )
    body = _webhook_body()
    async with _client(app) as client:
        r = await client.post("/api/v1/webhook", content=body)
        assert r.status_code == 401
        assert r.json()["error"] == "invalid_signature"

        r = await client.post(
            "/api/v1/webhook", content=body, headers={"X-Signature": "0" * 64}
        )
        assert r.status_code == 401

        r = await client.post(
            "/api/v1/webhook",
            content=body,
            headers={"X-Signature": compute_webhook_signature("whsec_test", body)},
        )
        assert r.status_code == 200


@pytest.mark.asyncio
async def test_webhook_rejects_bad_payloads(app) -> None:
    async with _client(app) as client:
        r = await client.post("/api/v1/webhook", content=b"{not json")
        assert r.status_code == 422
        assert r.json()["error"] == "validation_error"

        r = await client.post("/api/v1/webhook", content=_webhook_body(event="payment.created"))
        assert r.status_code == 422


@pytest.mark.asyncio
async def test_webhook_update_follows_status_lifecycle(app) -> None:
    async with _client(app) as client:
        # conv_1 is seeded as approved.
        r = await client.post(
            "/api/v1/webhook", content=_webhook_body("conv_1", "conversion.updated", "pending")
        )
        assert r.status_code == 409
        assert r.json()["error"] == "conflict"
        assert r.json()["details"] == {"current": "approved", "requested": "pending"}

        r = await client.post(
            "/api/v1/webhook", content=_webhook_body("conv_1", "conversion.updated", "paid")
        )
        assert r.status_code == 200

        r = await client.post(
            "/api/v1/webhook", content=_webhook_body("conv_1", "conversion.updated", "approved")
        )
        assert r.status_code == 409

    stored = await app.state.provider.get_conversion("conv_1")
    assert stored is not None and stored.status == "paid"


# --- Unhandled errors -------------------------------------------------------


@pytest.mark.asyncio
async def test_unhandled_error_keeps_envelope_and_security_headers(app) -> None:
    @app.get("/api/v1/_explode")
    async def explode() -> None:
        raise RuntimeError("boom")

    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        r = await client.get("/api/v1/_explode")

    assert r.status_code == 500
    assert r.json() == {
        "success": False,
        "error": "internal_error",
        "message": "Internal server error",
    }
    assert "boom" not in r.text
    assert r.headers["x-frame-options"] == "DENY"
    assert r.headers["cache-control"] == "no-store, no-cache, must-revalidate"
    assert "content-security-policy" in r.headers
    assert r.headers["x-request-id"]
