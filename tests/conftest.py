"""
tests.conftest

Shared fixtures: test settings, a fresh app per test and pre-minted bearer headers.
"""

from __future__ import annotations

from datetime import timedelta

import pytest

from vibe_affiliate.api.app import create_app
from vibe_affiliate.auth.jwt import JwtConfig, issue_token
from vibe_affiliate.settings import Settings


@pytest.fixture
def settings() -> Settings:
    return Settings(env="test", mock_latency_enabled=False)


@pytest.fixture
def app(settings: Settings):
    return create_app(settings=settings)


def _bearer(settings: Settings, subject: str, role: str) -> dict[str, str]:
    token = issue_token(
        cfg=JwtConfig.from_settings(settings),
        subject=subject,
        role=role,
        ttl=timedelta(minutes=5),
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers(settings: Settings) -> dict[str, dict[str, str]]:
    """Bearer headers keyed by seeded role, plus an unrelated advertiser and a manager."""
    return {
        "admin": _bearer(settings, "user_1", "admin"),
        "affiliate": _bearer(settings, "user_2", "affiliate"),
        "advertiser": _bearer(settings, "user_3", "advertiser"),
        "other_advertiser": _bearer(settings, "user_99", "advertiser"),
        "manager": _bearer(settings, "user_50", "manager"),
    }
