"""
vibe_affiliate.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings and the mock data provider.
- Encapsulate app.state access patterns.
"""

from __future__ import annotations

from fastapi import Request

from vibe_affiliate.mock_data import MockDataProvider
from vibe_affiliate.settings import Settings


def settings_dep(request: Request) -> Settings:
    # Settings are attached in `vibe_affiliate.api.app.create_app`.
    return request.app.state.settings  # type: ignore[attr-defined]


def provider_dep(request: Request) -> MockDataProvider:
    return request.app.state.provider  # type: ignore[attr-defined]
