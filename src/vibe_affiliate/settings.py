"""
vibe_affiliate.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for the API, middleware and mock provider.
- Hide secrets from repr/logging (JWT secret, webhook secret).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from vibe_affiliate.security.helpers import SecurityProfile, get_security_config

Environment = Literal["development", "test", "production"]


class Settings(BaseSettings):
    """
    - Strict env-driven configuration (prefix `VIBE_`)
    - Defaults safe for local dev
    - Single settings object injected across layers
    """

    model_config = SettingsConfigDict(env_prefix="VIBE_", case_sensitive=False)

    # `env` drives HSTS, CSP strictness and the security profile.
    env: Environment = "development"
    service_name: str = "vibe-affiliate"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080
    api_version: str = "1.0"

    # Auth
    jwt_alg: str = "HS256"
    jwt_issuer: str = "vibe-affiliate"
    jwt_audience: str = "vibe-dashboard"
    jwt_secret: str = Field(default="dev-secret-change-me-0123456789abcdef", repr=False)
    jwt_ttl_minutes: int = 60

    # Middleware
    public_api_paths: list[str] = Field(
        default_factory=lambda: ["/api/v1/track", "/api/v1/webhook", "/api/v1/redirect"]
    )

    # Mock provider
    mock_latency_enabled: bool = True

    # Public endpoints
    webhook_secret: str | None = Field(default=None, repr=False)
    allowed_redirect_domains: list[str] = Field(default_factory=list)
    upload_max_bytes: int = 5 * 1024 * 1024

    @property
    def security_profile(self) -> SecurityProfile:
        return get_security_config(self.env)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Tests build `Settings(env="test", mock_latency_enabled=False)` directly and pass
# it to `create_app`; only the uvicorn entrypoint reads the environment.
