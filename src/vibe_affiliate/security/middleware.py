"""
vibe_affiliate.security.middleware

Per-request security headers and CORS handling.

Responsibilities:
- Attach hardening headers (framing, sniffing, XSS, referrer, permissions, CSP, HSTS).
- Mark API responses as uncacheable and stamp them with version/request id.
- Answer CORS preflight for public API prefixes and add CORS headers to their responses.
- Expose the derived client IP and a response timestamp for monitoring.
- Render unhandled errors as the 500 envelope so they carry the same headers.
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Sequence
from datetime import UTC, datetime

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from vibe_affiliate.errors import internal_error_response
from vibe_affiliate.security.helpers import get_client_ip

BASE_SECURITY_HEADERS: dict[str, str] = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
}

HSTS_HEADER = "max-age=31536000; includeSubDomains; preload"

CSP_DEVELOPMENT = (
    "default-src 'self'; script-src 'self' 'unsafe-inline' 'unsafe-eval'; "
    "style-src 'self' 'unsafe-inline'; img-src 'self' data: blob:; "
    "font-src 'self' data:; connect-src 'self';"
)
CSP_STRICT = (
    "default-src 'self'; script-src 'self'; style-src 'self' 'unsafe-inline'; "
    "img-src 'self' data: blob:; font-src 'self' data:; connect-src 'self';"
)

API_CACHE_CONTROL = "no-store, no-cache, must-revalidate"

CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}
CORS_MAX_AGE = "86400"

# Static assets and images bypass the middleware entirely.
_SKIP_PATH_RE = re.compile(
    r"^/(?:_next/static|_next/image|favicon\.ico|.*\.(?:svg|png|jpg|jpeg|gif|webp)$)"
)


def content_security_policy(env: str) -> str:
    # Only development relaxes script-src; test and production share the strict policy.
    return CSP_DEVELOPMENT if env == "development" else CSP_STRICT


def _utc_timestamp() -> str:
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Header/CORS decisions are made per request from the path, method and env only.

    Preflight requests to public API prefixes are answered here with an empty
    200 carrying only the CORS headers; they never reach a route.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        env: str,
        public_api_paths: Sequence[str],
        api_version: str = "1.0",
    ) -> None:
        super().__init__(app)
        self._env = env
        self._public_api_paths = tuple(public_api_paths)
        self._api_version = api_version

    def is_public_api(self, path: str) -> bool:
        return path.startswith(self._public_api_paths)

    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path
        if _SKIP_PATH_RE.match(path):
            return await call_next(request)

        is_api = path.startswith("/api/")
        is_public_api = self.is_public_api(path)

        if is_public_api and request.method == "OPTIONS":
            return Response(
                status_code=200,
                headers={**CORS_HEADERS, "Access-Control-Max-Age": CORS_MAX_AGE},
            )

        request_id: str | None = None
        if is_api:
            # Shared with RequestContextMiddleware so logs and the header agree.
            request_id = str(uuid.uuid4())
            request.state.request_id = request_id

        client_ip = get_client_ip(
            request.headers, request.client.host if request.client else None
        )

        try:
            response: Response = await call_next(request)
        except Exception as e:
            response = internal_error_response(e)

        headers = response.headers
        for name, value in BASE_SECURITY_HEADERS.items():
            headers[name] = value
        if self._env == "production":
            headers["Strict-Transport-Security"] = HSTS_HEADER
        headers["Content-Security-Policy"] = content_security_policy(self._env)

        if is_api:
            headers["Cache-Control"] = API_CACHE_CONTROL
            headers["X-API-Version"] = self._api_version
            headers["X-Request-ID"] = request_id or str(uuid.uuid4())

        if is_public_api:
            for name, value in CORS_HEADERS.items():
                headers[name] = value

        headers["X-Client-IP"] = client_ip
        headers["X-Timestamp"] = _utc_timestamp()
        return response


# --- Module Notes -----------------------------------------------------------
# The authenticated dashboard API is same-origin and gets no CORS headers; only the
# tracking/webhook/redirect prefixes in `public_api_paths` are cross-origin.
