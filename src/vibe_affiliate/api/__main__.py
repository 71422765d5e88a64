"""
vibe_affiliate.api.__main__

Entrypoint for running the dashboard API via `python -m vibe_affiliate.api`.

Responsibilities:
- Load settings from the `VIBE_` environment.
- Create the app.
- Start uvicorn with structlog-compatible logging config.
"""

from __future__ import annotations

import uvicorn

from vibe_affiliate.api.app import create_app
from vibe_affiliate.settings import get_settings


def main() -> None:
    settings = get_settings()
    app = create_app(settings=settings)

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,  # structlog
        server_header=False,
        # Client IPs come from the forwarding headers via `get_client_ip`.
        proxy_headers=False,
    )


if __name__ == "__main__":
    main()


# --- Module Notes -----------------------------------------------------------
# `VIBE_ENV=production` turns on HSTS, the strict CSP and error-level audit events.
