"""
vibe_affiliate.security.audit

Security audit events.

Responsibilities:
- Define the `SecurityEvent` record (event name, severity, caller metadata).
- Emit audit events through structlog with environment-dependent severity.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal

from vibe_affiliate.observability.logging import get_logger
from vibe_affiliate.security.helpers import get_security_config

log = get_logger("vibe_affiliate.security.audit")

SecurityLevel = Literal["low", "medium", "high", "critical"]


@dataclass(frozen=True, slots=True)
class SecurityEvent:
    event: str
    level: SecurityLevel
    ip: str | None = None
    user_id: str | None = None
    user_agent: str | None = None
    details: dict[str, Any] = field(default_factory=dict)


def log_security_event(event: SecurityEvent, *, env: str) -> bool:
    """
    Emit `event` as a structured log record.

    development -> warning; production (audit logging on) -> error;
    test -> not emitted. Returns whether a record was written.
    """
    profile = get_security_config(env)
    if env == "test" and not profile.audit_logging:
        return False

    fields = {k: v for k, v in asdict(event).items() if v not in (None, {})}
    fields["timestamp"] = datetime.now(tz=UTC).isoformat()
    fields["security_event"] = fields.pop("event")
    # `level` is taken by the log level in the rendered record.
    fields["severity"] = fields.pop("level")

    if env == "production" or profile.audit_logging:
        log.error("security_event", **fields)
    else:
        log.warning("security_event", **fields)
    return True


# --- Module Notes -----------------------------------------------------------
# Shipping these records to an external sink (SIEM/Sentry) is a log-routing concern;
# the JSON renderer in `observability.logging` already makes them machine-readable.
