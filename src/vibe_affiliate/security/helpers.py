"""
vibe_affiliate.security.helpers

Stateless request-security helpers.

Responsibilities:
- Client IP extraction from proxy headers.
- Secure token / CSRF token generation and constant-time validation.
- Password hashing and verification.
- Input sanitization, outbound URL (SSRF) validation, upload validation.
- Rate-limit key derivation and the per-environment security profile.

Every function is a single-pass check over its inputs; nothing here keeps state.
"""

from __future__ import annotations

import hashlib
import hmac
import ipaddress
import re
import secrets
import string
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlsplit

TOKEN_CHARSET = string.ascii_uppercase + string.ascii_lowercase + string.digits
CSRF_TOKEN_LENGTH = 40

DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024
DEFAULT_ALLOWED_MIME_TYPES: tuple[str, ...] = ("image/jpeg", "image/png", "image/gif", "image/webp")
DEFAULT_ALLOWED_EXTENSIONS: tuple[str, ...] = (".jpg", ".jpeg", ".png", ".gif", ".webp")

_BLOCKED_SCHEMES = frozenset({"file", "ftp", "gopher", "dict"})
# Prefix match on the hostname: loopback, RFC1918, link-local.
_PRIVATE_HOST_RE = re.compile(
    r"^(127\.|10\.|172\.(1[6-9]|2[0-9]|3[0-1])\.|192\.168\.|169\.254\.|::1|localhost)"
)

_ANGLE_BRACKETS_RE = re.compile(r"[<>]")
_JS_PROTOCOL_RE = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER_RE = re.compile(r"on\w+=", re.IGNORECASE)

_DANGEROUS_FILENAME_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\.\."),  # path traversal
    re.compile(r"[<>]"),  # markup
    re.compile(r"[&$`|;]"),  # shell metacharacters
)


def get_client_ip(headers: Mapping[str, str], fallback: str | None = None) -> str:
    """
    Best-effort client IP, in order: first hop of `x-forwarded-for`,
    `x-real-ip`, `remote-addr`, the socket peer (`fallback`), `"unknown"`.

    These headers are caller-controlled unless a trusted proxy overwrites
    them; use the result for logging and rate-limit keys, never for authz.
    """
    forwarded_for = headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    remote_addr = headers.get("remote-addr")
    if remote_addr:
        return remote_addr.strip()

    return fallback or "unknown"


def generate_secure_token(length: int = 32) -> str:
    if length < 0:
        raise ValueError("length must be >= 0")
    return "".join(secrets.choice(TOKEN_CHARSET) for _ in range(length))


def sanitize_string(value: object) -> str:
    if not value or not isinstance(value, str):
        return ""
    value = _ANGLE_BRACKETS_RE.sub("", value)
    value = _JS_PROTOCOL_RE.sub("", value)
    value = _EVENT_HANDLER_RE.sub("", value)
    return value.strip()


def sanitize_fields(data: dict[str, Any], fields: Sequence[str]) -> dict[str, Any]:
    """Return a copy of `data` with the listed string fields passed through `sanitize_string`."""
    cleaned = dict(data)
    for name in fields:
        if isinstance(cleaned.get(name), str):
            cleaned[name] = sanitize_string(cleaned[name])
    return cleaned


def _is_private_ip_literal(hostname: str) -> bool:
    try:
        ip = ipaddress.ip_address(hostname)
    except ValueError:
        return False
    return (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_reserved
        or ip.is_unspecified
        or ip.is_multicast
    )


def validate_url(url: str, allowed_domains: Sequence[str] | None = None) -> bool:
    """
    Validate an outbound URL against SSRF targets.

    Rejects unparsable URLs, URLs without scheme or host, the file/ftp/gopher/dict
    schemes, private/loopback/link-local hosts, and (when `allowed_domains` is
    non-empty) hosts that are neither an allowed domain nor a subdomain of one.
    """
    try:
        parts = urlsplit(url)
        hostname = parts.hostname
    except (TypeError, ValueError, AttributeError):
        return False

    if not parts.scheme or not hostname:
        return False
    if parts.scheme.lower() in _BLOCKED_SCHEMES:
        return False
    if _PRIVATE_HOST_RE.match(hostname) or _is_private_ip_literal(hostname):
        return False

    if allowed_domains:
        return any(
            hostname == domain.lower() or hostname.endswith("." + domain.lower())
            for domain in allowed_domains
        )
    return True


def hash_password(password: str) -> str:
    # Unsalted SHA-256 hex digest; stored hashes depend on this exact format.
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def verify_password(password: str, password_hash: str) -> bool:
    return hmac.compare_digest(
        hash_password(password).encode("utf-8"), password_hash.encode("utf-8")
    )


def generate_csrf_token() -> str:
    return generate_secure_token(CSRF_TOKEN_LENGTH)


def validate_csrf_token(token: str | None, expected_token: str | None) -> bool:
    if not token or not expected_token:
        return False
    return hmac.compare_digest(token.encode("utf-8"), expected_token.encode("utf-8"))


def compute_webhook_signature(secret: str, body: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def validate_webhook_signature(body: bytes, signature: str | None, secret: str) -> bool:
    if not signature:
        return False
    expected = compute_webhook_signature(secret, body)
    return hmac.compare_digest(expected.encode("utf-8"), signature.strip().lower().encode("utf-8"))


def get_rate_limit_key(identifier: str, action: str) -> str:
    return f"ratelimit:{action}:{identifier}"


@dataclass(frozen=True, slots=True)
class FileValidationResult:
    valid: bool
    error: str | None = None


def validate_file_upload(
    filename: str,
    mimetype: str,
    size: int,
    *,
    max_size: int = DEFAULT_MAX_UPLOAD_BYTES,
    allowed_types: Sequence[str] = DEFAULT_ALLOWED_MIME_TYPES,
    allowed_extensions: Sequence[str] = DEFAULT_ALLOWED_EXTENSIONS,
) -> FileValidationResult:
    # Check order is part of the contract: the first failing check names the error.
    if size > max_size:
        return FileValidationResult(False, "File size exceeds limit")

    if mimetype not in allowed_types:
        return FileValidationResult(False, "File type not allowed")

    lowered = filename.lower()
    dot = lowered.rfind(".")
    extension = lowered[dot:] if dot >= 0 else lowered
    if extension not in allowed_extensions:
        return FileValidationResult(False, "File extension not allowed")

    if any(p.search(filename) for p in _DANGEROUS_FILENAME_PATTERNS):
        return FileValidationResult(False, "Invalid filename")

    return FileValidationResult(True)


@dataclass(frozen=True, slots=True)
class SecurityProfile:
    rate_limit_enabled: bool
    strict_csp: bool
    audit_logging: bool


SECURITY_PROFILES: dict[str, SecurityProfile] = {
    "development": SecurityProfile(rate_limit_enabled=False, strict_csp=False, audit_logging=False),
    "production": SecurityProfile(rate_limit_enabled=True, strict_csp=True, audit_logging=True),
}


def get_security_config(env: str) -> SecurityProfile:
    # Unknown environments (including "test") fall back to the development profile.
    return SECURITY_PROFILES.get(env, SECURITY_PROFILES["development"])


# --- Module Notes -----------------------------------------------------------
# `hash_password` is a plain digest; swapping to a salted KDF changes the stored
# hash format, so it needs a migration path for existing users first.
