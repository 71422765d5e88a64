"""
vibe_affiliate.security

Request-security package.

Responsibilities:
- Stateless validation/sanitization helpers and token/hash utilities.
- Security audit events.
- Security headers / CORS middleware.
"""

# Package marker.
