"""
vibe_affiliate.auth

Authentication/authorization package.

Responsibilities:
- JWT helpers and validation.
- FastAPI auth dependencies (Principal + role checks + CSRF).
"""

# Package marker.
