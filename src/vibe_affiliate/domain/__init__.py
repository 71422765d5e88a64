"""
vibe_affiliate.domain

Typed domain layer.

Responsibilities:
- Domain models (users, campaigns, conversions, payments, links, metrics).
- Form/filter input models and the API response envelope.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Models are plain pydantic types; nothing here touches I/O.
