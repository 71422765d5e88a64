"""
vibe_affiliate.auth.models

Auth domain models.

Responsibilities:
- Define the authenticated identity type (`Principal`) injected into endpoints.
"""

from __future__ import annotations

from dataclasses import dataclass

from vibe_affiliate.domain.models import UserRole


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Authenticated caller identity (subject is the user id).
    """

    subject: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin

    def can_manage(self, owner_id: str) -> bool:
        return self.is_admin or self.subject == owner_id
