"""Read-only lookup of marketplace users (buyers and vendors)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class UserProfile:
    id: str
    full_name: str
    email: str
    company_name: str | None = None

    @property
    def display_name(self) -> str:
        return self.company_name or self.full_name


class UserDirectory(ABC):

    @abstractmethod
    def get_by_id(self, user_id: str) -> UserProfile | None:
        """Return a user profile, or None if not found."""

    def get_vendor_display_name(self, vendor_id: str) -> str | None:
        """Company name when set, otherwise the vendor's full name."""
        profile = self.get_by_id(vendor_id)
        return profile.display_name if profile else None
