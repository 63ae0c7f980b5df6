"""
Identity domain constants, the Profile entity and the explicit session context.

Why:
- Centralize allowed roles to avoid drift between services and tooling.
- Operations receive the caller as a `SessionContext` argument instead of
  reading a process-wide "current user".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

# Keep roles minimal and explicit. Immutable to prevent accidental mutation.
ALLOWED_ROLES = frozenset({"student", "admin"})
DEFAULT_ROLE = "student"


@dataclass(frozen=True)
class Profile:
    id: str
    email: str
    full_name: Optional[str]
    avatar_url: Optional[str]
    role: str
    created_at: str


@dataclass(frozen=True)
class SessionContext:
    user_id: Optional[str]
    role: str = DEFAULT_ROLE

    @classmethod
    def anonymous(cls) -> "SessionContext":
        return cls(user_id=None)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id)

    @property
    def is_admin(self) -> bool:
        return self.is_authenticated and self.role == "admin"


def normalize_role(value: Optional[str]) -> str:
    role = (value or "").strip().lower()
    return role if role in ALLOWED_ROLES else DEFAULT_ROLE


__all__ = ["ALLOWED_ROLES", "DEFAULT_ROLE", "Profile", "SessionContext", "normalize_role"]
