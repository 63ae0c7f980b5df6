"""
In-memory profile directory for development and tests.

The mapping can be shared with `InMemoryCatalogRepo` so instructor and
reviewer info resolve against the same profiles.
"""
from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, Optional

from .domain import Profile, normalize_role


class InMemoryProfileDirectory:
    def __init__(self, profiles: Optional[Dict[str, Profile]] = None) -> None:
        self._profiles: Dict[str, Profile] = profiles if profiles is not None else {}

    def add(
        self,
        *,
        id: str,
        email: str,
        full_name: Optional[str] = None,
        avatar_url: Optional[str] = None,
        role: str = "student",
    ) -> Profile:
        profile = Profile(
            id=id,
            email=email,
            full_name=full_name,
            avatar_url=avatar_url,
            role=normalize_role(role),
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        self._profiles[id] = profile
        return profile

    def get_profile(self, user_id: str) -> Optional[Profile]:
        return self._profiles.get(user_id)

    def update_profile(self, user_id: str, **fields) -> Optional[Profile]:
        current = self._profiles.get(user_id)
        if current is None:
            return None
        changes = {k: v for k, v in fields.items() if k in ("full_name", "avatar_url")}
        updated = replace(current, **changes)
        self._profiles[user_id] = updated
        return updated


__all__ = ["InMemoryProfileDirectory"]
