"""
Database-backed profile directory (Postgres/Supabase `public.profiles`).

Why: Supabase Auth owns credentials and sessions; the application only needs
the profile row (display name, avatar, role) of the authenticated user id.

Security:
- Use a login role subject to RLS. Reads and writes set `request.jwt.claims`
  so the `profiles` policies can restrict updates to the owner.
"""
from __future__ import annotations

from typing import Optional, Tuple

try:
    import psycopg
    HAVE_PSYCOPG = True
except Exception:  # pragma: no cover - optional dependency in dev
    psycopg = None  # type: ignore
    HAVE_PSYCOPG = False

from ..config import resolve_dsn
from ..db import iso_ts, set_request_claims
from .domain import Profile, normalize_role


PROFILE_COLUMNS_SQL = f"id::text, email, full_name, avatar_url, role, {iso_ts('created_at')}"


def profile_from_row(row: Tuple) -> Profile:
    return Profile(
        id=row[0],
        email=row[1],
        full_name=row[2],
        avatar_url=row[3],
        role=normalize_role(row[4]),
        created_at=row[5],
    )


class DBProfileDirectory:
    """Postgres-backed profile lookups.

    Parameters
    ----------
    dsn:
        Psycopg3 connection string. Defaults to `academy.config.resolve_dsn()`.
    connect_timeout:
        Seconds passed to psycopg for each connection.
    """

    def __init__(self, dsn: str | None = None, *, connect_timeout: int = 5) -> None:
        if not HAVE_PSYCOPG:
            raise RuntimeError("psycopg3 is required for DBProfileDirectory")
        self._dsn = dsn or resolve_dsn()
        self._connect_timeout = int(connect_timeout)

    def get_profile(self, user_id: str) -> Optional[Profile]:
        with psycopg.connect(self._dsn, connect_timeout=self._connect_timeout) as conn:
            with conn.cursor() as cur:
                set_request_claims(cur, user_id)
                cur.execute(f"select {PROFILE_COLUMNS_SQL} from public.profiles where id = %s", (user_id,))
                row = cur.fetchone()
        return profile_from_row(row) if row else None

    def update_profile(self, user_id: str, **fields) -> Optional[Profile]:
        """Update `full_name` and/or `avatar_url`; returns None when the profile is missing."""
        allowed = ("full_name", "avatar_url")
        columns = [name for name in allowed if name in fields]
        if not columns:
            return self.get_profile(user_id)
        assignments = ", ".join(f"{name} = %s" for name in columns)
        params = [fields[name] for name in columns] + [user_id]
        with psycopg.connect(self._dsn, connect_timeout=self._connect_timeout) as conn:
            with conn.cursor() as cur:
                set_request_claims(cur, user_id)
                cur.execute(
                    f"""
                    update public.profiles
                       set {assignments}, updated_at = now()
                     where id = %s
                    returning {PROFILE_COLUMNS_SQL}
                    """,
                    params,
                )
                row = cur.fetchone()
                conn.commit()
        return profile_from_row(row) if row else None


__all__ = ["DBProfileDirectory", "PROFILE_COLUMNS_SQL", "profile_from_row"]
