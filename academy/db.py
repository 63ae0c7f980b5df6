"""
Shared psycopg helpers for the Postgres-backed repositories.

Design:
- Each repository call opens a short-lived connection (no pool).
- Timestamps are rendered as ISO-8601 UTC strings inside SQL so results are
  stable across drivers.
- Supabase row level security reads the caller from `request.jwt.claims`;
  repositories set it transaction-locally before touching user data.
"""
from __future__ import annotations

import json

try:
    from psycopg.errors import UniqueViolation  # type: ignore
except Exception:  # pragma: no cover - optional in some dev envs
    UniqueViolation = None  # type: ignore


UNIQUE_VIOLATION_SQLSTATE = "23505"
FOREIGN_KEY_VIOLATION_SQLSTATE = "23503"
# Malformed uuid literal, e.g. `where id = 'nope'`.
INVALID_TEXT_REPRESENTATION_SQLSTATE = "22P02"


def iso_ts(column: str) -> str:
    """SQL fragment rendering a timestamptz column as ISO-8601 UTC text (null-safe)."""
    return (
        f"case when {column} is null then null "
        f"else to_char({column} at time zone 'utc', 'YYYY-MM-DD\"T\"HH24:MI:SS\"+00:00\"') end"
    )


def is_unique_violation(exc: BaseException) -> bool:
    sqlstate = getattr(exc, "sqlstate", None) or getattr(exc, "pgcode", None)
    if UniqueViolation is not None and isinstance(exc, UniqueViolation):
        return True
    return sqlstate == UNIQUE_VIOLATION_SQLSTATE


def is_foreign_key_violation(exc: BaseException) -> bool:
    sqlstate = getattr(exc, "sqlstate", None) or getattr(exc, "pgcode", None)
    return sqlstate == FOREIGN_KEY_VIOLATION_SQLSTATE


def is_invalid_text_representation(exc: BaseException) -> bool:
    sqlstate = getattr(exc, "sqlstate", None) or getattr(exc, "pgcode", None)
    return sqlstate == INVALID_TEXT_REPRESENTATION_SQLSTATE


def id_tail(value) -> str:
    """Last six characters of an id for log lines; empty for None."""
    return (value or "")[-6:]


def set_request_claims(cur, sub: str) -> None:
    """Expose `sub` to RLS policies (`auth.uid()`) for the current transaction."""
    claims = json.dumps({"sub": sub, "role": "authenticated"})
    cur.execute("select set_config('request.jwt.claims', %s, true)", (claims,))


def as_float(value) -> float:
    return float(value) if value is not None else 0.0


def as_int(value) -> int:
    return int(value) if value is not None else 0


__all__ = [
    "FOREIGN_KEY_VIOLATION_SQLSTATE",
    "INVALID_TEXT_REPRESENTATION_SQLSTATE",
    "UNIQUE_VIOLATION_SQLSTATE",
    "as_float",
    "as_int",
    "id_tail",
    "is_foreign_key_violation",
    "is_invalid_text_representation",
    "is_unique_violation",
    "iso_ts",
    "set_request_claims",
]
