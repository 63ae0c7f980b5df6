"""
Configuration parsing and startup guards for the academy data layer.

Intent:
    Provide a single place to read the environment variables that select the
    database DSN, UI locale and driver timeouts, so repositories and tools do
    not each grow their own precedence rules.

Behavior:
    - `load_config()` returns a frozen `AcademyConfig`.
    - `resolve_dsn()` applies the DSN precedence and only falls back to the
      local Supabase DSN outside production.
    - `ensure_secure_config_on_startup()` aborts on obviously insecure
      production settings.
"""
from __future__ import annotations

from dataclasses import dataclass
import os
from urllib.parse import urlparse


SUPPORTED_LOCALES = ("ar", "en")
DEFAULT_LOCALE = "ar"


@dataclass(frozen=True)
class AcademyConfig:
    env: str  # "dev" | "test" | "prod" | "staging"
    dsn: str
    locale: str
    connect_timeout_seconds: int


def _env_name() -> str:
    return (os.getenv("ACADEMY_ENV") or "dev").strip().lower()


def is_prod_like(env: str | None = None) -> bool:
    value = (env if env is not None else _env_name()).lower()
    return value in {"prod", "production", "stage", "staging"}


def _default_local_dsn() -> str:
    host = os.getenv("TEST_DB_HOST", "127.0.0.1")
    port = os.getenv("TEST_DB_PORT", "54322")
    return f"postgresql://postgres:postgres@{host}:{port}/postgres"


def resolve_dsn() -> str:
    """Resolve the Postgres DSN.

    Order of precedence (first non-empty wins):
      1) CATALOG_DATABASE_URL (context-specific override)
      2) DATABASE_URL
      3) SUPABASE_DB_URL
      4) Local Supabase DSN on 127.0.0.1:54322 (dev/test only)
    """
    candidates = [
        os.getenv("CATALOG_DATABASE_URL"),
        os.getenv("DATABASE_URL"),
        os.getenv("SUPABASE_DB_URL"),
    ]
    if not is_prod_like():
        candidates.append(_default_local_dsn())
    for candidate in candidates:
        if candidate:
            return candidate
    raise RuntimeError("Database DSN unavailable for academy repositories")


def _int_env(name: str, default: int, *, low: int, high: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got: {raw!r}")
    if value < low or value > high:
        raise ValueError(f"{name} out of range ({low}..{high}), got: {value}")
    return value


def _locale() -> str:
    locale = (os.getenv("ACADEMY_LOCALE") or DEFAULT_LOCALE).strip().lower()
    if locale not in SUPPORTED_LOCALES:
        raise ValueError(f"ACADEMY_LOCALE must be one of {', '.join(SUPPORTED_LOCALES)}")
    return locale


def load_config() -> AcademyConfig:
    """Parse and validate academy configuration from environment variables."""
    return AcademyConfig(
        env=_env_name(),
        dsn=resolve_dsn(),
        locale=_locale(),
        connect_timeout_seconds=_int_env("DB_CONNECT_TIMEOUT", 5, low=1, high=60),
    )


def ensure_secure_config_on_startup() -> None:
    """Fail fast on insecure production configuration.

    Checks (prod/staging only):
    - An explicit DSN must be configured; the local fallback is dev-only.
    - The DSN must not disable TLS.
    - The DSN must not authenticate as the `postgres` superuser, which would
      bypass row level security.
    """
    if not is_prod_like():
        return

    dsn = os.getenv("CATALOG_DATABASE_URL") or os.getenv("DATABASE_URL") or os.getenv("SUPABASE_DB_URL") or ""
    if not dsn:
        raise SystemExit("Refusing to start: no database DSN configured in production.")
    if "sslmode=disable" in dsn:
        raise SystemExit(
            "Refusing to start: database DSN contains sslmode=disable in production. Use sslmode=require."
        )
    try:
        user = (urlparse(dsn).username or "").lower()
    except ValueError:
        raise SystemExit("Refusing to start: database DSN is not a valid URL.")
    if user == "postgres":
        raise SystemExit(
            "Refusing to start: database DSN authenticates as 'postgres' in production; use a login role subject to RLS."
        )


__all__ = [
    "AcademyConfig",
    "DEFAULT_LOCALE",
    "SUPPORTED_LOCALES",
    "ensure_secure_config_on_startup",
    "is_prod_like",
    "load_config",
    "resolve_dsn",
]
