"""
Pytest configuration for academy tests.

Why: Tests must not inherit DSNs, locale or environment switches from the
developer shell; each test starts from a clean configuration and opts in to
what it needs via `monkeypatch`.
"""
import sys
from pathlib import Path

import pytest


# Ensure `academy` (and `academy.tests.utils`) import from this checkout.
REPO_ROOT = Path(__file__).resolve().parents[2]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


_ENV_TOGGLES = (
    "ACADEMY_ENV",
    "ACADEMY_LOCALE",
    "ACADEMY_ADMIN_USER_ID",
    "ACADEMY_ENABLE_DOTENV",
    "CATALOG_DATABASE_URL",
    "SUPABASE_DB_URL",
    "DB_CONNECT_TIMEOUT",
)


@pytest.fixture(autouse=True)
def _clean_academy_env(monkeypatch):
    for name in _ENV_TOGGLES:
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture(autouse=True)
def _reset_catalog_cache():
    """Drop cached YAML catalogs so tests using temporary files stay isolated."""
    from academy.pricing.instructions import load_catalog

    load_catalog.cache_clear()
    yield
    load_catalog.cache_clear()
