"""Profile use cases and session resolution.

Why:
    The identity provider (Supabase Auth) hands us an authenticated user id.
    Everything else the services need (role, display info) lives in the
    profile row; `resolve_session` turns the pair into an explicit
    `SessionContext` that callers pass into catalog and admin operations.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol
from urllib.parse import urlparse

from ..config import DEFAULT_LOCALE
from ..db import id_tail
from ..outcomes import OperationResult, Status, fail, succeed
from .domain import DEFAULT_ROLE, Profile, SessionContext


logger = logging.getLogger("academy.identity_access")


class ProfileDirectory(Protocol):
    def get_profile(self, user_id: str) -> Optional[Profile]:
        ...

    def update_profile(self, user_id: str, **fields) -> Optional[Profile]:
        ...


_UNSET = object()


def resolve_session(directory: ProfileDirectory, user_id: Optional[str]) -> SessionContext:
    """Build the session context for `user_id`.

    Behavior:
        - No user id: anonymous context.
        - Missing profile row (e.g. trigger not yet run): student role.
        - Lookup failure: logged, treated as student; never grants admin.
    """
    if not user_id:
        return SessionContext.anonymous()
    try:
        profile = directory.get_profile(user_id)
    except Exception as exc:
        logger.warning("profile lookup failed uid_tail=%s err=%s", id_tail(user_id), exc.__class__.__name__)
        profile = None
    role = profile.role if profile is not None else DEFAULT_ROLE
    return SessionContext(user_id=user_id, role=role)


def _normalize_full_name(value: object) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str) or len(value.strip()) > 120:
        raise ValueError("invalid_full_name")
    return value.strip() or None


def _normalize_avatar_url(value: object) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError("invalid_avatar_url")
    trimmed = value.strip()
    if not trimmed:
        return None
    if urlparse(trimmed).scheme not in {"http", "https"}:
        raise ValueError("invalid_avatar_url")
    return trimmed


class ProfileService:
    def __init__(self, directory: ProfileDirectory, *, locale: str = DEFAULT_LOCALE) -> None:
        self._directory = directory
        self._locale = locale

    def current_profile(self, ctx: SessionContext) -> OperationResult[Profile]:
        if not ctx.is_authenticated:
            return fail(Status.UNAUTHENTICATED, "login_required", locale=self._locale)
        try:
            profile = self._directory.get_profile(ctx.user_id)
        except Exception as exc:
            logger.warning("get_profile failed err=%s", exc.__class__.__name__)
            return fail(Status.FAILURE, "profile_load_failed", locale=self._locale)
        if profile is None:
            return fail(Status.NOT_FOUND, "profile_not_found", locale=self._locale)
        return succeed(profile, locale=self._locale)

    def update_profile(
        self,
        ctx: SessionContext,
        *,
        full_name: object = _UNSET,
        avatar_url: object = _UNSET,
    ) -> OperationResult[Profile]:
        """Update the caller's display name and/or avatar."""
        if not ctx.is_authenticated:
            return fail(Status.UNAUTHENTICATED, "login_required", locale=self._locale)
        fields: dict[str, Optional[str]] = {}
        try:
            if full_name is not _UNSET:
                fields["full_name"] = _normalize_full_name(full_name)
            if avatar_url is not _UNSET:
                fields["avatar_url"] = _normalize_avatar_url(avatar_url)
        except ValueError as exc:
            return fail(Status.INVALID, str(exc), locale=self._locale)
        try:
            profile = self._directory.update_profile(ctx.user_id, **fields)
        except Exception as exc:
            logger.warning("update_profile failed err=%s", exc.__class__.__name__)
            return fail(Status.FAILURE, "profile_update_failed", locale=self._locale)
        if profile is None:
            return fail(Status.NOT_FOUND, "profile_not_found", locale=self._locale)
        return succeed(profile, "profile_updated", locale=self._locale)


__all__ = ["ProfileDirectory", "ProfileService", "resolve_session"]
