"""Admin back-office use cases: dashboard, course and lesson management.

Every mutating call requires an admin `SessionContext`; otherwise it returns
`forbidden` ("admin_required") without touching the repository. The acting
admin becomes the course's `instructor_id` on create and update.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Dict, List, Optional, Protocol, Tuple

from ..catalog.models import LEVELS, Course, Lesson
from ..catalog.ports import DuplicateLessonOrderError
from ..config import DEFAULT_LOCALE
from ..db import id_tail
from ..identity_access.domain import Profile, SessionContext
from ..outcomes import OperationResult, Status, fail, succeed


logger = logging.getLogger("academy.admin")

_TITLE_MAX_LENGTH = 200
_DESCRIPTION_MAX_LENGTH = 5000
_CATEGORY_MAX_LENGTH = 100
_UNSET = object()


class AdminRepoProtocol(Protocol):
    def list_all_courses(self) -> List[Course]:
        ...

    def list_profiles(self) -> List[Profile]:
        ...

    def enrollment_totals(self) -> Tuple[int, float]:
        ...

    def create_course(self, *, instructor_id: str, fields: Dict[str, Any]) -> Course:
        ...

    def update_course(self, course_id: str, *, instructor_id: str, fields: Dict[str, Any]) -> Optional[Course]:
        ...

    def toggle_published(self, course_id: str) -> Optional[Course]:
        ...

    def delete_course(self, course_id: str) -> bool:
        ...

    def create_lesson(self, course_id: str, *, fields: Dict[str, Any]) -> Lesson:
        ...

    def update_lesson(self, lesson_id: str, *, fields: Dict[str, Any]) -> Optional[Lesson]:
        ...

    def delete_lesson(self, lesson_id: str) -> bool:
        ...


@dataclass(frozen=True)
class DashboardSnapshot:
    courses: List[Course]
    users: List[Profile]
    total_users: int
    total_courses: int
    total_enrollments: int
    total_revenue: float


# --- Normalizers ----------------------------------------------------------------
def _normalize_title(value: object) -> str:
    if not isinstance(value, str):
        raise ValueError("invalid_title")
    trimmed = value.strip()
    if not trimmed or len(trimmed) > _TITLE_MAX_LENGTH:
        raise ValueError("invalid_title")
    return trimmed


def _normalize_description(value: object) -> str:
    if value is None:
        return ""
    if not isinstance(value, str) or len(value) > _DESCRIPTION_MAX_LENGTH:
        raise ValueError("invalid_description")
    return value.strip()


def _normalize_price(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("invalid_price")
    if value < 0:
        raise ValueError("invalid_price")
    return float(value)


def _normalize_currency(value: object) -> str:
    if not isinstance(value, str) or len(value.strip()) != 3 or not value.strip().isalpha():
        raise ValueError("invalid_currency")
    return value.strip().upper()


def _normalize_category(value: object) -> str:
    if value is None:
        return ""
    if not isinstance(value, str) or len(value) > _CATEGORY_MAX_LENGTH:
        raise ValueError("invalid_category")
    return value.strip()


def _normalize_level(value: object) -> str:
    if value not in LEVELS:
        raise ValueError("invalid_level")
    return str(value)


def _normalize_non_negative_int(value: object, code: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(code)
    return value


def _normalize_flag(value: object, code: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(code)
    return value


def _normalize_url(value: object, code: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(code)
    trimmed = value.strip()
    if not trimmed:
        return None
    if not trimmed.startswith(("http://", "https://")):
        raise ValueError(code)
    return trimmed


def _normalize_optional_text(value: object, code: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(code)
    return value.strip() or None


_COURSE_NORMALIZERS = {
    "title": _normalize_title,
    "description": _normalize_description,
    "price": _normalize_price,
    "currency": _normalize_currency,
    "category": _normalize_category,
    "level": _normalize_level,
    "duration_hours": lambda v: _normalize_non_negative_int(v, "invalid_duration_hours"),
    "is_published": lambda v: _normalize_flag(v, "invalid_is_published"),
    "thumbnail_url": lambda v: _normalize_url(v, "invalid_thumbnail_url"),
}

_LESSON_NORMALIZERS = {
    "title": _normalize_title,
    "description": lambda v: _normalize_optional_text(v, "invalid_description"),
    "video_url": lambda v: _normalize_url(v, "invalid_video_url"),
    "content": lambda v: _normalize_optional_text(v, "invalid_content"),
    "order_index": lambda v: _normalize_non_negative_int(v, "invalid_order_index"),
    "duration_minutes": lambda v: _normalize_non_negative_int(v, "invalid_duration_minutes"),
    "is_free": lambda v: _normalize_flag(v, "invalid_is_free"),
}


def _normalize_fields(raw: Dict[str, Any], normalizers: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for name, value in raw.items():
        if value is _UNSET:
            continue
        normalize = normalizers.get(name)
        if normalize is None:
            raise ValueError("invalid_field")
        out[name] = normalize(value)
    return out


class BackOfficeService:
    def __init__(self, repo: AdminRepoProtocol, *, locale: str = DEFAULT_LOCALE) -> None:
        self._repo = repo
        self._locale = locale

    def _forbidden(self, ctx: SessionContext) -> Optional[OperationResult]:
        if not ctx.is_authenticated:
            return fail(Status.UNAUTHENTICATED, "login_required", locale=self._locale)
        if not ctx.is_admin:
            return fail(Status.FORBIDDEN, "admin_required", locale=self._locale)
        return None

    # --- Dashboard ---------------------------------------------------------------
    def dashboard(self, ctx: SessionContext) -> OperationResult[DashboardSnapshot]:
        """All courses (published or not), all profiles and headline totals.

        Revenue is the sum of the price of each enrolled course.
        """
        denied = self._forbidden(ctx)
        if denied is not None:
            return denied
        try:
            courses = self._repo.list_all_courses()
            users = self._repo.list_profiles()
            enrollments, revenue = self._repo.enrollment_totals()
        except Exception as exc:
            logger.warning("dashboard load failed err=%s", exc.__class__.__name__)
            return fail(Status.FAILURE, "dashboard_load_failed", locale=self._locale)
        snapshot = DashboardSnapshot(
            courses=list(courses),
            users=list(users),
            total_users=len(users),
            total_courses=len(courses),
            total_enrollments=enrollments,
            total_revenue=revenue,
        )
        return succeed(snapshot, locale=self._locale)

    # --- Courses -----------------------------------------------------------------
    def create_course(
        self,
        ctx: SessionContext,
        *,
        title: object,
        description: object = "",
        price: object = 0,
        currency: object = "USD",
        category: object = "",
        level: object = "beginner",
        duration_hours: object = 0,
        is_published: object = False,
        thumbnail_url: object = None,
    ) -> OperationResult[Course]:
        denied = self._forbidden(ctx)
        if denied is not None:
            return denied
        raw = {
            "title": title,
            "description": description,
            "price": price,
            "currency": currency,
            "category": category,
            "level": level,
            "duration_hours": duration_hours,
            "is_published": is_published,
            "thumbnail_url": thumbnail_url,
        }
        try:
            fields = _normalize_fields(raw, _COURSE_NORMALIZERS)
        except ValueError as exc:
            return fail(Status.INVALID, str(exc), locale=self._locale)
        try:
            course = self._repo.create_course(instructor_id=ctx.user_id, fields=fields)
        except Exception as exc:
            logger.warning("create_course failed uid=%s err=%s", id_tail(ctx.user_id), exc.__class__.__name__)
            return fail(Status.FAILURE, "course_save_failed", locale=self._locale)
        logger.info("course created cid=%s by=%s", id_tail(course.id), id_tail(ctx.user_id))
        return succeed(course, "course_created", locale=self._locale)

    def update_course(
        self,
        ctx: SessionContext,
        course_id: str,
        *,
        title: object = _UNSET,
        description: object = _UNSET,
        price: object = _UNSET,
        currency: object = _UNSET,
        category: object = _UNSET,
        level: object = _UNSET,
        duration_hours: object = _UNSET,
        is_published: object = _UNSET,
        thumbnail_url: object = _UNSET,
    ) -> OperationResult[Course]:
        """Patch the given fields; omitted fields keep their stored value."""
        denied = self._forbidden(ctx)
        if denied is not None:
            return denied
        raw = {
            "title": title,
            "description": description,
            "price": price,
            "currency": currency,
            "category": category,
            "level": level,
            "duration_hours": duration_hours,
            "is_published": is_published,
            "thumbnail_url": thumbnail_url,
        }
        try:
            fields = _normalize_fields(raw, _COURSE_NORMALIZERS)
        except ValueError as exc:
            return fail(Status.INVALID, str(exc), locale=self._locale)
        try:
            course = self._repo.update_course(course_id, instructor_id=ctx.user_id, fields=fields)
        except Exception as exc:
            logger.warning("update_course failed cid=%s err=%s", id_tail(course_id), exc.__class__.__name__)
            return fail(Status.FAILURE, "course_save_failed", locale=self._locale)
        if course is None:
            return fail(Status.NOT_FOUND, "course_not_found", locale=self._locale)
        return succeed(course, "course_updated", locale=self._locale)

    def toggle_publish(self, ctx: SessionContext, course_id: str) -> OperationResult[Course]:
        denied = self._forbidden(ctx)
        if denied is not None:
            return denied
        try:
            course = self._repo.toggle_published(course_id)
        except Exception as exc:
            logger.warning("toggle_published failed cid=%s err=%s", id_tail(course_id), exc.__class__.__name__)
            return fail(Status.FAILURE, "publish_toggle_failed", locale=self._locale)
        if course is None:
            return fail(Status.NOT_FOUND, "course_not_found", locale=self._locale)
        return succeed(course, "course_published" if course.is_published else "course_unpublished", locale=self._locale)

    def delete_course(self, ctx: SessionContext, course_id: str) -> OperationResult[None]:
        denied = self._forbidden(ctx)
        if denied is not None:
            return denied
        try:
            deleted = self._repo.delete_course(course_id)
        except Exception as exc:
            logger.warning("delete_course failed cid=%s err=%s", id_tail(course_id), exc.__class__.__name__)
            return fail(Status.FAILURE, "course_delete_failed", locale=self._locale)
        if not deleted:
            return fail(Status.NOT_FOUND, "course_not_found", locale=self._locale)
        logger.info("course deleted cid=%s by=%s", id_tail(course_id), id_tail(ctx.user_id))
        return succeed(None, "course_deleted", locale=self._locale)

    # --- Lessons -----------------------------------------------------------------
    def create_lesson(
        self,
        ctx: SessionContext,
        course_id: str,
        *,
        title: object,
        order_index: object,
        description: object = None,
        video_url: object = None,
        content: object = None,
        duration_minutes: object = 0,
        is_free: object = False,
    ) -> OperationResult[Lesson]:
        denied = self._forbidden(ctx)
        if denied is not None:
            return denied
        raw = {
            "title": title,
            "order_index": order_index,
            "description": description,
            "video_url": video_url,
            "content": content,
            "duration_minutes": duration_minutes,
            "is_free": is_free,
        }
        try:
            fields = _normalize_fields(raw, _LESSON_NORMALIZERS)
        except ValueError as exc:
            return fail(Status.INVALID, str(exc), locale=self._locale)
        try:
            lesson = self._repo.create_lesson(course_id, fields=fields)
        except DuplicateLessonOrderError:
            return fail(Status.CONFLICT, "lesson_order_taken", locale=self._locale)
        except LookupError:
            return fail(Status.NOT_FOUND, "course_not_found", locale=self._locale)
        except Exception as exc:
            logger.warning("create_lesson failed cid=%s err=%s", id_tail(course_id), exc.__class__.__name__)
            return fail(Status.FAILURE, "lesson_save_failed", locale=self._locale)
        return succeed(lesson, "lesson_created", locale=self._locale)

    def update_lesson(
        self,
        ctx: SessionContext,
        lesson_id: str,
        *,
        title: object = _UNSET,
        order_index: object = _UNSET,
        description: object = _UNSET,
        video_url: object = _UNSET,
        content: object = _UNSET,
        duration_minutes: object = _UNSET,
        is_free: object = _UNSET,
    ) -> OperationResult[Lesson]:
        denied = self._forbidden(ctx)
        if denied is not None:
            return denied
        raw = {
            "title": title,
            "order_index": order_index,
            "description": description,
            "video_url": video_url,
            "content": content,
            "duration_minutes": duration_minutes,
            "is_free": is_free,
        }
        try:
            fields = _normalize_fields(raw, _LESSON_NORMALIZERS)
        except ValueError as exc:
            return fail(Status.INVALID, str(exc), locale=self._locale)
        try:
            lesson = self._repo.update_lesson(lesson_id, fields=fields)
        except DuplicateLessonOrderError:
            return fail(Status.CONFLICT, "lesson_order_taken", locale=self._locale)
        except Exception as exc:
            logger.warning("update_lesson failed lid=%s err=%s", id_tail(lesson_id), exc.__class__.__name__)
            return fail(Status.FAILURE, "lesson_save_failed", locale=self._locale)
        if lesson is None:
            return fail(Status.NOT_FOUND, "lesson_not_found", locale=self._locale)
        return succeed(lesson, "lesson_updated", locale=self._locale)

    def delete_lesson(self, ctx: SessionContext, lesson_id: str) -> OperationResult[None]:
        denied = self._forbidden(ctx)
        if denied is not None:
            return denied
        try:
            deleted = self._repo.delete_lesson(lesson_id)
        except Exception as exc:
            logger.warning("delete_lesson failed lid=%s err=%s", id_tail(lesson_id), exc.__class__.__name__)
            return fail(Status.FAILURE, "lesson_delete_failed", locale=self._locale)
        if not deleted:
            return fail(Status.NOT_FOUND, "lesson_not_found", locale=self._locale)
        return succeed(None, "lesson_deleted", locale=self._locale)


__all__ = ["AdminRepoProtocol", "BackOfficeService", "DashboardSnapshot"]
