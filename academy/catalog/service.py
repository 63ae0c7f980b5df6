"""Course/enrollment aggregator (framework-independent use cases).

Why:
    The view layer asks for enriched courses, lessons and the caller's
    enrollments and needs a single outcome per action to show a toast. This
    service keeps that mapping (adapter error -> outcome) in one place and
    holds the per-user enrolled-course cache that `is_enrolled` scans.

Caching:
    The enrolled-course set is replaced wholesale after each enrollment and
    patched optimistically after a successful progress write. Divergence from
    server state is corrected by the next `refresh_enrolled_courses`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
import logging
from typing import Dict, List, Optional

from ..config import DEFAULT_LOCALE
from ..db import id_tail
from ..identity_access.domain import SessionContext
from ..outcomes import OperationResult, Status, fail, succeed
from .models import Course, EnrolledCourse, Enrollment, Lesson
from .ports import CatalogRepoProtocol, DuplicateEnrollmentError


logger = logging.getLogger("academy.catalog")


def _normalize_progress(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError("invalid_progress")
    if value < 0 or value > 100:
        raise ValueError("invalid_progress")
    return value


@dataclass(frozen=True)
class LearnerStats:
    total_courses: int
    completed_courses: int
    total_hours: int
    average_progress: int
    in_progress: List[EnrolledCourse]


class CourseAggregator:
    def __init__(self, repo: CatalogRepoProtocol, *, locale: str = DEFAULT_LOCALE) -> None:
        self._repo = repo
        self._locale = locale
        self._enrolled: Dict[str, List[EnrolledCourse]] = {}

    # --- Catalog -----------------------------------------------------------------
    def list_published_courses(self) -> OperationResult[List[Course]]:
        """Published courses, newest first, with lesson/enrollment counts and average rating.

        All-or-nothing: any adapter failure yields a single `failure` outcome.
        """
        try:
            courses = self._repo.list_published_courses()
        except Exception as exc:
            logger.warning("list_published_courses failed err=%s", exc.__class__.__name__)
            return fail(Status.FAILURE, "courses_load_failed", locale=self._locale)
        return succeed(list(courses), locale=self._locale)

    def get_course_by_id(self, course_id: str) -> OperationResult[Course]:
        try:
            course = self._repo.get_course(course_id)
        except Exception as exc:
            logger.warning("get_course failed cid=%s err=%s", id_tail(course_id), exc.__class__.__name__)
            return fail(Status.FAILURE, "course_load_failed", locale=self._locale)
        if course is None:
            return fail(Status.NOT_FOUND, "course_not_found", locale=self._locale)
        return succeed(course, locale=self._locale)

    def list_lessons_for_course(self, course_id: str) -> OperationResult[List[Lesson]]:
        """Lessons ordered by order_index ascending; empty list when none."""
        try:
            lessons = self._repo.list_lessons(course_id)
        except Exception as exc:
            logger.warning("list_lessons failed cid=%s err=%s", id_tail(course_id), exc.__class__.__name__)
            return fail(Status.FAILURE, "lessons_load_failed", locale=self._locale, value=[])
        return succeed(sorted(lessons, key=lambda l: (l.order_index, l.id)), locale=self._locale)

    # --- Enrollments -------------------------------------------------------------
    def enrolled_courses(self, ctx: SessionContext) -> List[EnrolledCourse]:
        if not ctx.is_authenticated:
            return []
        return list(self._enrolled.get(ctx.user_id, []))

    def refresh_enrolled_courses(self, ctx: SessionContext) -> OperationResult[List[EnrolledCourse]]:
        if not ctx.is_authenticated:
            return succeed([], locale=self._locale)
        try:
            items = self._repo.list_enrolled_courses(ctx.user_id)
        except Exception as exc:
            logger.warning("list_enrolled_courses failed uid=%s err=%s", id_tail(ctx.user_id), exc.__class__.__name__)
            return fail(Status.FAILURE, "enrollments_load_failed", locale=self._locale)
        self._enrolled[ctx.user_id] = list(items)
        return succeed(list(items), locale=self._locale)

    def is_enrolled(self, ctx: SessionContext, course_id: str) -> bool:
        return any(item.course_id == course_id for item in self.enrolled_courses(ctx))

    def enroll(self, ctx: SessionContext, course_id: str) -> OperationResult[Enrollment]:
        """Enroll the caller with progress 0.

        Behavior:
            - Anonymous caller: `unauthenticated`, no request issued.
            - Duplicate (user, course): `conflict` / "already_enrolled".
            - Success: the enrolled-course cache is reloaded wholesale.
        """
        if not ctx.is_authenticated:
            return fail(Status.UNAUTHENTICATED, "login_required", locale=self._locale)
        try:
            enrollment = self._repo.create_enrollment(user_id=ctx.user_id, course_id=course_id)
        except DuplicateEnrollmentError:
            logger.info("duplicate enrollment uid=%s cid=%s", id_tail(ctx.user_id), id_tail(course_id))
            return fail(Status.CONFLICT, "already_enrolled", locale=self._locale)
        except LookupError:
            return fail(Status.NOT_FOUND, "course_not_found", locale=self._locale)
        except Exception as exc:
            logger.warning("enroll failed cid=%s err=%s", id_tail(course_id), exc.__class__.__name__)
            return fail(Status.FAILURE, "enroll_failed", locale=self._locale)
        self.refresh_enrolled_courses(ctx)
        return succeed(enrollment, "enrolled", locale=self._locale)

    def update_progress(self, ctx: SessionContext, course_id: str, progress: object) -> OperationResult[Enrollment]:
        """Persist progress; completion timestamp is set at 100 and cleared below.

        The cached entry is patched only after a successful write. Failures are
        surfaced without retry or rollback of the cache.
        """
        if not ctx.is_authenticated:
            return fail(Status.UNAUTHENTICATED, "login_required", locale=self._locale)
        try:
            value = _normalize_progress(progress)
        except ValueError as exc:
            return fail(Status.INVALID, str(exc), locale=self._locale)
        try:
            enrollment = self._repo.update_progress(user_id=ctx.user_id, course_id=course_id, progress=value)
        except Exception as exc:
            logger.warning("update_progress failed cid=%s err=%s", id_tail(course_id), exc.__class__.__name__)
            return fail(Status.FAILURE, "progress_update_failed", locale=self._locale)
        if enrollment is None:
            return fail(Status.NOT_FOUND, "enrollment_not_found", locale=self._locale)
        cached = self._enrolled.get(ctx.user_id)
        if cached is not None:
            self._enrolled[ctx.user_id] = [
                replace(item, progress=enrollment.progress, completed_at=enrollment.completed_at)
                if item.course_id == course_id
                else item
                for item in cached
            ]
        return succeed(enrollment, locale=self._locale)

    # --- Derived views -----------------------------------------------------------
    def can_view_lesson(self, ctx: SessionContext, lesson: Lesson) -> bool:
        return lesson.is_free or self.is_enrolled(ctx, lesson.course_id)

    def learner_stats(self, ctx: SessionContext) -> LearnerStats:
        items = self.enrolled_courses(ctx)
        total = len(items)
        # Half-up rounding; progress values are never negative.
        average = int(sum(i.progress for i in items) / total + 0.5) if total else 0
        return LearnerStats(
            total_courses=total,
            completed_courses=sum(1 for i in items if i.is_completed),
            total_hours=sum(i.course.duration_hours for i in items),
            average_progress=average,
            in_progress=[i for i in items if 0 < i.progress < 100],
        )


__all__ = ["CourseAggregator", "LearnerStats"]
