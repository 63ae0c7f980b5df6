"""
In-memory repository implementing the catalog and admin ports.

Used for local development without Postgres and by unit tests. Mirrors the
database semantics that services depend on:
- one enrollment per (user_id, course_id), duplicates raise
- one lesson per (course_id, order_index), duplicates raise
- statistics are recomputed from live rows on every read
- deleting a course cascades to its lessons, enrollments and reviews
"""
from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from itertools import count
from typing import Any, Callable, Dict, List, Optional, Tuple
from uuid import uuid4

from ..identity_access.domain import Profile
from .models import Course, EnrolledCourse, Enrollment, InstructorInfo, Lesson, Review, Reviewer, average_rating
from .ports import DuplicateEnrollmentError, DuplicateLessonOrderError


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


class InMemoryCatalogRepo:
    def __init__(
        self,
        *,
        profiles: Optional[Dict[str, Profile]] = None,
        now: Callable[[], str] = _utcnow,
    ) -> None:
        self.profiles: Dict[str, Profile] = profiles if profiles is not None else {}
        self.courses: Dict[str, Course] = {}
        self.lessons: Dict[str, Lesson] = {}
        self.enrollments: Dict[Tuple[str, str], Enrollment] = {}
        self.reviews: Dict[str, Review] = {}
        self._now = now
        # Insertion sequence breaks timestamp ties so "newest first" stays stable.
        self._seq = count()
        self._order: Dict[Any, int] = {}

    # --- Helpers -----------------------------------------------------------------
    def _stamp(self, key: Any) -> None:
        self._order[key] = next(self._seq)

    def _newest_first(self, items: List[Any], key: Callable[[Any], Tuple[str, Any]]) -> List[Any]:
        return sorted(items, key=lambda item: (key(item)[0], self._order.get(key(item)[1], 0)), reverse=True)

    def _instructor(self, user_id: str) -> Optional[InstructorInfo]:
        profile = self.profiles.get(user_id)
        if profile is None:
            return None
        return InstructorInfo(full_name=profile.full_name, avatar_url=profile.avatar_url)

    def _enrich(self, course: Course) -> Course:
        ratings = [r.rating for r in self.reviews.values() if r.course_id == course.id]
        return replace(
            course,
            instructor=self._instructor(course.instructor_id),
            lessons_count=sum(1 for l in self.lessons.values() if l.course_id == course.id),
            enrolled_count=sum(1 for (_, cid) in self.enrollments if cid == course.id),
            average_rating=average_rating(ratings),
        )

    # --- Catalog port ------------------------------------------------------------
    def list_published_courses(self) -> List[Course]:
        published = [c for c in self.courses.values() if c.is_published]
        ordered = self._newest_first(published, key=lambda c: (c.created_at, c.id))
        return [self._enrich(c) for c in ordered]

    def get_course(self, course_id: str) -> Optional[Course]:
        course = self.courses.get(course_id)
        return self._enrich(course) if course is not None else None

    def list_lessons(self, course_id: str) -> List[Lesson]:
        items = [l for l in self.lessons.values() if l.course_id == course_id]
        return sorted(items, key=lambda l: (l.order_index, l.id))

    def list_enrolled_courses(self, user_id: str) -> List[EnrolledCourse]:
        mine = [e for (uid, _), e in self.enrollments.items() if uid == user_id and e.course_id in self.courses]
        ordered = self._newest_first(mine, key=lambda e: (e.enrolled_at, (e.user_id, e.course_id)))
        return [
            EnrolledCourse(
                course=replace(self.courses[e.course_id], instructor=self._instructor(self.courses[e.course_id].instructor_id)),
                progress=e.progress,
                enrolled_at=e.enrolled_at,
                completed_at=e.completed_at,
            )
            for e in ordered
        ]

    def create_enrollment(self, *, user_id: str, course_id: str) -> Enrollment:
        key = (user_id, course_id)
        if key in self.enrollments:
            raise DuplicateEnrollmentError(course_id)
        if course_id not in self.courses:
            raise LookupError("course_not_found")
        enrollment = Enrollment(user_id=user_id, course_id=course_id, progress=0, enrolled_at=self._now())
        self.enrollments[key] = enrollment
        self._stamp(key)
        return enrollment

    def update_progress(self, *, user_id: str, course_id: str, progress: int) -> Optional[Enrollment]:
        key = (user_id, course_id)
        current = self.enrollments.get(key)
        if current is None:
            return None
        updated = replace(
            current,
            progress=int(progress),
            completed_at=self._now() if progress >= 100 else None,
        )
        self.enrollments[key] = updated
        return updated

    def create_review(self, *, user_id: str, course_id: str, rating: int, comment: Optional[str]) -> Review:
        if course_id not in self.courses:
            raise LookupError("course_not_found")
        review = Review(
            id=str(uuid4()),
            user_id=user_id,
            course_id=course_id,
            rating=int(rating),
            comment=comment,
            created_at=self._now(),
        )
        self.reviews[review.id] = review
        self._stamp(review.id)
        return review

    def list_reviews(self, course_id: str) -> List[Review]:
        items = [r for r in self.reviews.values() if r.course_id == course_id]
        ordered = self._newest_first(items, key=lambda r: (r.created_at, r.id))
        out: List[Review] = []
        for review in ordered:
            profile = self.profiles.get(review.user_id)
            reviewer = Reviewer(full_name=profile.full_name, avatar_url=profile.avatar_url) if profile else None
            out.append(replace(review, reviewer=reviewer))
        return out

    # --- Admin port --------------------------------------------------------------
    def list_all_courses(self) -> List[Course]:
        ordered = self._newest_first(list(self.courses.values()), key=lambda c: (c.created_at, c.id))
        return [self._enrich(c) for c in ordered]

    def list_profiles(self) -> List[Profile]:
        return sorted(self.profiles.values(), key=lambda p: p.created_at, reverse=True)

    def enrollment_totals(self) -> Tuple[int, float]:
        revenue = 0.0
        for (_, course_id) in self.enrollments:
            course = self.courses.get(course_id)
            revenue += course.price if course is not None else 0.0
        return len(self.enrollments), revenue

    def create_course(self, *, instructor_id: str, fields: Dict[str, Any]) -> Course:
        now = self._now()
        course = Course(
            id=str(uuid4()),
            title=fields["title"],
            description=fields.get("description", ""),
            price=float(fields.get("price", 0.0)),
            currency=fields.get("currency", "USD"),
            thumbnail_url=fields.get("thumbnail_url"),
            instructor_id=instructor_id,
            category=fields.get("category", ""),
            level=fields.get("level", "beginner"),
            duration_hours=int(fields.get("duration_hours", 0)),
            is_published=bool(fields.get("is_published", False)),
            created_at=now,
            updated_at=now,
        )
        self.courses[course.id] = course
        self._stamp(course.id)
        return self._enrich(course)

    def update_course(self, course_id: str, *, instructor_id: str, fields: Dict[str, Any]) -> Optional[Course]:
        current = self.courses.get(course_id)
        if current is None:
            return None
        updated = replace(current, instructor_id=instructor_id, updated_at=self._now(), **fields)
        self.courses[course_id] = updated
        return self._enrich(updated)

    def toggle_published(self, course_id: str) -> Optional[Course]:
        current = self.courses.get(course_id)
        if current is None:
            return None
        updated = replace(current, is_published=not current.is_published, updated_at=self._now())
        self.courses[course_id] = updated
        return self._enrich(updated)

    def delete_course(self, course_id: str) -> bool:
        if self.courses.pop(course_id, None) is None:
            return False
        for lesson_id in [l.id for l in self.lessons.values() if l.course_id == course_id]:
            self.lessons.pop(lesson_id, None)
        for key in [k for k in self.enrollments if k[1] == course_id]:
            self.enrollments.pop(key, None)
        for review_id in [r.id for r in self.reviews.values() if r.course_id == course_id]:
            self.reviews.pop(review_id, None)
        return True

    def _order_taken(self, course_id: str, order_index: int, *, exclude: Optional[str] = None) -> bool:
        return any(
            l.course_id == course_id and l.order_index == order_index and l.id != exclude
            for l in self.lessons.values()
        )

    def create_lesson(self, course_id: str, *, fields: Dict[str, Any]) -> Lesson:
        if course_id not in self.courses:
            raise LookupError("course_not_found")
        if self._order_taken(course_id, fields["order_index"]):
            raise DuplicateLessonOrderError(course_id)
        now = self._now()
        lesson = Lesson(
            id=str(uuid4()),
            course_id=course_id,
            title=fields["title"],
            description=fields.get("description"),
            video_url=fields.get("video_url"),
            content=fields.get("content"),
            order_index=fields["order_index"],
            duration_minutes=int(fields.get("duration_minutes", 0)),
            is_free=bool(fields.get("is_free", False)),
            created_at=now,
            updated_at=now,
        )
        self.lessons[lesson.id] = lesson
        return lesson

    def update_lesson(self, lesson_id: str, *, fields: Dict[str, Any]) -> Optional[Lesson]:
        current = self.lessons.get(lesson_id)
        if current is None:
            return None
        if "order_index" in fields and self._order_taken(current.course_id, fields["order_index"], exclude=lesson_id):
            raise DuplicateLessonOrderError(current.course_id)
        updated = replace(current, updated_at=self._now(), **fields)
        self.lessons[lesson_id] = updated
        return updated

    def delete_lesson(self, lesson_id: str) -> bool:
        return self.lessons.pop(lesson_id, None) is not None


__all__ = ["InMemoryCatalogRepo"]
