"""
Repository ports for the catalog context.

Adapters (Postgres, in-memory) implement these protocols. They return plain
entities and raise only the conflict errors defined here; every other
failure propagates as-is so the services can map it to a generic outcome.
"""
from __future__ import annotations

from typing import List, Optional, Protocol

from .models import Course, EnrolledCourse, Enrollment, Lesson, Review


class DuplicateEnrollmentError(Exception):
    """The (user, course) pair is already enrolled."""


class DuplicateLessonOrderError(Exception):
    """Another lesson of the course already uses the requested order_index."""


class CatalogRepoProtocol(Protocol):
    def list_published_courses(self) -> List[Course]:
        """Published courses, newest first, enriched with stats in one round trip."""
        ...

    def get_course(self, course_id: str) -> Optional[Course]:
        ...

    def list_lessons(self, course_id: str) -> List[Lesson]:
        ...

    def list_enrolled_courses(self, user_id: str) -> List[EnrolledCourse]:
        ...

    def create_enrollment(self, *, user_id: str, course_id: str) -> Enrollment:
        ...

    def update_progress(self, *, user_id: str, course_id: str, progress: int) -> Optional[Enrollment]:
        ...

    def create_review(self, *, user_id: str, course_id: str, rating: int, comment: Optional[str]) -> Review:
        ...

    def list_reviews(self, course_id: str) -> List[Review]:
        ...


__all__ = [
    "CatalogRepoProtocol",
    "DuplicateEnrollmentError",
    "DuplicateLessonOrderError",
]
