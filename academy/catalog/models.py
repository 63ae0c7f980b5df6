"""Catalog entities and derived view models.

All entities are owned by the database; instances here are transient copies.
Derived fields (`lessons_count`, `enrolled_count`, `average_rating`,
`instructor`) are never stored.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional


LEVELS = ("beginner", "intermediate", "advanced")
MIN_RATING = 1
MAX_RATING = 5


@dataclass(frozen=True)
class InstructorInfo:
    full_name: Optional[str]
    avatar_url: Optional[str]


@dataclass(frozen=True)
class Course:
    id: str
    title: str
    description: str
    price: float
    currency: str
    thumbnail_url: Optional[str]
    instructor_id: str
    category: str
    level: str
    duration_hours: int
    is_published: bool
    created_at: str
    updated_at: str
    instructor: Optional[InstructorInfo] = None
    lessons_count: int = 0
    enrolled_count: int = 0
    average_rating: float = 0.0


@dataclass(frozen=True)
class Lesson:
    id: str
    course_id: str
    title: str
    description: Optional[str]
    video_url: Optional[str]
    content: Optional[str]
    order_index: int
    duration_minutes: int
    is_free: bool
    created_at: str
    updated_at: str


@dataclass(frozen=True)
class Enrollment:
    user_id: str
    course_id: str
    progress: int
    enrolled_at: str
    completed_at: Optional[str] = None


@dataclass(frozen=True)
class EnrolledCourse:
    """A course together with the caller's enrollment state."""

    course: Course
    progress: int
    enrolled_at: str
    completed_at: Optional[str] = None

    @property
    def course_id(self) -> str:
        return self.course.id

    @property
    def is_completed(self) -> bool:
        return self.progress >= 100


@dataclass(frozen=True)
class Reviewer:
    full_name: Optional[str]
    avatar_url: Optional[str]


@dataclass(frozen=True)
class Review:
    id: str
    user_id: str
    course_id: str
    rating: int
    comment: Optional[str]
    created_at: str
    reviewer: Optional[Reviewer] = None


def average_rating(ratings: Iterable[int]) -> float:
    """Arithmetic mean of `ratings`; 0 when there are none."""
    values = list(ratings)
    if not values:
        return 0.0
    return sum(values) / len(values)


__all__ = [
    "LEVELS",
    "MAX_RATING",
    "MIN_RATING",
    "Course",
    "EnrolledCourse",
    "Enrollment",
    "InstructorInfo",
    "Lesson",
    "Review",
    "Reviewer",
    "average_rating",
]
