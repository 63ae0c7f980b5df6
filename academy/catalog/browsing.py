"""Pure helpers for the public catalog page: search, filters, categories."""
from __future__ import annotations

from typing import Iterable, List, Optional

from .models import Course


def filter_courses(
    courses: Iterable[Course],
    *,
    search: Optional[str] = None,
    category: Optional[str] = None,
    level: Optional[str] = None,
) -> List[Course]:
    """Return courses matching all given filters, preserving input order.

    `search` matches title or description case-insensitively; `category` and
    `level` must match exactly. Empty values disable a filter.
    """
    needle = (search or "").strip().lower()
    out: List[Course] = []
    for course in courses:
        if needle and needle not in course.title.lower() and needle not in (course.description or "").lower():
            continue
        if category and course.category != category:
            continue
        if level and course.level != level:
            continue
        out.append(course)
    return out


def course_categories(courses: Iterable[Course]) -> List[str]:
    """Distinct categories in first-seen order."""
    seen: dict[str, None] = {}
    for course in courses:
        if course.category:
            seen.setdefault(course.category, None)
    return list(seen)


__all__ = ["course_categories", "filter_courses"]
