"""
Postgres-backed repository for the catalog (courses, lessons, enrollments, reviews).

Security:
- Connect with a login role that is subject to Row Level Security; user-scoped
  statements set `request.jwt.claims` so Supabase policies see the caller.

Design:
- Minimal psycopg3 usage; each call opens a short-lived connection.
- Course statistics (lesson count, enrollment count, average rating) come from
  one aggregate query per call instead of one follow-up query per course.
"""
from __future__ import annotations

from typing import Any, List, Optional, Tuple

try:
    import psycopg
    HAVE_PSYCOPG = True
except Exception:  # pragma: no cover - optional in some dev envs
    psycopg = None  # type: ignore
    HAVE_PSYCOPG = False

from ..config import resolve_dsn
from ..db import (
    as_float,
    as_int,
    is_foreign_key_violation,
    is_invalid_text_representation,
    is_unique_violation,
    iso_ts,
    set_request_claims,
)
from .models import Course, EnrolledCourse, Enrollment, InstructorInfo, Lesson, Review, Reviewer
from .ports import DuplicateEnrollmentError


COURSE_COLUMNS_SQL = f"""
    c.id::text,
    c.title,
    c.description,
    c.price::float8,
    c.currency,
    c.thumbnail_url,
    c.instructor_id::text,
    c.category,
    c.level,
    c.duration_hours,
    c.is_published,
    {iso_ts("c.created_at")},
    {iso_ts("c.updated_at")},
    p.full_name,
    p.avatar_url
"""

# Pre-aggregated per-course statistics joined onto courses in a single statement.
ENRICHED_COURSES_SQL = f"""
    select {COURSE_COLUMNS_SQL},
           coalesce(ls.lessons_count, 0),
           coalesce(es.enrolled_count, 0),
           coalesce(rs.average_rating, 0)
      from public.courses c
      left join public.profiles p on p.id = c.instructor_id
      left join (
            select course_id, count(*) as lessons_count
              from public.lessons
             group by course_id
      ) ls on ls.course_id = c.id
      left join (
            select course_id, count(*) as enrolled_count
              from public.enrollments
             group by course_id
      ) es on es.course_id = c.id
      left join (
            select course_id, avg(rating)::float8 as average_rating
              from public.reviews
             group by course_id
      ) rs on rs.course_id = c.id
"""

_LESSON_COLUMNS_SQL = f"""
    id::text,
    course_id::text,
    title,
    description,
    video_url,
    content,
    order_index,
    duration_minutes,
    is_free,
    {iso_ts("created_at")},
    {iso_ts("updated_at")}
"""

_ENROLLMENT_COLUMNS_SQL = f"""
    user_id::text,
    course_id::text,
    progress,
    {iso_ts("enrolled_at")},
    {iso_ts("completed_at")}
"""


def course_from_row(row: Tuple, *, stats: Optional[Tuple] = None) -> Course:
    """Map `COURSE_COLUMNS_SQL` (+ optional lessons/enrolled/avg tail) to a Course."""
    instructor = None
    if row[13] is not None or row[14] is not None:
        instructor = InstructorInfo(full_name=row[13], avatar_url=row[14])
    lessons_count, enrolled_count, avg = stats if stats is not None else (0, 0, 0)
    return Course(
        id=row[0],
        title=row[1],
        description=row[2] or "",
        price=as_float(row[3]),
        currency=row[4] or "USD",
        thumbnail_url=row[5],
        instructor_id=row[6],
        category=row[7] or "",
        level=row[8],
        duration_hours=as_int(row[9]),
        is_published=bool(row[10]),
        created_at=row[11],
        updated_at=row[12],
        instructor=instructor,
        lessons_count=as_int(lessons_count),
        enrolled_count=as_int(enrolled_count),
        average_rating=as_float(avg),
    )


def enriched_course_from_row(row: Tuple) -> Course:
    return course_from_row(row[:15], stats=(row[15], row[16], row[17]))


def lesson_from_row(row: Tuple) -> Lesson:
    return Lesson(
        id=row[0],
        course_id=row[1],
        title=row[2],
        description=row[3],
        video_url=row[4],
        content=row[5],
        order_index=as_int(row[6]),
        duration_minutes=as_int(row[7]),
        is_free=bool(row[8]),
        created_at=row[9],
        updated_at=row[10],
    )


def _enrollment_from_row(row: Tuple) -> Enrollment:
    return Enrollment(
        user_id=row[0],
        course_id=row[1],
        progress=as_int(row[2]),
        enrolled_at=row[3],
        completed_at=row[4],
    )


def _review_from_row(row: Tuple) -> Review:
    reviewer = None
    if len(row) > 6 and (row[6] is not None or row[7] is not None):
        reviewer = Reviewer(full_name=row[6], avatar_url=row[7])
    return Review(
        id=row[0],
        user_id=row[1],
        course_id=row[2],
        rating=as_int(row[3]),
        comment=row[4],
        created_at=row[5],
        reviewer=reviewer,
    )


class DBCatalogRepo:
    def __init__(self, dsn: Optional[str] = None, *, connect_timeout: int = 5) -> None:
        """Initialize a Postgres-backed catalog repository.

        Parameters:
            dsn: Optional explicit DSN. When omitted, resolves from env via
                 `academy.config.resolve_dsn`.
            connect_timeout: Seconds passed to psycopg for each connection.

        Behavior:
            Does not open a connection eagerly; connections are per-call.
        """
        if not HAVE_PSYCOPG:
            raise RuntimeError("psycopg3 is required for DBCatalogRepo")
        self._dsn = dsn or resolve_dsn()
        self._connect_timeout = int(connect_timeout)

    def _connect(self) -> Any:
        return psycopg.connect(self._dsn, connect_timeout=self._connect_timeout)

    # --- Courses ----------------------------------------------------------------
    def list_published_courses(self) -> List[Course]:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    ENRICHED_COURSES_SQL
                    + """
                     where c.is_published = true
                     order by c.created_at desc, c.id
                    """
                )
                rows = cur.fetchall() or []
        return [enriched_course_from_row(r) for r in rows]

    def get_course(self, course_id: str) -> Optional[Course]:
        """Enriched course or None; a malformed id is reported as missing."""
        with self._connect() as conn:
            with conn.cursor() as cur:
                try:
                    cur.execute(ENRICHED_COURSES_SQL + " where c.id = %s", (course_id,))
                except Exception as exc:
                    if is_invalid_text_representation(exc):
                        conn.rollback()
                        return None
                    raise
                row = cur.fetchone()
        return enriched_course_from_row(row) if row else None

    # --- Lessons ----------------------------------------------------------------
    def list_lessons(self, course_id: str) -> List[Lesson]:
        with self._connect() as conn:
            with conn.cursor() as cur:
                try:
                    cur.execute(
                        f"""
                        select {_LESSON_COLUMNS_SQL}
                          from public.lessons
                         where course_id = %s
                         order by order_index asc, id asc
                        """,
                        (course_id,),
                    )
                except Exception as exc:
                    if is_invalid_text_representation(exc):
                        conn.rollback()
                        return []
                    raise
                rows = cur.fetchall() or []
        return [lesson_from_row(r) for r in rows]

    # --- Enrollments ------------------------------------------------------------
    def list_enrolled_courses(self, user_id: str) -> List[EnrolledCourse]:
        with self._connect() as conn:
            with conn.cursor() as cur:
                set_request_claims(cur, user_id)
                cur.execute(
                    f"""
                    select {COURSE_COLUMNS_SQL},
                           e.progress,
                           {iso_ts("e.enrolled_at")},
                           {iso_ts("e.completed_at")}
                      from public.enrollments e
                      join public.courses c on c.id = e.course_id
                      left join public.profiles p on p.id = c.instructor_id
                     where e.user_id = %s
                     order by e.enrolled_at desc, c.id
                    """,
                    (user_id,),
                )
                rows = cur.fetchall() or []
        return [
            EnrolledCourse(
                course=course_from_row(r[:15]),
                progress=as_int(r[15]),
                enrolled_at=r[16],
                completed_at=r[17],
            )
            for r in rows
        ]

    def create_enrollment(self, *, user_id: str, course_id: str) -> Enrollment:
        with self._connect() as conn:
            with conn.cursor() as cur:
                set_request_claims(cur, user_id)
                try:
                    cur.execute(
                        f"""
                        insert into public.enrollments (user_id, course_id, progress)
                        values (%s, %s, 0)
                        returning {_ENROLLMENT_COLUMNS_SQL}
                        """,
                        (user_id, course_id),
                    )
                except Exception as exc:
                    if is_unique_violation(exc):
                        conn.rollback()
                        raise DuplicateEnrollmentError(course_id) from exc
                    if is_foreign_key_violation(exc) or is_invalid_text_representation(exc):
                        conn.rollback()
                        raise LookupError("course_not_found") from exc
                    raise
                row = cur.fetchone()
                if row is None:
                    raise RuntimeError("enrollments insert returned no row")
                conn.commit()
        return _enrollment_from_row(row)

    def update_progress(self, *, user_id: str, course_id: str, progress: int) -> Optional[Enrollment]:
        with self._connect() as conn:
            with conn.cursor() as cur:
                set_request_claims(cur, user_id)
                try:
                    cur.execute(
                        f"""
                        update public.enrollments
                           set progress = %s,
                               completed_at = case when %s >= 100 then now() else null end
                         where user_id = %s and course_id = %s
                        returning {_ENROLLMENT_COLUMNS_SQL}
                        """,
                        (int(progress), int(progress), user_id, course_id),
                    )
                except Exception as exc:
                    if is_invalid_text_representation(exc):
                        conn.rollback()
                        return None
                    raise
                row = cur.fetchone()
                conn.commit()
        return _enrollment_from_row(row) if row else None

    # --- Reviews ----------------------------------------------------------------
    def create_review(self, *, user_id: str, course_id: str, rating: int, comment: Optional[str]) -> Review:
        with self._connect() as conn:
            with conn.cursor() as cur:
                set_request_claims(cur, user_id)
                try:
                    cur.execute(
                        f"""
                        insert into public.reviews (user_id, course_id, rating, comment)
                        values (%s, %s, %s, %s)
                        returning id::text, user_id::text, course_id::text, rating, comment,
                                  {iso_ts("created_at")}
                        """,
                        (user_id, course_id, int(rating), comment),
                    )
                except Exception as exc:
                    if is_foreign_key_violation(exc) or is_invalid_text_representation(exc):
                        conn.rollback()
                        raise LookupError("course_not_found") from exc
                    raise
                row = cur.fetchone()
                if row is None:
                    raise RuntimeError("reviews insert returned no row")
                conn.commit()
        return _review_from_row(row)

    def list_reviews(self, course_id: str) -> List[Review]:
        with self._connect() as conn:
            with conn.cursor() as cur:
                try:
                    cur.execute(
                        f"""
                        select r.id::text, r.user_id::text, r.course_id::text, r.rating, r.comment,
                               {iso_ts("r.created_at")},
                               p.full_name, p.avatar_url
                          from public.reviews r
                          left join public.profiles p on p.id = r.user_id
                         where r.course_id = %s
                         order by r.created_at desc, r.id
                        """,
                        (course_id,),
                    )
                except Exception as exc:
                    if is_invalid_text_representation(exc):
                        conn.rollback()
                        return []
                    raise
                rows = cur.fetchall() or []
        return [_review_from_row(r) for r in rows]


__all__ = [
    "COURSE_COLUMNS_SQL",
    "DBCatalogRepo",
    "ENRICHED_COURSES_SQL",
    "course_from_row",
    "enriched_course_from_row",
    "lesson_from_row",
]
