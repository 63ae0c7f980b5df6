"""
Postgres-backed repository for the admin back-office.

Security:
- Writes set `request.jwt.claims` to the acting admin so the `courses` and
  `lessons` RLS policies (admin-only writes) apply.

Design:
- Column lists are whitelisted by the service; only known column names are
  interpolated into SQL, values always travel as parameters.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

try:
    import psycopg
    HAVE_PSYCOPG = True
except Exception:  # pragma: no cover - optional in some dev envs
    psycopg = None  # type: ignore
    HAVE_PSYCOPG = False

from ..catalog.models import Course, Lesson
from ..catalog.ports import DuplicateLessonOrderError
from ..catalog.repo_db import ENRICHED_COURSES_SQL, enriched_course_from_row, lesson_from_row
from ..config import resolve_dsn
from ..db import as_float, as_int, is_foreign_key_violation, is_unique_violation, iso_ts, set_request_claims
from ..identity_access.domain import Profile
from ..identity_access.stores_db import PROFILE_COLUMNS_SQL, profile_from_row


COURSE_WRITABLE_COLUMNS = (
    "title",
    "description",
    "price",
    "currency",
    "thumbnail_url",
    "category",
    "level",
    "duration_hours",
    "is_published",
)

LESSON_WRITABLE_COLUMNS = (
    "title",
    "description",
    "video_url",
    "content",
    "order_index",
    "duration_minutes",
    "is_free",
)

_LESSON_RETURNING_SQL = f"""
    id::text, course_id::text, title, description, video_url, content,
    order_index, duration_minutes, is_free,
    {iso_ts("created_at")}, {iso_ts("updated_at")}
"""


def _columns(fields: Dict[str, Any], allowed: Tuple[str, ...]) -> List[str]:
    unknown = set(fields) - set(allowed)
    if unknown:
        raise ValueError("invalid_field")
    return [name for name in allowed if name in fields]


class DBAdminRepo:
    def __init__(self, dsn: Optional[str] = None, *, actor_id: Optional[str] = None, connect_timeout: int = 5) -> None:
        if not HAVE_PSYCOPG:
            raise RuntimeError("psycopg3 is required for DBAdminRepo")
        self._dsn = dsn or resolve_dsn()
        self._actor_id = actor_id
        self._connect_timeout = int(connect_timeout)

    def _connect(self) -> Any:
        return psycopg.connect(self._dsn, connect_timeout=self._connect_timeout)

    def _claims(self, cur, sub: Optional[str] = None) -> None:
        who = sub or self._actor_id
        if who:
            set_request_claims(cur, who)

    def _fetch_course(self, cur, course_id: str) -> Optional[Course]:
        # Same transaction as the write, so the caller sees its own change.
        cur.execute(ENRICHED_COURSES_SQL + " where c.id = %s", (course_id,))
        row = cur.fetchone()
        return enriched_course_from_row(row) if row else None

    # --- Dashboard ---------------------------------------------------------------
    def list_all_courses(self) -> List[Course]:
        """Published and draft courses, newest first, with statistics."""
        with self._connect() as conn:
            with conn.cursor() as cur:
                self._claims(cur)
                cur.execute(ENRICHED_COURSES_SQL + " order by c.created_at desc, c.id")
                rows = cur.fetchall() or []
        return [enriched_course_from_row(r) for r in rows]

    def list_profiles(self) -> List[Profile]:
        with self._connect() as conn:
            with conn.cursor() as cur:
                self._claims(cur)
                cur.execute(f"select {PROFILE_COLUMNS_SQL} from public.profiles order by created_at desc, id")
                rows = cur.fetchall() or []
        return [profile_from_row(r) for r in rows]

    def enrollment_totals(self) -> Tuple[int, float]:
        """Return (number of enrollments, revenue as the sum of enrolled course prices)."""
        with self._connect() as conn:
            with conn.cursor() as cur:
                self._claims(cur)
                cur.execute(
                    """
                    select count(*), coalesce(sum(c.price), 0)::float8
                      from public.enrollments e
                      left join public.courses c on c.id = e.course_id
                    """
                )
                row = cur.fetchone() or (0, 0)
        return as_int(row[0]), as_float(row[1])

    # --- Courses -----------------------------------------------------------------
    def create_course(self, *, instructor_id: str, fields: Dict[str, Any]) -> Course:
        columns = _columns(fields, COURSE_WRITABLE_COLUMNS)
        names = ", ".join(columns + ["instructor_id"])
        placeholders = ", ".join(["%s"] * (len(columns) + 1))
        params = [fields[c] for c in columns] + [instructor_id]
        with self._connect() as conn:
            with conn.cursor() as cur:
                self._claims(cur, instructor_id)
                cur.execute(
                    f"insert into public.courses ({names}) values ({placeholders}) returning id::text",
                    params,
                )
                row = cur.fetchone()
                if row is None:
                    raise RuntimeError("courses insert returned no row")
                course = self._fetch_course(cur, row[0])
                conn.commit()
        if course is None:
            raise RuntimeError("created course not readable")
        return course

    def update_course(self, course_id: str, *, instructor_id: str, fields: Dict[str, Any]) -> Optional[Course]:
        columns = _columns(fields, COURSE_WRITABLE_COLUMNS)
        assignments = ", ".join([f"{c} = %s" for c in columns] + ["instructor_id = %s", "updated_at = now()"])
        params = [fields[c] for c in columns] + [instructor_id, course_id]
        with self._connect() as conn:
            with conn.cursor() as cur:
                self._claims(cur, instructor_id)
                cur.execute(
                    f"update public.courses set {assignments} where id = %s returning id::text",
                    params,
                )
                row = cur.fetchone()
                course = self._fetch_course(cur, row[0]) if row else None
                conn.commit()
        return course

    def toggle_published(self, course_id: str) -> Optional[Course]:
        with self._connect() as conn:
            with conn.cursor() as cur:
                self._claims(cur)
                cur.execute(
                    """
                    update public.courses
                       set is_published = not is_published, updated_at = now()
                     where id = %s
                    returning id::text
                    """,
                    (course_id,),
                )
                row = cur.fetchone()
                course = self._fetch_course(cur, row[0]) if row else None
                conn.commit()
        return course

    def delete_course(self, course_id: str) -> bool:
        """Delete a course; lessons, enrollments and reviews cascade via FKs."""
        with self._connect() as conn:
            with conn.cursor() as cur:
                self._claims(cur)
                cur.execute("delete from public.courses where id = %s returning id", (course_id,))
                row = cur.fetchone()
                conn.commit()
        return row is not None

    # --- Lessons -----------------------------------------------------------------
    def create_lesson(self, course_id: str, *, fields: Dict[str, Any]) -> Lesson:
        columns = _columns(fields, LESSON_WRITABLE_COLUMNS)
        names = ", ".join(["course_id"] + columns)
        placeholders = ", ".join(["%s"] * (len(columns) + 1))
        params = [course_id] + [fields[c] for c in columns]
        with self._connect() as conn:
            with conn.cursor() as cur:
                self._claims(cur)
                try:
                    cur.execute(
                        f"insert into public.lessons ({names}) values ({placeholders}) returning {_LESSON_RETURNING_SQL}",
                        params,
                    )
                except Exception as exc:
                    if is_unique_violation(exc):
                        conn.rollback()
                        raise DuplicateLessonOrderError(course_id) from exc
                    if is_foreign_key_violation(exc):
                        conn.rollback()
                        raise LookupError("course_not_found") from exc
                    raise
                row = cur.fetchone()
                if row is None:
                    raise RuntimeError("lessons insert returned no row")
                conn.commit()
        return lesson_from_row(row)

    def update_lesson(self, lesson_id: str, *, fields: Dict[str, Any]) -> Optional[Lesson]:
        columns = _columns(fields, LESSON_WRITABLE_COLUMNS)
        assignments = ", ".join([f"{c} = %s" for c in columns] + ["updated_at = now()"])
        params = [fields[c] for c in columns] + [lesson_id]
        with self._connect() as conn:
            with conn.cursor() as cur:
                self._claims(cur)
                try:
                    cur.execute(
                        f"update public.lessons set {assignments} where id = %s returning {_LESSON_RETURNING_SQL}",
                        params,
                    )
                except Exception as exc:
                    if is_unique_violation(exc):
                        conn.rollback()
                        raise DuplicateLessonOrderError(lesson_id) from exc
                    raise
                row = cur.fetchone()
                conn.commit()
        return lesson_from_row(row) if row else None

    def delete_lesson(self, lesson_id: str) -> bool:
        with self._connect() as conn:
            with conn.cursor() as cur:
                self._claims(cur)
                cur.execute("delete from public.lessons where id = %s returning id", (lesson_id,))
                row = cur.fetchone()
                conn.commit()
        return row is not None


__all__ = ["COURSE_WRITABLE_COLUMNS", "DBAdminRepo", "LESSON_WRITABLE_COLUMNS"]
