"""Unit tests for the admin BackOfficeService.

Focus:
    - Admin-role enforcement before any repository call
    - Field normalisation for courses and lessons
    - Dashboard totals (revenue = sum of enrolled course prices)
    - Conflict mapping for duplicate lesson order
"""

from __future__ import annotations

import pytest

from academy.admin.service import BackOfficeService
from academy.identity_access.domain import SessionContext
from academy.outcomes import Status
from academy.tests.utils.catalog_seed import INSTRUCTOR_ID, add_course, make_repo


ADMIN = SessionContext(user_id=INSTRUCTOR_ID, role="admin")
STUDENT = SessionContext(user_id="44444444-4444-4444-4444-444444444444")


@pytest.fixture
def repo():
    repo, directory = make_repo()
    directory.add(id=STUDENT.user_id, email="s@example.com", full_name="Sara")
    return repo


@pytest.fixture
def service(repo):
    return BackOfficeService(repo, locale="en")


def test_dashboard_totals(service, repo):
    paid = add_course(repo, "Paid", price=50.0)
    cheap = add_course(repo, "Cheap", price=10.0, is_published=False)
    repo.create_enrollment(user_id=STUDENT.user_id, course_id=paid.id)
    repo.create_enrollment(user_id=INSTRUCTOR_ID, course_id=paid.id)
    repo.create_enrollment(user_id=STUDENT.user_id, course_id=cheap.id)

    result = service.dashboard(ADMIN)

    assert result.ok
    snap = result.value
    assert snap.total_users == 2
    assert snap.total_courses == 2
    assert snap.total_enrollments == 3
    assert snap.total_revenue == pytest.approx(110.0)
    assert [c.title for c in snap.courses] == ["Cheap", "Paid"]
    assert snap.courses[1].enrolled_count == 2


@pytest.mark.parametrize(
    "call",
    [
        lambda s, ctx: s.dashboard(ctx),
        lambda s, ctx: s.create_course(ctx, title="X"),
        lambda s, ctx: s.update_course(ctx, "c", title="X"),
        lambda s, ctx: s.toggle_publish(ctx, "c"),
        lambda s, ctx: s.delete_course(ctx, "c"),
        lambda s, ctx: s.create_lesson(ctx, "c", title="L", order_index=1),
        lambda s, ctx: s.update_lesson(ctx, "l", title="L"),
        lambda s, ctx: s.delete_lesson(ctx, "l"),
    ],
)
def test_students_are_forbidden(service, repo, call):
    result = call(service, STUDENT)

    assert result.status is Status.FORBIDDEN
    assert result.code == "admin_required"
    assert repo.courses == {}


def test_anonymous_is_unauthenticated(service):
    result = service.dashboard(SessionContext.anonymous())
    assert result.status is Status.UNAUTHENTICATED


def test_create_course_normalizes_and_sets_instructor(service, repo):
    result = service.create_course(
        ADMIN,
        title="  Generative AI  ",
        price=25,
        currency="egp",
        level="advanced",
        duration_hours=12,
        thumbnail_url="https://cdn.example.com/t.png",
    )

    assert result.status is Status.SUCCESS
    assert result.code == "course_created"
    course = result.value
    assert course.title == "Generative AI"
    assert course.price == 25.0
    assert course.currency == "EGP"
    assert course.instructor_id == INSTRUCTOR_ID
    assert course.is_published is False


@pytest.mark.parametrize(
    "kwargs, code",
    [
        ({"title": ""}, "invalid_title"),
        ({"title": "x" * 201}, "invalid_title"),
        ({"title": "ok", "price": -1}, "invalid_price"),
        ({"title": "ok", "price": "10"}, "invalid_price"),
        ({"title": "ok", "level": "expert"}, "invalid_level"),
        ({"title": "ok", "duration_hours": -2}, "invalid_duration_hours"),
        ({"title": "ok", "currency": "dollars"}, "invalid_currency"),
        ({"title": "ok", "is_published": "yes"}, "invalid_is_published"),
        ({"title": "ok", "thumbnail_url": "ftp://x"}, "invalid_thumbnail_url"),
    ],
)
def test_create_course_validation(service, repo, kwargs, code):
    result = service.create_course(ADMIN, **kwargs)

    assert result.status is Status.INVALID
    assert result.code == code
    assert repo.courses == {}


def test_update_course_is_partial(service, repo):
    course = add_course(repo, "Original", price=30.0)

    result = service.update_course(ADMIN, course.id, price=45.5)

    assert result.ok
    assert result.value.title == "Original"
    assert result.value.price == 45.5
    assert result.code == "course_updated"


def test_update_missing_course_is_not_found(service):
    assert service.update_course(ADMIN, "missing", title="X").status is Status.NOT_FOUND


def test_toggle_publish_flips_flag(service, repo):
    course = add_course(repo, "Toggle", is_published=False)

    first = service.toggle_publish(ADMIN, course.id)
    second = service.toggle_publish(ADMIN, course.id)

    assert first.value.is_published is True
    assert first.code == "course_published"
    assert second.value.is_published is False
    assert second.code == "course_unpublished"


def test_delete_course_cascades(service, repo):
    course = add_course(repo, "Gone")
    repo.create_lesson(course.id, fields={"title": "L1", "order_index": 1})
    repo.create_enrollment(user_id=STUDENT.user_id, course_id=course.id)

    result = service.delete_course(ADMIN, course.id)

    assert result.code == "course_deleted"
    assert repo.lessons == {} and repo.enrollments == {}
    assert service.delete_course(ADMIN, course.id).status is Status.NOT_FOUND


def test_lesson_crud_and_order_conflict(service, repo):
    course = add_course(repo, "Lessons")

    first = service.create_lesson(ADMIN, course.id, title="Intro", order_index=1, is_free=True)
    dup = service.create_lesson(ADMIN, course.id, title="Other", order_index=1)
    second = service.create_lesson(ADMIN, course.id, title="Next", order_index=2)

    assert first.code == "lesson_created"
    assert dup.status is Status.CONFLICT
    assert dup.code == "lesson_order_taken"

    moved = service.update_lesson(ADMIN, second.value.id, order_index=1)
    assert moved.status is Status.CONFLICT

    renamed = service.update_lesson(ADMIN, second.value.id, title="Next steps", video_url="https://v.example.com/2")
    assert renamed.ok
    assert renamed.value.title == "Next steps"
    assert renamed.value.order_index == 2

    assert service.delete_lesson(ADMIN, first.value.id).code == "lesson_deleted"
    assert service.delete_lesson(ADMIN, first.value.id).status is Status.NOT_FOUND


def test_create_lesson_for_unknown_course(service):
    result = service.create_lesson(ADMIN, "missing", title="L", order_index=0)
    assert result.status is Status.NOT_FOUND


@pytest.mark.parametrize(
    "kwargs, code",
    [
        ({"title": " ", "order_index": 1}, "invalid_title"),
        ({"title": "L", "order_index": -1}, "invalid_order_index"),
        ({"title": "L", "order_index": 1, "duration_minutes": -5}, "invalid_duration_minutes"),
        ({"title": "L", "order_index": 1, "is_free": 1}, "invalid_is_free"),
        ({"title": "L", "order_index": 1, "video_url": "not a url"}, "invalid_video_url"),
    ],
)
def test_lesson_validation(service, repo, kwargs, code):
    course = add_course(repo, "Validate")

    result = service.create_lesson(ADMIN, course.id, **kwargs)

    assert result.status is Status.INVALID
    assert result.code == code
    assert repo.lessons == {}


def test_repository_failure_maps_to_failure(service, repo):
    def _boom(**kwargs):
        raise ConnectionError("down")

    repo.create_course = _boom  # type: ignore[assignment]
    result = service.create_course(ADMIN, title="Boom")

    assert result.status is Status.FAILURE
    assert result.code == "course_save_failed"
