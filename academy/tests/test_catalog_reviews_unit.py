"""Review submission and rating distribution."""

from __future__ import annotations

import pytest

from academy.catalog.models import Review
from academy.catalog.reviews import ReviewService, rating_distribution
from academy.catalog.service import CourseAggregator
from academy.identity_access.domain import SessionContext
from academy.outcomes import Status
from academy.tests.utils.catalog_seed import add_course, make_repo


STUDENT_ID = "33333333-3333-3333-3333-333333333333"


@pytest.fixture
def setup():
    repo, directory = make_repo()
    directory.add(id=STUDENT_ID, email="mona@example.com", full_name="Mona")
    aggregator = CourseAggregator(repo, locale="en")
    service = ReviewService(repo, aggregator, locale="en")
    course = add_course(repo, "AI Basics")
    return repo, aggregator, service, course


def _review(rating: int) -> Review:
    return Review(id=f"r{rating}", user_id="u", course_id="c", rating=rating, comment=None, created_at="")


def test_enrolled_student_can_review(setup):
    repo, aggregator, service, course = setup
    student = SessionContext(user_id=STUDENT_ID)
    aggregator.enroll(student, course.id)

    result = service.submit_review(student, course.id, 5, "  Clear and practical  ")

    assert result.status is Status.SUCCESS
    assert result.code == "review_added"
    assert result.value.comment == "Clear and practical"
    assert aggregator.get_course_by_id(course.id).value.average_rating == 5


def test_review_requires_login(setup):
    repo, _, service, course = setup

    result = service.submit_review(SessionContext.anonymous(), course.id, 5, "nice")

    assert result.status is Status.UNAUTHENTICATED
    assert repo.reviews == {}


@pytest.mark.parametrize(
    "rating, comment, code",
    [
        (0, "ok", "invalid_rating"),
        (6, "ok", "invalid_rating"),
        (4.5, "ok", "invalid_rating"),
        (True, "ok", "invalid_rating"),
        (4, "", "comment_required"),
        (4, "   ", "comment_required"),
        (4, None, "comment_required"),
        (4, "x" * 2001, "comment_required"),
    ],
)
def test_invalid_input_rejected_before_any_request(setup, rating, comment, code):
    repo, aggregator, service, course = setup
    student = SessionContext(user_id=STUDENT_ID)
    aggregator.enroll(student, course.id)

    result = service.submit_review(student, course.id, rating, comment)

    assert result.status is Status.INVALID
    assert result.code == code
    assert repo.reviews == {}


def test_review_requires_enrollment(setup):
    repo, _, service, course = setup

    result = service.submit_review(SessionContext(user_id=STUDENT_ID), course.id, 4, "Looks good")

    assert result.status is Status.FORBIDDEN
    assert result.code == "enrollment_required"
    assert repo.reviews == {}


def test_review_for_removed_course_is_not_found(setup):
    repo, aggregator, service, course = setup
    student = SessionContext(user_id=STUDENT_ID)
    aggregator.enroll(student, course.id)
    del repo.courses[course.id]

    result = service.submit_review(student, course.id, 4, "good")

    assert result.status is Status.NOT_FOUND
    assert result.code == "course_not_found"
    assert repo.reviews == {}


def test_list_reviews_newest_first_with_reviewer(setup):
    repo, aggregator, service, course = setup
    student = SessionContext(user_id=STUDENT_ID)
    aggregator.enroll(student, course.id)
    service.submit_review(student, course.id, 3, "first")
    service.submit_review(student, course.id, 5, "second")

    result = service.list_reviews(course.id)

    assert result.ok
    assert [r.comment for r in result.value] == ["second", "first"]
    assert result.value[0].reviewer.full_name == "Mona"


def test_list_reviews_failure(setup):
    repo, _, service, course = setup

    def _boom(course_id):
        raise ConnectionError("down")

    repo.list_reviews = _boom  # type: ignore[assignment]
    result = service.list_reviews(course.id)

    assert result.status is Status.FAILURE
    assert result.value == []


def test_rating_distribution_counts_and_percentages():
    buckets = rating_distribution([_review(5), _review(5), _review(4), _review(1)])

    assert [b.rating for b in buckets] == [5, 4, 3, 2, 1]
    assert [b.count for b in buckets] == [2, 1, 0, 0, 1]
    assert buckets[0].percentage == pytest.approx(50.0)
    assert sum(b.percentage for b in buckets) == pytest.approx(100.0)


def test_rating_distribution_empty():
    buckets = rating_distribution([])
    assert all(b.count == 0 and b.percentage == 0 for b in buckets)
