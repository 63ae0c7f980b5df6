"""Course reviews: submission, listing and the per-star breakdown.

Reviews are durable rows in `public.reviews`; the course's average rating is
always recomputed from them on read. Only enrolled users may review, and a
review is never edited after submission.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import List, Sequence

from ..config import DEFAULT_LOCALE
from ..db import id_tail
from ..identity_access.domain import SessionContext
from ..outcomes import OperationResult, Status, fail, succeed
from .models import MAX_RATING, MIN_RATING, Review
from .ports import CatalogRepoProtocol
from .service import CourseAggregator


logger = logging.getLogger("academy.catalog")

_COMMENT_MAX_LENGTH = 2000


def _normalize_rating(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError("invalid_rating")
    if value < MIN_RATING or value > MAX_RATING:
        raise ValueError("invalid_rating")
    return value


def _normalize_comment(value: object) -> str:
    if not isinstance(value, str):
        raise ValueError("comment_required")
    trimmed = value.strip()
    if not trimmed or len(trimmed) > _COMMENT_MAX_LENGTH:
        raise ValueError("comment_required")
    return trimmed


@dataclass(frozen=True)
class RatingBucket:
    rating: int
    count: int
    percentage: float


def rating_distribution(reviews: Sequence[Review]) -> List[RatingBucket]:
    """Count and share of each star value, 5 down to 1."""
    total = len(reviews)
    buckets: List[RatingBucket] = []
    for rating in range(MAX_RATING, MIN_RATING - 1, -1):
        n = sum(1 for r in reviews if r.rating == rating)
        buckets.append(RatingBucket(rating=rating, count=n, percentage=(n / total) * 100 if total else 0.0))
    return buckets


class ReviewService:
    def __init__(
        self,
        repo: CatalogRepoProtocol,
        aggregator: CourseAggregator,
        *,
        locale: str = DEFAULT_LOCALE,
    ) -> None:
        self._repo = repo
        self._aggregator = aggregator
        self._locale = locale

    def submit_review(self, ctx: SessionContext, course_id: str, rating: object, comment: object) -> OperationResult[Review]:
        """Validate and persist a review.

        Order of checks: authentication, input validation, enrollment. No
        request is issued unless all of them pass.
        """
        if not ctx.is_authenticated:
            return fail(Status.UNAUTHENTICATED, "login_required", locale=self._locale)
        try:
            stars = _normalize_rating(rating)
            text = _normalize_comment(comment)
        except ValueError as exc:
            return fail(Status.INVALID, str(exc), locale=self._locale)
        if not self._aggregator.is_enrolled(ctx, course_id):
            return fail(Status.FORBIDDEN, "enrollment_required", locale=self._locale)
        try:
            review = self._repo.create_review(user_id=ctx.user_id, course_id=course_id, rating=stars, comment=text)
        except LookupError:
            return fail(Status.NOT_FOUND, "course_not_found", locale=self._locale)
        except Exception as exc:
            logger.warning("create_review failed cid=%s err=%s", id_tail(course_id), exc.__class__.__name__)
            return fail(Status.FAILURE, "review_failed", locale=self._locale)
        return succeed(review, "review_added", locale=self._locale)

    def list_reviews(self, course_id: str) -> OperationResult[List[Review]]:
        try:
            reviews = self._repo.list_reviews(course_id)
        except Exception as exc:
            logger.warning("list_reviews failed cid=%s err=%s", id_tail(course_id), exc.__class__.__name__)
            return fail(Status.FAILURE, "reviews_load_failed", locale=self._locale, value=[])
        return succeed(list(reviews), locale=self._locale)


__all__ = ["RatingBucket", "ReviewService", "rating_distribution"]
