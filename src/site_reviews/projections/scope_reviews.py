"""ScopeReviews — the public, approved-only view of one scope.

Statistics cover every approved review of the scope; the list is capped at
the configured page size. Ordering is applied in memory with a total
tie-break (newest first, then id), so re-fetching gives the same order.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from site_reviews.config import settings
from site_reviews.projections.scope_rating import ScopeRating
from site_reviews.review.review import Review, ReviewScope, ReviewStatus


class SortOrder(Enum):
    NEWEST = "newest"
    HIGHEST = "highest"
    LOWEST = "lowest"

    @classmethod
    def parse(cls, value) -> "SortOrder":
        if value is None or value == "":
            return cls.NEWEST
        try:
            return cls(value)
        except ValueError:
            allowed = ", ".join(order.value for order in cls)
            raise ValidationError({"sort": [f"Sort must be one of {allowed}"]}) from None


@dataclass(frozen=True)
class PublishedReview:
    id: str
    rating: int
    display_name: str
    body: str
    created_at: datetime


@dataclass(frozen=True)
class ScopeReviews:
    scope: ReviewScope
    sort: SortOrder
    rating: ScopeRating
    reviews: list[PublishedReview]

    @property
    def count(self) -> int:
        return self.rating.count

    @property
    def average(self) -> float | None:
        return self.rating.average

    @property
    def distribution(self) -> dict[int, int]:
        return self.rating.distribution


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _published(review: Review) -> PublishedReview:
    return PublishedReview(
        id=str(review.id),
        rating=review.rating,
        display_name=review.display_name,
        body=review.body,
        created_at=_as_utc(review.created_at),
    )


def _newest_first(reviews: list[PublishedReview]) -> list[PublishedReview]:
    # Ties always fall back to newest first, then id, so the order is total
    return sorted(reviews, key=lambda review: (review.created_at, review.id), reverse=True)


def _in_order(reviews: list[PublishedReview], sort: SortOrder) -> list[PublishedReview]:
    ordered = _newest_first(reviews)
    if sort == SortOrder.HIGHEST:
        return sorted(ordered, key=lambda review: review.rating, reverse=True)
    if sort == SortOrder.LOWEST:
        return sorted(ordered, key=lambda review: review.rating)
    return ordered


def list_scope_reviews(
    scope: ReviewScope,
    sort: SortOrder = SortOrder.NEWEST,
    limit: int | None = None,
) -> ScopeReviews:
    """Return approved reviews of ``scope`` in ``sort`` order with their statistics."""
    limit = settings()["list_limit"] if limit is None else limit

    approved = [
        _published(review)
        for review in current_domain.repository_for(Review).find(
            site_slug=scope.site_slug,
            entity_type=scope.entity_type,
            entity_slug=scope.entity_slug,
            status=ReviewStatus.APPROVED.value,
        )
    ]

    return ScopeReviews(
        scope=scope,
        sort=sort,
        rating=ScopeRating.from_ratings(review.rating for review in approved),
        reviews=_in_order(approved, sort)[:limit],
    )
