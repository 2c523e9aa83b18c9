"""ModerationQueue — pending reviews awaiting moderator action, oldest first."""

from dataclasses import dataclass
from datetime import datetime

from protean.utils.globals import current_domain

from site_reviews.projections.scope_reviews import _as_utc
from site_reviews.review.review import Review, ReviewScope, ReviewStatus


@dataclass(frozen=True)
class PendingReview:
    review_id: str
    scope: ReviewScope
    rating: int
    display_name: str
    body: str
    submitted_at: datetime


def pending_reviews(scope: ReviewScope | None = None, limit: int | None = None) -> list[PendingReview]:
    filters = {"status": ReviewStatus.PENDING.value}
    if scope is not None:
        filters.update(
            site_slug=scope.site_slug,
            entity_type=scope.entity_type,
            entity_slug=scope.entity_slug,
        )

    queue = sorted(
        (
            PendingReview(
                review_id=str(review.id),
                scope=review.scope,
                rating=review.rating,
                display_name=review.display_name,
                body=review.body,
                submitted_at=_as_utc(review.created_at),
            )
            for review in current_domain.repository_for(Review).find(**filters)
        ),
        key=lambda item: (item.submitted_at, item.review_id),
    )
    return queue if limit is None else queue[:limit]
