"""ReviewDetail — full moderator view of one review, including its audit trail."""

from dataclasses import dataclass
from datetime import datetime

from protean.utils.globals import current_domain

from site_reviews.projections.scope_reviews import _as_utc
from site_reviews.review.review import Review, ReviewScope


@dataclass(frozen=True)
class DecisionRecord:
    action: str
    moderator_id: str
    reason: str | None
    decided_at: datetime


@dataclass(frozen=True)
class ReviewDetail:
    review_id: str
    scope: ReviewScope
    rating: int
    display_name: str
    body: str
    status: str
    created_at: datetime
    moderated_at: datetime | None
    moderator_id: str | None
    moderation_notes: str | None
    decisions: list[DecisionRecord]


def review_detail(review_id: str) -> ReviewDetail:
    """Raises ``ObjectNotFoundError`` when no review has ``review_id``."""
    review = current_domain.repository_for(Review).get(str(review_id))

    return ReviewDetail(
        review_id=str(review.id),
        scope=review.scope,
        rating=review.rating,
        display_name=review.display_name,
        body=review.body,
        status=review.status,
        created_at=_as_utc(review.created_at),
        moderated_at=_as_utc(review.moderated_at) if review.moderated_at else None,
        moderator_id=str(review.moderator_id) if review.moderator_id else None,
        moderation_notes=review.moderation_notes,
        decisions=sorted(
            (
                DecisionRecord(
                    action=decision.action,
                    moderator_id=str(decision.moderator_id),
                    reason=decision.reason,
                    decided_at=_as_utc(decision.decided_at),
                )
                for decision in review.decisions
            ),
            key=lambda record: record.decided_at,
        ),
    )
