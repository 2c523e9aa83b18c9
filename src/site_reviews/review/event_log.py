"""Structured log of Review events, written once the unit of work has committed.

Only ids, scope and rating are logged; display names, bodies and rejection
reasons stay out of the logs.
"""

import structlog
from protean.utils.mixins import handle

from site_reviews.domain import site_reviews
from site_reviews.review.events import ReviewApproved, ReviewRejected, ReviewSubmitted
from site_reviews.review.review import Review

logger = structlog.get_logger(__name__)


def _scope(event) -> str:
    return f"{event.site_slug}/{event.entity_type}/{event.entity_slug}"


@site_reviews.event_handler(part_of=Review)
class ReviewEventLog:
    @handle(ReviewSubmitted)
    def on_review_submitted(self, event: ReviewSubmitted) -> None:
        logger.info("review.submitted", review_id=str(event.review_id), scope=_scope(event), rating=event.rating)

    @handle(ReviewApproved)
    def on_review_approved(self, event: ReviewApproved) -> None:
        logger.info(
            "review.approved",
            review_id=str(event.review_id),
            scope=_scope(event),
            moderator_id=str(event.moderator_id),
        )

    @handle(ReviewRejected)
    def on_review_rejected(self, event: ReviewRejected) -> None:
        logger.info(
            "review.rejected",
            review_id=str(event.review_id),
            scope=_scope(event),
            moderator_id=str(event.moderator_id),
        )
