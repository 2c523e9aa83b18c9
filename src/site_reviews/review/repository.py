"""Repository for the Review aggregate.

Adds the reads the projections need and two guarantees the base repository
does not give: store failures surface as ``StoreFault``, and a moderation
decision made on a stale copy of a review is refused instead of
overwriting the decision that was saved first.
"""

import structlog
from protean.exceptions import InvalidOperationError, ObjectNotFoundError
from sqlalchemy.exc import SQLAlchemyError

from site_reviews.domain import site_reviews
from site_reviews.exceptions import StoreFault
from site_reviews.review.review import Review, ReviewStatus

logger = structlog.get_logger(__name__)

PAGE_SIZE = 100


@site_reviews.repository(part_of=Review)
class ReviewRepository:
    def add(self, review):
        try:
            self._refuse_stale_decision(review)
            return super().add(review)
        except SQLAlchemyError as exc:
            logger.exception("store.fault", operation="add", error=str(exc))
            raise StoreFault("Review store unavailable") from exc

    def get(self, identifier):
        try:
            return super().get(identifier)
        except ObjectNotFoundError:
            raise ObjectNotFoundError({"review": [f"Review {identifier} not found"]}) from None
        except SQLAlchemyError as exc:
            logger.exception("store.fault", operation="get", error=str(exc))
            raise StoreFault("Review store unavailable") from exc

    def find(self, **filters) -> list[Review]:
        """Every review matching ``filters``, read page by page."""
        query = self._dao.query.filter(**filters).order_by("id")
        reviews, offset = [], 0
        try:
            while True:
                page = query.offset(offset).limit(PAGE_SIZE).all()
                reviews.extend(page.items)
                offset += PAGE_SIZE
                if not page.items or offset >= page.total:
                    return reviews
        except SQLAlchemyError as exc:
            logger.exception("store.fault", operation="find", error=str(exc))
            raise StoreFault("Review store unavailable") from exc

    def _refuse_stale_decision(self, review) -> None:
        # Decisions are final: once the stored copy has one, a copy carrying
        # a decision the store has never seen was moderated concurrently.
        if review.status == ReviewStatus.PENDING.value:
            return
        try:
            stored = self._dao.get(review.id)
        except ObjectNotFoundError:
            return

        if stored.status == ReviewStatus.PENDING.value:
            return
        known = {str(decision.id) for decision in stored.decisions}
        if any(str(decision.id) not in known for decision in review.decisions):
            logger.warning("review.stale_decision", review_id=str(review.id), stored_status=stored.status)
            raise InvalidOperationError(
                {"status": ["Review was moderated concurrently, reload and try again"]}
            )
