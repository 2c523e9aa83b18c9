"""SubmitReview — submit a new review for one entity page.

The gate runs in a fixed order: honeypot, field validation, throttle. A
honeypot hit is answered exactly like an accepted submission but nothing is
stored and no throttle quota is used, so ``screen_submission`` runs before a
command is ever built.
"""

import structlog
from protean.fields import Integer, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from site_reviews.domain import site_reviews
from site_reviews.exceptions import StoreFault
from site_reviews.review.review import Review, ReviewScope, clean_submission
from site_reviews.review.throttle import submission_throttle

logger = structlog.get_logger(__name__)

CONFIRMATION_MESSAGE = "Thanks, your review is submitted and will appear once approved."


def is_honeypot_hit(value) -> bool:
    if value is None:
        return False
    return bool(str(value).strip())


def screen_submission(scope: ReviewScope, rating, display_name, body, honeypot=None):
    """Run the honeypot and field checks on raw input.

    Returns None for a honeypot hit, which callers answer like an accepted
    submission. Otherwise returns the cleaned ``(rating, display_name, body)``
    or raises ``ValidationError`` listing every field problem.
    """
    if is_honeypot_hit(honeypot):
        logger.info("review.honeypot", scope=scope.as_path())
        return None
    return clean_submission(rating, display_name, body)


@site_reviews.command(part_of="Review")
class SubmitReview:
    site_slug = String(required=True, max_length=80)
    entity_type = String(required=True, max_length=80)
    entity_slug = String(required=True, max_length=80)
    rating = Integer(required=True)
    display_name = String(required=True, max_length=40)
    body = Text(required=True)
    client_address = String(default="unknown")


@site_reviews.command_handler(part_of=Review)
class SubmitReviewHandler:
    @handle(SubmitReview)
    def submit_review(self, command):
        scope = ReviewScope(
            site_slug=command.site_slug,
            entity_type=command.entity_type,
            entity_slug=command.entity_slug,
        )
        review = Review.submit(
            scope=scope,
            rating=command.rating,
            display_name=command.display_name,
            body=command.body,
        )

        throttle = submission_throttle()
        throttle_key = f"{scope.as_path()}:{command.client_address}"
        throttle.hit(throttle_key)

        try:
            current_domain.repository_for(Review).add(review)
        except StoreFault:
            throttle.release(throttle_key)
            raise

        return str(review.id)
