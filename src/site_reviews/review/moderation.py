"""ModerateReview — approve or reject a pending review.

Moderators can approve pending reviews for publication or reject them
with a required reason. The transition and its audit entry are saved
together.
"""

from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from site_reviews.domain import site_reviews
from site_reviews.review.review import ModerationAction, Review


@site_reviews.command(part_of="Review")
class ModerateReview:
    review_id = Identifier(required=True)
    moderator_id = Identifier(required=True)
    action = String(required=True)  # "Approve" or "Reject"
    reason = Text()  # Required for rejection


@site_reviews.command_handler(part_of=Review)
class ModerateReviewHandler:
    @handle(ModerateReview)
    def moderate_review(self, command):
        try:
            action = ModerationAction(command.action)
        except ValueError:
            raise ValidationError({"action": ["Action must be Approve or Reject"]}) from None

        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)

        if action == ModerationAction.APPROVE:
            review.approve(moderator_id=command.moderator_id, notes=command.reason)
        else:  # ModerationAction.REJECT
            review.reject(moderator_id=command.moderator_id, reason=command.reason)

        repo.add(review)
        return review.status
