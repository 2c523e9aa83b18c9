"""Domain events for the Review aggregate.

All events are versioned, immutable facts representing state changes.
They carry the scope so consumers never have to load the review to know
which page changed, and never carry the review's display name or body.
"""

from protean.fields import DateTime, Identifier, Integer, String, Text

from site_reviews.domain import site_reviews


@site_reviews.event(part_of="Review")
class ReviewSubmitted:
    """A visitor submitted a review; it waits for moderation."""

    __version__ = "v1"

    review_id = Identifier(required=True)
    site_slug = String(required=True, max_length=80)
    entity_type = String(required=True, max_length=80)
    entity_slug = String(required=True, max_length=80)
    rating = Integer(required=True)
    submitted_at = DateTime(required=True)


@site_reviews.event(part_of="Review")
class ReviewApproved:
    """A moderator approved the review for publication."""

    __version__ = "v1"

    review_id = Identifier(required=True)
    site_slug = String(required=True, max_length=80)
    entity_type = String(required=True, max_length=80)
    entity_slug = String(required=True, max_length=80)
    rating = Integer(required=True)
    moderator_id = Identifier(required=True)
    approved_at = DateTime(required=True)


@site_reviews.event(part_of="Review")
class ReviewRejected:
    """A moderator rejected the review. It will never be shown."""

    __version__ = "v1"

    review_id = Identifier(required=True)
    site_slug = String(required=True, max_length=80)
    entity_type = String(required=True, max_length=80)
    entity_slug = String(required=True, max_length=80)
    moderator_id = Identifier(required=True)
    reason = Text(required=True)
    rejected_at = DateTime(required=True)
