"""Review aggregate — the core of the Site Reviews domain.

A Review is an anonymous star rating plus comment left against one entity
page of one site. Content is write-once; the only change after creation is
the moderation decision, which is recorded together with an audit entry.

State Machine (3 states):
    PENDING → APPROVED | REJECTED
    APPROVED → (terminal)
    REJECTED → (terminal)

Re-review needs a new submission; decisions are never rolled back.
"""

import re
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import InvalidOperationError, ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String, Text

from site_reviews.domain import site_reviews
from site_reviews.review.events import ReviewApproved, ReviewRejected, ReviewSubmitted

RATING_MIN, RATING_MAX = 1, 5
DISPLAY_NAME_MIN, DISPLAY_NAME_MAX = 2, 40
BODY_MIN, BODY_MAX = 20, 1200

_SCOPE_TOKEN = re.compile(r"[a-z0-9-]{2,80}", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class ReviewStatus(Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class ModerationAction(Enum):
    APPROVE = "Approve"
    REJECT = "Reject"


# ---------------------------------------------------------------------------
# State Machine
# ---------------------------------------------------------------------------
_VALID_TRANSITIONS = {
    ReviewStatus.PENDING: {ReviewStatus.APPROVED, ReviewStatus.REJECTED},
    ReviewStatus.APPROVED: set(),  # Terminal state
    ReviewStatus.REJECTED: set(),  # Terminal state
}



# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@site_reviews.value_object(part_of="Review")
class ReviewScope:
    """The page a review belongs to: which site, what kind of entity, which one."""

    site_slug = String(required=True, max_length=80)
    entity_type = String(required=True, max_length=80)
    entity_slug = String(required=True, max_length=80)

    @classmethod
    def parse(cls, site_slug, entity_type, entity_slug) -> "ReviewScope":
        """Build a scope from raw path tokens, normalized to lower case."""
        tokens = (site_slug, entity_type, entity_slug)
        if not all(isinstance(token, str) and _SCOPE_TOKEN.fullmatch(token) for token in tokens):
            raise ValidationError({"scope": ["Bad params"]})
        return cls(
            site_slug=site_slug.lower(),
            entity_type=entity_type.lower(),
            entity_slug=entity_slug.lower(),
        )

    def as_path(self) -> str:
        return f"{self.site_slug}/{self.entity_type}/{self.entity_slug}"


def coerce_rating(value) -> int | None:
    """Return ``value`` as a star rating, or None when it is not a whole number in range."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        score = value
    elif isinstance(value, float) and value.is_integer():
        score = int(value)
    else:
        return None
    return score if RATING_MIN <= score <= RATING_MAX else None


def clean_submission(rating, display_name, body) -> tuple[int, str, str]:
    """Validate raw submission fields and return ``(rating, display_name, body)``.

    Text fields are trimmed before their length is checked. All field errors
    are reported together.
    """
    name = display_name.strip() if isinstance(display_name, str) else ""
    text = body.strip() if isinstance(body, str) else ""
    score = coerce_rating(rating)

    errors = {}
    if not DISPLAY_NAME_MIN <= len(name) <= DISPLAY_NAME_MAX:
        errors["display_name"] = [f"Name must be {DISPLAY_NAME_MIN}-{DISPLAY_NAME_MAX} characters"]
    if not BODY_MIN <= len(text) <= BODY_MAX:
        errors["body"] = [f"Review must be {BODY_MIN}-{BODY_MAX} characters"]
    if score is None:
        errors["rating"] = [f"Rating must be between {RATING_MIN} and {RATING_MAX}"]
    if errors:
        raise ValidationError(errors)

    return score, name, text


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@site_reviews.entity(part_of="Review")
class ModerationDecision:
    """Audit entry saved together with the moderation transition it records."""

    action = String(required=True, choices=ModerationAction, max_length=16)
    moderator_id = Identifier(required=True)
    reason = Text()
    decided_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@site_reviews.aggregate
class Review:
    """A visitor's review of one entity on one site."""

    # Scope
    site_slug = String(required=True, max_length=80)
    entity_type = String(required=True, max_length=80)
    entity_slug = String(required=True, max_length=80)

    # Content
    rating = Integer(required=True)
    display_name = String(required=True, max_length=DISPLAY_NAME_MAX)
    body = Text(required=True)

    # Status
    status = String(choices=ReviewStatus, default=ReviewStatus.PENDING.value)
    moderator_id = Identifier()
    moderation_notes = Text()
    moderated_at = DateTime()

    # Audit trail
    decisions = HasMany(ModerationDecision)

    # Timestamps
    created_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def rating_must_be_in_range(self):
        if self.rating is not None and not RATING_MIN <= self.rating <= RATING_MAX:
            raise ValidationError({"rating": [f"Rating must be between {RATING_MIN} and {RATING_MAX}"]})

    @invariant.post
    def display_name_length(self):
        if self.display_name is None:
            return
        if not DISPLAY_NAME_MIN <= len(self.display_name.strip()) <= DISPLAY_NAME_MAX:
            raise ValidationError({"display_name": [f"Name must be {DISPLAY_NAME_MIN}-{DISPLAY_NAME_MAX} characters"]})

    @invariant.post
    def body_length(self):
        if self.body is not None and not BODY_MIN <= len(self.body.strip()) <= BODY_MAX:
            raise ValidationError({"body": [f"Review must be {BODY_MIN}-{BODY_MAX} characters"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def submit(cls, scope: ReviewScope, rating, display_name, body, now: datetime | None = None) -> "Review":
        """Create a new Pending review from raw submission fields."""
        score, name, text = clean_submission(rating, display_name, body)
        now = now or datetime.now(UTC)

        review = cls(
            site_slug=scope.site_slug,
            entity_type=scope.entity_type,
            entity_slug=scope.entity_slug,
            rating=score,
            display_name=name,
            body=text,
            status=ReviewStatus.PENDING.value,
            created_at=now,
        )

        review.raise_(
            ReviewSubmitted(
                review_id=str(review.id),
                site_slug=scope.site_slug,
                entity_type=scope.entity_type,
                entity_slug=scope.entity_slug,
                rating=score,
                submitted_at=now,
            )
        )

        return review

    # -------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------
    @property
    def scope(self) -> ReviewScope:
        return ReviewScope(
            site_slug=self.site_slug,
            entity_type=self.entity_type,
            entity_slug=self.entity_slug,
        )

    @property
    def moderation_state(self) -> ReviewStatus:
        return ReviewStatus(self.status)

    @property
    def is_public(self) -> bool:
        return self.moderation_state == ReviewStatus.APPROVED

    def _assert_can_transition(self, target_status: ReviewStatus) -> None:
        """Validate state machine transition."""
        current = self.moderation_state
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidOperationError(
                {"status": [f"Cannot transition from {current.value} to {target_status.value}"]}
            )

    def _record_decision(self, action: ModerationAction, moderator_id, reason, now: datetime) -> None:
        self.status = (
            ReviewStatus.APPROVED.value if action == ModerationAction.APPROVE else ReviewStatus.REJECTED.value
        )
        self.moderator_id = str(moderator_id)
        self.moderation_notes = reason
        self.moderated_at = now
        self.add_decisions(
            ModerationDecision(
                action=action.value,
                moderator_id=str(moderator_id),
                reason=reason,
                decided_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Moderation
    # -------------------------------------------------------------------
    def approve(self, moderator_id, notes=None, now: datetime | None = None) -> None:
        """Approve the review for publication."""
        self._assert_can_transition(ReviewStatus.APPROVED)

        now = now or datetime.now(UTC)
        self._record_decision(ModerationAction.APPROVE, moderator_id, notes, now)

        self.raise_(
            ReviewApproved(
                review_id=str(self.id),
                site_slug=self.site_slug,
                entity_type=self.entity_type,
                entity_slug=self.entity_slug,
                rating=self.rating,
                moderator_id=str(moderator_id),
                approved_at=now,
            )
        )

    def reject(self, moderator_id, reason, now: datetime | None = None) -> None:
        """Reject the review. A reason is required for the audit trail."""
        self._assert_can_transition(ReviewStatus.REJECTED)
        if not reason or not str(reason).strip():
            raise ValidationError({"reason": ["Reason is required when rejecting a review"]})

        now = now or datetime.now(UTC)
        self._record_decision(ModerationAction.REJECT, moderator_id, reason, now)

        self.raise_(
            ReviewRejected(
                review_id=str(self.id),
                site_slug=self.site_slug,
                entity_type=self.entity_type,
                entity_slug=self.entity_slug,
                moderator_id=str(moderator_id),
                reason=reason,
                rejected_at=now,
            )
        )
