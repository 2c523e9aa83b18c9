"""Pydantic request/response schemas for the Site Reviews API.

These are separate from the domain commands (anti-corruption pattern).
The API layer is the external contract and speaks camelCase JSON; commands
are internal domain concepts.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class SubmitReviewRequest(CamelModel):
    # Field checks belong to the submission gate, which must see the honeypot
    # before reporting anything about the other fields.
    rating: Any = None
    display_name: Any = None
    body: Any = None
    honeypot: Any = Field(default="", validation_alias=AliasChoices("honeypot", "hp"))


class ModerateReviewRequest(CamelModel):
    action: str  # "Approve" or "Reject"
    reason: str | None = None


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class PublishedReviewSchema(CamelModel):
    id: str
    rating: int
    display_name: str
    body: str
    created_at: datetime


class RatingSummarySchema(CamelModel):
    count: int
    average: float | None
    distribution: dict[str, int]


class ReviewListResponse(CamelModel):
    reviews: list[PublishedReviewSchema]
    summary: RatingSummarySchema
    sort: str


class SubmitReviewResponse(CamelModel):
    ok: bool = True
    message: str


class PendingReviewSchema(CamelModel):
    review_id: str
    site_slug: str
    entity_type: str
    entity_slug: str
    rating: int
    display_name: str
    body: str
    submitted_at: datetime


class ModerationQueueResponse(CamelModel):
    reviews: list[PendingReviewSchema]


class DecisionSchema(CamelModel):
    action: str
    moderator_id: str
    reason: str | None = None
    decided_at: datetime


class ReviewDetailResponse(CamelModel):
    review_id: str
    site_slug: str
    entity_type: str
    entity_slug: str
    rating: int
    display_name: str
    body: str
    status: str
    created_at: datetime
    moderated_at: datetime | None = None
    moderator_id: str | None = None
    moderation_notes: str | None = None
    decisions: list[DecisionSchema]


class ModerationResponse(CamelModel):
    review_id: str
    status: str
