"""FastAPI routes for the Site Reviews bounded context.

Each route translates between Pydantic schemas (external contract) and
Protean commands or projections (internal domain concepts).
"""

import secrets

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from site_reviews.api.schemas import (
    DecisionSchema,
    ModerateReviewRequest,
    ModerationQueueResponse,
    ModerationResponse,
    PendingReviewSchema,
    PublishedReviewSchema,
    RatingSummarySchema,
    ReviewDetailResponse,
    ReviewListResponse,
    SubmitReviewRequest,
    SubmitReviewResponse,
)
from site_reviews.config import moderator_tokens, settings
from site_reviews.projections.moderation_queue import pending_reviews
from site_reviews.projections.review_detail import review_detail
from site_reviews.projections.scope_reviews import SortOrder, list_scope_reviews
from site_reviews.review.moderation import ModerateReview
from site_reviews.review.review import ReviewScope
from site_reviews.review.submission import CONFIRMATION_MESSAGE, SubmitReview, screen_submission

review_router = APIRouter(prefix="/reviews", tags=["reviews"])
moderation_router = APIRouter(prefix="/moderation", tags=["moderation"])

_bearer = HTTPBearer(auto_error=False)


def _client_address(request: Request) -> str:
    if settings()["rate_limit"]["trust_proxy_headers"]:
        forwarded = request.headers.get("x-forwarded-for", "")
        if forwarded.strip():
            return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


# ---------------------------------------------------------------------------
# Public review routes
# ---------------------------------------------------------------------------
@review_router.get("/{site_slug}/{entity_type}/{entity_slug}", response_model=ReviewListResponse)
async def list_reviews(site_slug: str, entity_type: str, entity_slug: str, sort: str | None = None):
    """List approved reviews of one entity with their rating summary."""
    scope = ReviewScope.parse(site_slug, entity_type, entity_slug)
    result = list_scope_reviews(scope, SortOrder.parse(sort))

    return ReviewListResponse(
        reviews=[
            PublishedReviewSchema(
                id=review.id,
                rating=review.rating,
                display_name=review.display_name,
                body=review.body,
                created_at=review.created_at,
            )
            for review in result.reviews
        ],
        summary=RatingSummarySchema(
            count=result.count,
            average=result.average,
            distribution={str(score): count for score, count in result.distribution.items()},
        ),
        sort=result.sort.value,
    )


@review_router.post("/{site_slug}/{entity_type}/{entity_slug}", status_code=202, response_model=SubmitReviewResponse)
async def submit_review(
    site_slug: str,
    entity_type: str,
    entity_slug: str,
    body: SubmitReviewRequest,
    request: Request,
):
    """Submit a review. It stays hidden until a moderator approves it."""
    scope = ReviewScope.parse(site_slug, entity_type, entity_slug)
    screened = screen_submission(scope, body.rating, body.display_name, body.body, honeypot=body.honeypot)
    if screened is None:
        return SubmitReviewResponse(message=CONFIRMATION_MESSAGE)

    rating, display_name, text = screened
    command = SubmitReview(
        site_slug=scope.site_slug,
        entity_type=scope.entity_type,
        entity_slug=scope.entity_slug,
        rating=rating,
        display_name=display_name,
        body=text,
        client_address=_client_address(request),
    )
    current_domain.process(command, asynchronous=False)
    return SubmitReviewResponse(message=CONFIRMATION_MESSAGE)


# ---------------------------------------------------------------------------
# Moderator routes
# ---------------------------------------------------------------------------
def require_moderator(credentials: HTTPAuthorizationCredentials | None = Depends(_bearer)) -> str:
    """Resolve the bearer token to a moderator id, or refuse with 401."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=401,
            detail="Moderator token required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    presented = credentials.credentials.encode()
    for token, moderator_id in moderator_tokens().items():
        if secrets.compare_digest(token.encode(), presented):
            return moderator_id

    raise HTTPException(
        status_code=401,
        detail="Invalid moderator token",
        headers={"WWW-Authenticate": "Bearer"},
    )


@moderation_router.get("/queue", response_model=ModerationQueueResponse)
async def moderation_queue(
    site: str | None = None,
    entity: str | None = None,
    slug: str | None = None,
    moderator_id: str = Depends(require_moderator),
):
    """Pending reviews, oldest first, optionally for one scope."""
    scope = None
    if site or entity or slug:
        if not (site and entity and slug):
            raise ValidationError({"scope": ["Bad params"]})
        scope = ReviewScope.parse(site, entity, slug)

    return ModerationQueueResponse(
        reviews=[
            PendingReviewSchema(
                review_id=item.review_id,
                site_slug=item.scope.site_slug,
                entity_type=item.scope.entity_type,
                entity_slug=item.scope.entity_slug,
                rating=item.rating,
                display_name=item.display_name,
                body=item.body,
                submitted_at=item.submitted_at,
            )
            for item in pending_reviews(scope)
        ]
    )


@moderation_router.get("/reviews/{review_id}", response_model=ReviewDetailResponse)
async def get_review(review_id: str, moderator_id: str = Depends(require_moderator)):
    """Full detail of one review, including its moderation audit trail."""
    detail = review_detail(review_id)
    return ReviewDetailResponse(
        review_id=detail.review_id,
        site_slug=detail.scope.site_slug,
        entity_type=detail.scope.entity_type,
        entity_slug=detail.scope.entity_slug,
        rating=detail.rating,
        display_name=detail.display_name,
        body=detail.body,
        status=detail.status,
        created_at=detail.created_at,
        moderated_at=detail.moderated_at,
        moderator_id=detail.moderator_id,
        moderation_notes=detail.moderation_notes,
        decisions=[
            DecisionSchema(
                action=decision.action,
                moderator_id=decision.moderator_id,
                reason=decision.reason,
                decided_at=decision.decided_at,
            )
            for decision in detail.decisions
        ],
    )


@moderation_router.put("/reviews/{review_id}", response_model=ModerationResponse)
async def moderate_review(
    review_id: str,
    body: ModerateReviewRequest,
    moderator_id: str = Depends(require_moderator),
):
    """Approve or reject a pending review."""
    command = ModerateReview(
        review_id=review_id,
        moderator_id=moderator_id,
        action=body.action,
        reason=body.reason,
    )
    status = current_domain.process(command, asynchronous=False)
    return ModerationResponse(review_id=review_id, status=status)
