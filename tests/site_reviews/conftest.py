from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from protean import current_domain
from sqlalchemy.exc import OperationalError

from site_reviews.api.service import build_app
from site_reviews.domain import site_reviews
from site_reviews.review.review import Review, ReviewScope, ReviewStatus

BODY = "Lovely spot by the canal, friendly staff and proper coffee."
MODERATOR_TOKEN = "test-moderator-token"
BASE_TIME = datetime(2025, 3, 5, 10, 0, tzinfo=UTC)


@pytest.fixture()
def scope():
    return ReviewScope(site_slug="saltaire-guide", entity_type="cafe", entity_slug="the-tea-rooms")


@pytest.fixture()
def client():
    return TestClient(build_app(site_reviews))


@pytest.fixture()
def moderator_headers():
    return {"Authorization": f"Bearer {MODERATOR_TOKEN}"}


@pytest.fixture()
def make_review(scope):
    """Store a review directly, optionally already moderated."""

    def _make(rating=4, status=ReviewStatus.PENDING, minutes=0, display_name="Sam Walker", body=BODY, review_scope=None):
        created_at = BASE_TIME + timedelta(minutes=minutes)
        review = Review.submit(
            scope=review_scope or scope,
            rating=rating,
            display_name=display_name,
            body=body,
            now=created_at,
        )
        if status == ReviewStatus.APPROVED:
            review.approve("mod-test", now=created_at + timedelta(hours=1))
        elif status == ReviewStatus.REJECTED:
            review.reject("mod-test", "Spam", now=created_at + timedelta(hours=1))

        current_domain.repository_for(Review).add(review)
        return review

    return _make


@pytest.fixture()
def broken_store(monkeypatch):
    """Make every read and write of the review store fail like a lost database."""

    def unavailable(repository):
        raise OperationalError("SELECT 1", {}, Exception("unable to open database file"))

    monkeypatch.setattr(type(current_domain.repository_for(Review)), "_dao", property(unavailable))
