"""Shared BDD fixtures and step definitions for Site Reviews."""

import pytest
from protean import current_domain
from protean.exceptions import InvalidOperationError, ValidationError
from pytest_bdd import given, parsers, then

from site_reviews.review.events import ReviewApproved, ReviewRejected, ReviewSubmitted
from site_reviews.review.review import Review, ReviewScope

BODY = "Lovely spot by the canal, friendly staff and proper coffee."

_REVIEW_EVENT_CLASSES = {
    "ReviewSubmitted": ReviewSubmitted,
    "ReviewApproved": ReviewApproved,
    "ReviewRejected": ReviewRejected,
}


@pytest.fixture()
def error():
    """Container for captured domain errors."""
    return {"exc": None}


def _submitted_review():
    review = Review.submit(
        scope=ReviewScope(site_slug="saltaire-guide", entity_type="cafe", entity_slug="the-tea-rooms"),
        rating=4,
        display_name="Sam Walker",
        body=BODY,
    )
    review._events.clear()
    return review


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a pending review", target_fixture="review")
def pending_review():
    return _submitted_review()


@given("an approved review", target_fixture="review")
def approved_review():
    review = _submitted_review()
    review.approve(moderator_id="mod-001")
    review._events.clear()
    return review


@given("a stored pending review", target_fixture="review")
def stored_pending_review():
    repo = current_domain.repository_for(Review)
    review = _submitted_review()
    repo.add(review)
    return repo.get(review.id)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the review status is "{status}"'))
def review_status_is(review, status):
    assert review.status == status


@then("the review action fails with a validation error")
def review_action_fails_validation(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


@then("the review action fails with an invalid operation error")
def review_action_fails_invalid_operation(error):
    assert error["exc"] is not None, "Expected an invalid operation error but none was raised"
    assert isinstance(error["exc"], InvalidOperationError)


@then(parsers.cfparse("a {event_type} event is raised"))
def review_event_raised(review, event_type):
    event_cls = _REVIEW_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in review._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in review._events]}"


@then(parsers.cfparse("the audit trail length is {count:d}"))
def audit_trail_length(review, count):
    assert len(review.decisions) == count
