"""Tests for submission rules — scope tokens, rating coercion and field limits."""

from datetime import UTC, datetime

import pytest
from protean.exceptions import ValidationError

from site_reviews.exceptions import error_message
from site_reviews.review.events import ReviewSubmitted
from site_reviews.review.review import Review, ReviewScope, clean_submission, coerce_rating

VALID_BODY = "Lovely spot by the canal, friendly staff and proper coffee."


class TestReviewScope:
    def test_parse_lowercases_tokens(self):
        scope = ReviewScope.parse("Saltaire-Guide", "CAFE", "The-Tea-Rooms")
        assert scope == ReviewScope(site_slug="saltaire-guide", entity_type="cafe", entity_slug="the-tea-rooms")

    def test_as_path(self):
        assert ReviewScope(site_slug="site", entity_type="barber", entity_slug="jays-cuts").as_path() == "site/barber/jays-cuts"

    @pytest.mark.parametrize(
        "tokens",
        [
            ("s", "cafe", "tea"),  # too short
            ("site", "cafe", "x" * 81),  # too long
            ("site", "cafe", "tea rooms"),  # space
            ("site", "cafe_bar", "tea"),  # underscore
            ("site", "cafe", "../etc"),
            ("site", None, "tea"),
        ],
    )
    def test_bad_tokens_are_rejected(self, tokens):
        with pytest.raises(ValidationError) as exc:
            ReviewScope.parse(*tokens)
        assert exc.value.messages == {"scope": ["Bad params"]}
        assert error_message(exc.value) == "Bad params"

    def test_boundary_lengths_are_accepted(self):
        scope = ReviewScope.parse("ab", "cafe", "x" * 80)
        assert scope.entity_slug == "x" * 80


class TestCoerceRating:
    @pytest.mark.parametrize("value,expected", [(1, 1), (5, 5), (3.0, 3), (4.0, 4)])
    def test_whole_numbers_in_range(self, value, expected):
        assert coerce_rating(value) == expected

    @pytest.mark.parametrize("value", [0, 6, -1, 4.5, "4", None, True, False, float("nan"), [4]])
    def test_everything_else_is_refused(self, value):
        assert coerce_rating(value) is None


class TestCleanSubmission:
    def test_trims_text_fields(self):
        rating, name, body = clean_submission(5, "  Sam  ", f"  {VALID_BODY}  ")
        assert (rating, name, body) == (5, "Sam", VALID_BODY)

    def test_length_is_checked_after_trimming(self):
        with pytest.raises(ValidationError) as exc:
            clean_submission(5, " S ", VALID_BODY)
        assert "display_name" in exc.value.messages

    @pytest.mark.parametrize("name", ["ab", "x" * 40])
    def test_display_name_boundaries_pass(self, name):
        assert clean_submission(3, name, VALID_BODY)[1] == name

    def test_display_name_too_long(self):
        with pytest.raises(ValidationError) as exc:
            clean_submission(3, "x" * 41, VALID_BODY)
        assert exc.value.messages["display_name"] == ["Name must be 2-40 characters"]

    @pytest.mark.parametrize("body", ["x" * 20, "x" * 1200])
    def test_body_boundaries_pass(self, body):
        assert clean_submission(3, "Sam", body)[2] == body

    @pytest.mark.parametrize("body", ["x" * 19, "x" * 1201, "", None])
    def test_body_out_of_range(self, body):
        with pytest.raises(ValidationError) as exc:
            clean_submission(3, "Sam", body)
        assert exc.value.messages["body"] == ["Review must be 20-1200 characters"]

    def test_all_field_errors_reported_together(self):
        with pytest.raises(ValidationError) as exc:
            clean_submission(7, "Sam", "too short")
        assert set(exc.value.messages) == {"rating", "body"}
        assert "Rating must be between 1 and 5" in error_message(exc.value)
        assert "Review must be 20-1200 characters" in error_message(exc.value)


class TestSubmitFactory:
    def test_submit_builds_pending_review(self):
        now = datetime(2025, 3, 5, 10, 0, tzinfo=UTC)
        scope = ReviewScope(site_slug="saltaire-guide", entity_type="cafe", entity_slug="the-tea-rooms")
        review = Review.submit(scope=scope, rating=4.0, display_name=" Sam ", body=VALID_BODY, now=now)

        assert review.id
        assert review.scope == scope
        assert review.site_slug == "saltaire-guide"
        assert review.rating == 4
        assert review.display_name == "Sam"
        assert review.created_at == now
        assert review.moderated_at is None

    def test_submit_raises_submitted_event(self):
        scope = ReviewScope(site_slug="saltaire-guide", entity_type="cafe", entity_slug="the-tea-rooms")
        review = Review.submit(scope=scope, rating=5, display_name="Sam", body=VALID_BODY)

        assert len(review._events) == 1
        event = review._events[0]
        assert isinstance(event, ReviewSubmitted)
        assert event.review_id == review.id
        assert event.entity_slug == "the-tea-rooms"

    def test_each_submission_gets_its_own_id(self):
        scope = ReviewScope(site_slug="saltaire-guide", entity_type="cafe", entity_slug="the-tea-rooms")
        first = Review.submit(scope=scope, rating=5, display_name="Sam", body=VALID_BODY)
        second = Review.submit(scope=scope, rating=5, display_name="Sam", body=VALID_BODY)
        assert first.id != second.id

    def test_invalid_submission_builds_nothing(self):
        scope = ReviewScope(site_slug="saltaire-guide", entity_type="cafe", entity_slug="the-tea-rooms")
        with pytest.raises(ValidationError):
            Review.submit(scope=scope, rating=0, display_name="Sam", body=VALID_BODY)
