"""
Tests for Google payload parsing and review normalization
"""
from datetime import datetime

import pytest
from pydantic import ValidationError

from review_responder.models.google import GoogleReview, parse_google_timestamp, star_rating_to_int
from review_responder.services.review_service import normalize_review, review_key


class TestStarRating:

    @pytest.mark.parametrize("value,expected", [
        ("STAR_FOUR", 4),
        ("FOUR", 4),
        ("STAR_4", 4),
        ("ONE", 1),
        ("five", 5),
        ("STAR_RATING_UNSPECIFIED", 0),
        ("STAR_9", 0),
        ("", 0),
        (None, 0),
    ])
    def test_star_rating_to_int(self, value, expected):
        assert star_rating_to_int(value) == expected


class TestTimestamps:

    def test_nanosecond_precision_is_truncated(self):
        parsed = parse_google_timestamp("2017-08-13T22:18:57.123456789Z")
        assert parsed == datetime(2017, 8, 13, 22, 18, 57, 123456)

    @pytest.mark.parametrize("value,expected", [
        ("2024-03-01T12:00:56.5Z", datetime(2024, 3, 1, 12, 0, 56, 500000)),
        ("2024-03-01T12:00:56.1234Z", datetime(2024, 3, 1, 12, 0, 56, 123400)),
        ("2024-03-01T12:00:56Z", datetime(2024, 3, 1, 12, 0, 56)),
    ])
    def test_short_fractions_are_padded(self, value, expected):
        assert parse_google_timestamp(value) == expected

    def test_offset_is_converted_to_utc(self):
        parsed = parse_google_timestamp("2024-03-01T09:00:00-03:00")
        assert parsed == datetime(2024, 3, 1, 12, 0, 0)
        assert parsed.tzinfo is None


class TestGoogleReview:

    def test_reply_accepted_under_either_key(self):
        assert GoogleReview.model_validate({"reviewId": "a", "reviewReply": {"comment": "x"}}).has_reply
        assert GoogleReview.model_validate({"reviewId": "a", "reply": {}}).has_reply
        assert not GoogleReview.model_validate({"reviewId": "a", "reviewReply": None}).has_reply

    def test_unreadable_create_time_is_dropped(self):
        review = GoogleReview.model_validate({"reviewId": "a", "starRating": "FOUR", "createTime": "yesterday"})

        assert review.create_time is None
        assert review.rating == 4

    def test_review_id_required(self):
        with pytest.raises(ValidationError):
            GoogleReview.model_validate({"starRating": "FIVE"})

    def test_normalize_defaults(self):
        review = GoogleReview.model_validate({"reviewId": "abc"})

        record = normalize_review("company-1", review)

        assert record.id == review_key("company-1", "abc") == "company-1-abc"
        assert record.author == "Anônimo"
        assert record.rating == 0
        assert record.comment == ""
        assert record.answered is False
        assert record.reply is None
        assert record.created_at is None

    def test_normalize_full_review(self):
        review = GoogleReview.model_validate({
            "reviewId": "abc",
            "reviewer": {"displayName": "Maria"},
            "starRating": "STAR_FOUR",
            "comment": "Ótimo atendimento",
            "createTime": "2024-05-10T08:30:00Z",
            "reviewReply": {"comment": "Obrigado, Maria!"},
        })

        record = normalize_review("company-1", review)

        assert record.author == "Maria"
        assert record.rating == 4
        assert record.comment == "Ótimo atendimento"
        assert record.answered is True
        assert record.reply == "Obrigado, Maria!"
        assert record.created_at == datetime(2024, 5, 10, 8, 30)
