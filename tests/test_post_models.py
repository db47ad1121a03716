"""Tests for post normalisation and the create-post request model."""

import math
from datetime import UTC, datetime
from fractions import Fraction

import pytest
from backend.app.models.post import (
    DEFAULT_CONTENT_TYPE,
    DEFAULT_PLATFORM,
    MAX_ENGAGEMENT_COUNT,
    UNTITLED_POST,
    Post,
    PostCreate,
    coerce_count,
)
from backend.app.services.engagement_scoring import score_post
from pydantic import ValidationError

# ---------------------------------------------------------------------------
# Count coercion
# ---------------------------------------------------------------------------


class TestCoerceCount:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (12, 12),
            ("12", 12),
            (" 7 ", 7),
            (3.9, 3),
            (None, 0),
            ("", 0),
            ("abc", 0),
            (-5, 0),
            (True, 0),
            (math.nan, 0),
            (math.inf, 0),
            ([1, 2], 0),
            (2**53 + 1, 2**53 + 1),
            (10**400, MAX_ENGAGEMENT_COUNT),
            (1e300, MAX_ENGAGEMENT_COUNT),
            (Fraction(10**400), 0),
            ("1e400", 0),
        ],
    )
    def test_coercion(self, raw: object, expected: int) -> None:
        assert coerce_count(raw) == expected


# ---------------------------------------------------------------------------
# Record normalisation
# ---------------------------------------------------------------------------


class TestFromRecord:
    def test_never_rejects_malformed_counts(self) -> None:
        post = Post.from_record({"likes": "lots", "comments": None, "shares": -1})
        assert (post.likes, post.comments, post.shares) == (0, 0, 0)

    def test_oversized_counts_are_capped(self) -> None:
        post = Post.from_record({"likes": 10**400, "comments": 10**400, "shares": 10**400})
        assert (post.likes, post.comments, post.shares) == (MAX_ENGAGEMENT_COUNT,) * 3
        scored = score_post(post)
        assert scored.weighted_score == 6 * MAX_ENGAGEMENT_COUNT
        assert 0.0 <= scored.engagement_percent <= 100.0

    def test_missing_platform_defaults(self) -> None:
        assert Post.from_record({}).platform == DEFAULT_PLATFORM

    def test_blank_platform_defaults(self) -> None:
        assert Post.from_record({"platform": "   "}).platform == DEFAULT_PLATFORM

    def test_capitalised_platform_key(self) -> None:
        assert Post.from_record({"Platform": "Instagram"}).platform == "Instagram"

    def test_content_type_aliases(self) -> None:
        assert Post.from_record({"contentType": "reels"}).content_type == "reels"
        assert Post.from_record({"type": "video"}).content_type == "video"
        assert Post.from_record({}).content_type == DEFAULT_CONTENT_TYPE

    def test_created_at_aliases(self) -> None:
        post = Post.from_record({"createdAt": "2024-03-01T09:30:00Z"})
        assert post.created_at == "2024-03-01T09:30:00Z"

    def test_datetime_created_at_stringified(self) -> None:
        stamp = datetime(2024, 3, 1, 9, 30, tzinfo=UTC)
        post = Post.from_record({"created_at": stamp})
        assert post.created_at == stamp.isoformat()

    def test_unknown_keys_ignored(self) -> None:
        post = Post.from_record({"title": "Hi", "user_id": "abc", "extra": [1]})
        assert post.title == "Hi"


class TestDerivedFields:
    def test_display_title_prefers_title(self) -> None:
        assert Post(id=3, title="Launch day").display_title == "Launch day"

    def test_display_title_falls_back_to_id(self) -> None:
        assert Post(id=7).display_title == "Post #7"

    def test_display_title_untitled(self) -> None:
        assert Post().display_title == UNTITLED_POST

    def test_blank_title_treated_as_missing(self) -> None:
        assert Post.from_record({"id": 2, "title": "  "}).display_title == "Post #2"

    def test_created_datetime_parses_iso(self) -> None:
        dt = Post(created_at="2024-03-01T14:05:00+00:00").created_datetime
        assert dt is not None
        assert dt.hour == 14

    def test_created_datetime_invalid_is_none(self) -> None:
        assert Post(created_at="yesterday").created_datetime is None
        assert Post().created_datetime is None


# ---------------------------------------------------------------------------
# PostCreate
# ---------------------------------------------------------------------------


class TestPostCreate:
    def test_minimal_body(self) -> None:
        body = PostCreate(title="New post")
        assert body.likes == 0
        assert body.platform is None

    def test_empty_title_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PostCreate(title="")

    def test_negative_counts_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PostCreate(title="x", likes=-1)

    def test_counts_above_ceiling_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PostCreate(title="x", shares=MAX_ENGAGEMENT_COUNT + 1)
