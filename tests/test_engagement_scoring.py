"""Tests for weighted score, engagement percentage, and labels."""

import pytest
from backend.app.models.post import Post
from backend.app.services.engagement_scoring import (
    DEFAULT_PLATFORM_MULTIPLIER,
    banded_percent,
    engagement_percent,
    percent_to_label,
    platform_multiplier,
    score_post,
    score_posts,
    tiebreak_offset,
    weighted_score,
)

# ---------------------------------------------------------------------------
# Weighted score
# ---------------------------------------------------------------------------


class TestWeightedScore:
    def test_weights_are_one_two_three(self) -> None:
        post = Post(likes=10, comments=5, shares=2)
        assert weighted_score(post) == 10 + 10 + 6

    def test_zero_counts(self) -> None:
        assert weighted_score(Post()) == 0

    def test_malformed_counts_score_as_zero(self) -> None:
        post = Post.from_record({"likes": "abc", "comments": None, "shares": -4})
        assert weighted_score(post) == 0

    @pytest.mark.parametrize("field", ["likes", "comments", "shares"])
    def test_monotonic_in_each_count(self, field: str) -> None:
        base = {"likes": 7, "comments": 3, "shares": 2}
        previous = weighted_score(Post(**base))
        for value in (base[field] + 1, base[field] + 10, base[field] + 500):
            current = weighted_score(Post(**{**base, field: value}))
            assert current > previous
            previous = current

    def test_never_negative(self) -> None:
        for record in ({}, {"likes": -1}, {"comments": "-9"}, {"shares": -0.5}):
            assert weighted_score(Post.from_record(record)) >= 0


# ---------------------------------------------------------------------------
# Banding table
# ---------------------------------------------------------------------------


class TestBandedPercent:
    @pytest.mark.parametrize(
        ("score", "expected"),
        [
            (0, 0.0),
            (5, 5.0),
            (10, 10.0),
            (55, 25.0),
            (100, 40.0),
            (135, 45.25),
            (300, 70.0),
            (650, 80.0),
            (1000, 90.0),
            (6000, 95.0),
        ],
    )
    def test_band_values(self, score: int, expected: float) -> None:
        assert banded_percent(score) == pytest.approx(expected)

    def test_bands_are_continuous_at_boundaries(self) -> None:
        for floor in (10, 100, 300, 1000):
            assert banded_percent(floor - 1e-9) == pytest.approx(banded_percent(floor))

    def test_monotonic(self) -> None:
        values = [banded_percent(w) for w in range(0, 2000, 7)]
        assert values == sorted(values)

    def test_negative_score_is_zero(self) -> None:
        assert banded_percent(-5) == 0.0


# ---------------------------------------------------------------------------
# Platform multipliers
# ---------------------------------------------------------------------------


class TestPlatformMultiplier:
    @pytest.mark.parametrize(
        ("platform", "expected"),
        [
            ("Instagram", 0.7),
            ("Twitter", 0.8),
            ("Facebook", 0.9),
            ("LinkedIn", 1.2),
        ],
    )
    def test_known_platforms(self, platform: str, expected: float) -> None:
        assert platform_multiplier(platform) == expected

    def test_case_and_whitespace_insensitive(self) -> None:
        assert platform_multiplier("  LINKEDIN ") == 1.2
        assert platform_multiplier("instagram") == 0.7

    def test_x_is_twitter(self) -> None:
        assert platform_multiplier("X") == platform_multiplier("Twitter")

    def test_unknown_platform_is_neutral(self) -> None:
        assert platform_multiplier("TikTok") == DEFAULT_PLATFORM_MULTIPLIER
        assert platform_multiplier(None) == DEFAULT_PLATFORM_MULTIPLIER
        assert platform_multiplier("") == DEFAULT_PLATFORM_MULTIPLIER


# ---------------------------------------------------------------------------
# Engagement percentage
# ---------------------------------------------------------------------------


class TestEngagementPercent:
    def test_linkedin_worked_example(self) -> None:
        assert engagement_percent(135, "LinkedIn") == pytest.approx(54.3)

    def test_instagram_worked_example(self) -> None:
        assert engagement_percent(170, "Instagram") == pytest.approx(35.35)

    def test_without_platform_factor(self) -> None:
        assert engagement_percent(135, "LinkedIn", apply_platform=False) == pytest.approx(45.25)

    def test_clamped_to_hundred(self) -> None:
        assert engagement_percent(50_000, "LinkedIn") == 100.0
        assert engagement_percent(50_000, "Other") == 100.0

    def test_zero_score_is_zero_everywhere(self) -> None:
        for platform in ("LinkedIn", "Instagram", "Other", None):
            assert engagement_percent(0, platform) == 0.0

    def test_equal_inputs_equal_output(self) -> None:
        a = Post(id=1, platform="Facebook", likes=40, comments=4, shares=1)
        b = Post(id=2, platform="Facebook", likes=40, comments=4, shares=1)
        assert score_post(a).engagement_percent == score_post(b).engagement_percent


# ---------------------------------------------------------------------------
# Deterministic tiebreak
# ---------------------------------------------------------------------------


class TestTiebreak:
    def test_offset_is_stable(self) -> None:
        assert tiebreak_offset(42, 2.0) == tiebreak_offset(42, 2.0)

    def test_offset_within_spread(self) -> None:
        for post_id in range(50):
            assert -2.0 <= tiebreak_offset(post_id, 2.0) <= 2.0

    def test_no_id_or_zero_spread_means_no_offset(self) -> None:
        assert tiebreak_offset(None, 2.0) == 0.0
        assert tiebreak_offset(7, 0.0) == 0.0

    def test_tiebreak_separates_equal_posts(self) -> None:
        a = Post(id=1, platform="LinkedIn", likes=100, comments=10, shares=5)
        b = Post(id=2, platform="LinkedIn", likes=100, comments=10, shares=5)
        pa = score_post(a, tiebreak_spread=2.0).engagement_percent
        pb = score_post(b, tiebreak_spread=2.0).engagement_percent
        assert pa != pb
        assert abs(pa - 54.3) <= 2.0

    def test_tiebreak_result_still_clamped(self) -> None:
        for post_id in range(20):
            assert engagement_percent(0, post_id=post_id, tiebreak_spread=2.0) >= 0.0
            assert engagement_percent(50_000, post_id=post_id, tiebreak_spread=2.0) <= 100.0


# ---------------------------------------------------------------------------
# Labels
# ---------------------------------------------------------------------------


class TestLabels:
    @pytest.mark.parametrize(
        ("percent", "label"),
        [
            (100, "Excellent"),
            (80, "Excellent"),
            (79.9, "Good"),
            (60, "Good"),
            (40, "Average"),
            (20, "Low"),
            (19.9, "Very Low"),
            (0, "Very Low"),
        ],
    )
    def test_thresholds(self, percent: float, label: str) -> None:
        assert percent_to_label(percent) == label


# ---------------------------------------------------------------------------
# score_post / score_posts
# ---------------------------------------------------------------------------


class TestScorePost:
    def test_scored_post_fields(self) -> None:
        post = Post(id=1, platform="LinkedIn", likes=100, comments=10, shares=5)
        scored = score_post(post)
        assert scored.weighted_score == 135
        assert scored.engagement_percent == pytest.approx(54.3)
        assert scored.label == "Average"
        assert scored.post is post

    def test_score_posts_preserves_order(self) -> None:
        posts = [Post(id=i, likes=i * 10) for i in range(1, 4)]
        assert [s.post.id for s in score_posts(posts)] == [1, 2, 3]
