"""Deterministic engagement scoring for content posts.

This module is the single source of truth for the weighted score and the
engagement percentage.  Every page, endpoint, and aggregate reads it.

Formula
-------
Weighted score::

    w = likes * 1 + comments * 2 + shares * 3

Engagement percentage: piecewise-linear banding of *w* into [0, 100],
multiplied by a per-platform factor, then clamped::

    w >= 1000         90 + (w - 1000) / 10000 * 10
    300 <= w < 1000   70 + (w - 300) / 700 * 20
    100 <= w < 300    40 + (w - 100) / 200 * 30
    10 <= w < 100     10 + (w - 10) / 90 * 30
    0 < w < 10        w / 10 * 10
    w == 0            0

An optional tiebreak adds a stable offset in ``[-spread, +spread]`` derived
from a hash of the post id, then clamps again.  It is off by default; equal
inputs then always yield equal percentages.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

from backend.app.models.analytics import ScoredPost
from backend.app.models.post import Post

# ---------------------------------------------------------------------------
# Constants – single source of truth for weights, bands, and multipliers
# ---------------------------------------------------------------------------

LIKE_WEIGHT = 1
COMMENT_WEIGHT = 2
SHARE_WEIGHT = 3

MIN_PERCENT = 0.0
MAX_PERCENT = 100.0


@dataclass(frozen=True)
class Band:
    """``w >= floor`` maps linearly onto ``[base, base + span]``."""

    floor: float
    base: float
    span: float
    width: float


# Highest band first.  The top band is open-ended; clamping caps it at 100.
ENGAGEMENT_BANDS: tuple[Band, ...] = (
    Band(floor=1000, base=90, span=10, width=10_000),
    Band(floor=300, base=70, span=20, width=700),
    Band(floor=100, base=40, span=30, width=200),
    Band(floor=10, base=10, span=30, width=90),
    Band(floor=0, base=0, span=10, width=10),
)

PLATFORM_MULTIPLIERS: dict[str, float] = {
    "instagram": 0.7,
    "twitter": 0.8,
    "facebook": 0.9,
    "linkedin": 1.2,
}
DEFAULT_PLATFORM_MULTIPLIER = 1.0

PLATFORM_ALIASES: dict[str, str] = {
    "x": "twitter",
}

DEFAULT_TIEBREAK_SPREAD = 2.0

# (min percent, label), highest first.
ENGAGEMENT_LABELS: tuple[tuple[float, str], ...] = (
    (80, "Excellent"),
    (60, "Good"),
    (40, "Average"),
    (20, "Low"),
)
LOWEST_LABEL = "Very Low"


# ---------------------------------------------------------------------------
# Scoring functions
# ---------------------------------------------------------------------------


def _clamp(value: float) -> float:
    return min(max(value, MIN_PERCENT), MAX_PERCENT)


def weighted_score(post: Post) -> int:
    """Return ``likes*1 + comments*2 + shares*3``; counts are already coerced."""
    return (
        post.likes * LIKE_WEIGHT
        + post.comments * COMMENT_WEIGHT
        + post.shares * SHARE_WEIGHT
    )


def banded_percent(score: float) -> float:
    """Map a weighted score onto the banding table (unclamped top band)."""
    if score <= 0:
        return 0.0
    for band in ENGAGEMENT_BANDS:
        if score >= band.floor:
            return band.base + (score - band.floor) / band.width * band.span
    return 0.0


def platform_multiplier(platform: str | None) -> float:
    """Case-insensitive multiplier lookup; unknown platforms get 1.0."""
    key = (platform or "").strip().lower()
    key = PLATFORM_ALIASES.get(key, key)
    return PLATFORM_MULTIPLIERS.get(key, DEFAULT_PLATFORM_MULTIPLIER)


def tiebreak_offset(post_id: int | str | None, spread: float = DEFAULT_TIEBREAK_SPREAD) -> float:
    """Stable offset in ``[-spread, +spread]`` derived from the post id."""
    if post_id is None or spread <= 0:
        return 0.0
    digest = hashlib.sha256(str(post_id).encode("utf-8")).digest()
    fraction = int.from_bytes(digest[:8], "big") / float(2**64 - 1)
    return (fraction * 2 - 1) * spread


def engagement_percent(
    score: float,
    platform: str | None = None,
    *,
    apply_platform: bool = True,
    post_id: int | str | None = None,
    tiebreak_spread: float | None = None,
) -> float:
    """Return the canonical engagement percentage in [0, 100].

    ``tiebreak_spread`` enables the id-derived offset; ``None`` or ``0``
    keeps the function a pure mapping of ``(score, platform)``.
    """
    percent = banded_percent(score)
    if apply_platform:
        percent *= platform_multiplier(platform)
    percent = _clamp(percent)
    if tiebreak_spread:
        percent = _clamp(percent + tiebreak_offset(post_id, tiebreak_spread))
    return percent


def percent_to_label(percent: float) -> str:
    """Human label for an engagement percentage."""
    for threshold, label in ENGAGEMENT_LABELS:
        if percent >= threshold:
            return label
    return LOWEST_LABEL


def score_post(post: Post, *, tiebreak_spread: float | None = None) -> ScoredPost:
    """Compute all derived metrics for one post."""
    score = weighted_score(post)
    percent = engagement_percent(
        score,
        post.platform,
        post_id=post.id,
        tiebreak_spread=tiebreak_spread,
    )
    return ScoredPost(
        post=post,
        weighted_score=score,
        engagement_percent=percent,
        label=percent_to_label(percent),
    )


def score_posts(posts: list[Post], *, tiebreak_spread: float | None = None) -> list[ScoredPost]:
    return [score_post(p, tiebreak_spread=tiebreak_spread) for p in posts]
