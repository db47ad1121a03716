"""Aggregate statistics over a snapshot of scored posts.

Pure function of its input: no I/O, no clock, no randomness.  Posts with an
invalid or missing timestamp count toward totals and breakdowns but are
skipped for the hour buckets and the trend.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from backend.app.models.analytics import Aggregates, GroupStat, HourStat, ScoredPost, Trend

PEAK_HOUR_MIN_POSTS = 2
PEAK_HOUR_LIMIT = 3
TOP_POSTS_LIMIT = 3
HIGH_PERFORMER_FACTOR = 1.5

# (min avg percent, label), highest first. Comparison-view thresholds.
GROUP_PERFORMANCE_LABELS: tuple[tuple[float, str], ...] = (
    (70, "Excellent"),
    (50, "Good"),
    (30, "Average"),
    (10, "Low"),
)


def group_performance_label(avg_percent: float) -> str:
    for threshold, label in GROUP_PERFORMANCE_LABELS:
        if avg_percent >= threshold:
            return label
    return "Very Low"


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _sort_key(dt: datetime) -> datetime:
    """Naive timestamps are taken as UTC so mixed inputs stay comparable."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


def _group_by(
    scored: list[ScoredPost],
    key: Callable[[ScoredPost], str],
) -> list[GroupStat]:
    buckets: dict[str, list[ScoredPost]] = {}
    for item in scored:
        buckets.setdefault(key(item), []).append(item)

    stats = []
    for name, items in buckets.items():
        avg_percent = _mean([i.engagement_percent for i in items])
        stats.append(
            GroupStat(
                name=name,
                posts=len(items),
                total_likes=sum(i.post.likes for i in items),
                total_comments=sum(i.post.comments for i in items),
                total_shares=sum(i.post.shares for i in items),
                avg_weighted_score=_mean([i.weighted_score for i in items]),
                avg_engagement_percent=avg_percent,
                performance=group_performance_label(avg_percent),
            )
        )
    # sorted() is stable: ties keep first-seen order.
    return sorted(stats, key=lambda s: s.avg_engagement_percent, reverse=True)


def _hour_breakdown(dated: list[tuple[datetime, ScoredPost]]) -> list[HourStat]:
    buckets: dict[int, list[ScoredPost]] = {}
    for dt, item in dated:
        buckets.setdefault(dt.hour, []).append(item)

    hours = [
        HourStat(
            hour=hour,
            posts=len(items),
            avg_weighted_score=_mean([i.weighted_score for i in items]),
            avg_engagement_percent=_mean([i.engagement_percent for i in items]),
        )
        for hour, items in buckets.items()
    ]
    return sorted(hours, key=lambda h: h.avg_weighted_score, reverse=True)


def peak_hours(hours: list[HourStat]) -> list[int]:
    """Top hours by mean weighted score among hours with enough posts."""
    eligible = [h for h in hours if h.posts >= PEAK_HOUR_MIN_POSTS]
    eligible.sort(key=lambda h: h.avg_weighted_score, reverse=True)
    return [h.hour for h in eligible[:PEAK_HOUR_LIMIT]]


def classify_trend(dated: list[tuple[datetime, ScoredPost]]) -> Trend:
    """Compare mean weighted score of the later half against the earlier half.

    The earlier half holds ``n // 2`` posts; with an odd count the extra
    post lands in the later half.
    """
    ordered = sorted(dated, key=lambda pair: _sort_key(pair[0]))
    mid = len(ordered) // 2
    first = [item.weighted_score for _, item in ordered[:mid]]
    second = [item.weighted_score for _, item in ordered[mid:]]
    if not first or not second:
        return Trend.stable

    first_avg = _mean(first)
    second_avg = _mean(second)
    if second_avg > first_avg:
        return Trend.increasing
    if second_avg < first_avg:
        return Trend.decreasing
    return Trend.stable


def build_aggregates(scored: list[ScoredPost]) -> Aggregates:
    """Build every aggregate the dashboard and insight rules need."""
    total = len(scored)
    if total == 0:
        return Aggregates()

    total_likes = sum(s.post.likes for s in scored)
    total_comments = sum(s.post.comments for s in scored)
    total_shares = sum(s.post.shares for s in scored)
    total_weighted = sum(s.weighted_score for s in scored)
    avg_weighted = total_weighted / total

    dated = [
        (dt, s) for s in scored if (dt := s.post.created_datetime) is not None
    ]
    hours = _hour_breakdown(dated)

    top_posts = sorted(scored, key=lambda s: s.weighted_score, reverse=True)[:TOP_POSTS_LIMIT]

    return Aggregates(
        total_posts=total,
        total_likes=total_likes,
        total_comments=total_comments,
        total_shares=total_shares,
        total_weighted_score=total_weighted,
        avg_likes=total_likes / total,
        avg_comments=total_comments / total,
        avg_shares=total_shares / total,
        avg_weighted_score=avg_weighted,
        avg_engagement_percent=_mean([s.engagement_percent for s in scored]),
        platforms=_group_by(scored, lambda s: s.post.platform),
        content_types=_group_by(scored, lambda s: s.post.content_type),
        hours=hours,
        peak_hours=peak_hours(hours),
        trend=classify_trend(dated),
        top_posts=top_posts,
        best_performing_content=[s.post.display_title for s in top_posts],
        high_performer_count=sum(
            1 for s in scored if s.weighted_score > avg_weighted * HIGH_PERFORMER_FACTOR
        ),
    )
