"""Rule-based insight statements derived from aggregate statistics.

Rules run in a fixed order and each fires independently.  Confidence
values are policy constants, not statistical estimates.
"""

from __future__ import annotations

from backend.app.models.analytics import (
    Aggregates,
    GroupStat,
    Impact,
    Insight,
    InsightCategory,
    Trend,
)

MAX_INSIGHTS = 10
ALL_PLATFORMS = "All Platforms"

DOMINANCE_RATIO = 1.5
HIGH_PERFORMER_TARGET = 0.30
COMMENT_LIKE_RATIO_FLOOR = 0.10
PLATFORM_CARD_LIMIT = 3
PLATFORM_CARD_MIN_POSTS = 3
TITLE_PREVIEW_CHARS = 40

CONFIDENCE_PLATFORM_DOMINANCE = 0.85
CONFIDENCE_PEAK_TIMING = 0.78
CONFIDENCE_TREND = 0.82
CONFIDENCE_TOP_CONTENT = 0.9
CONFIDENCE_HIGH_PERFORMER_RATIO = 0.75
CONFIDENCE_COMMENT_RATIO = 0.8
CONFIDENCE_PLATFORM_CARD = 0.88


def _rank_by_weighted_score(agg: Aggregates) -> list[GroupStat]:
    """Platforms ordered for the dominance rule and the per-platform cards.

    Both rules rank by mean weighted score; ties keep breakdown order.
    """
    return sorted(agg.platforms, key=lambda p: p.avg_weighted_score, reverse=True)


def _platform_dominance(agg: Aggregates) -> dict | None:
    if len(agg.platforms) < 2:
        return None
    ranked = _rank_by_weighted_score(agg)
    best, worst = ranked[0], ranked[-1]
    if not best.avg_weighted_score > worst.avg_weighted_score * DOMINANCE_RATIO:
        return None
    if worst.avg_weighted_score > 0:
        lead = f"{round(best.avg_weighted_score / worst.avg_weighted_score * 100)}% of"
    else:
        lead = "well above"
    return dict(
        title=f"{best.name} Outperforming Other Platforms",
        description=(
            f"{best.name} averages {round(best.avg_weighted_score)} weighted engagement, "
            f"{lead} {worst.name}'s average. Focus your efforts here."
        ),
        category=InsightCategory.performance,
        platform=best.name,
        confidence=CONFIDENCE_PLATFORM_DOMINANCE,
        data_points=[
            f"{best.name}: {round(best.avg_weighted_score)} avg engagement",
            f"{worst.name}: {round(worst.avg_weighted_score)} avg engagement",
            f"{best.posts} posts on {best.name}",
        ],
        impact=Impact.high,
    )


def _peak_timing(agg: Aggregates) -> dict | None:
    if not agg.peak_hours:
        return None
    points = []
    for hour in agg.peak_hours:
        stat = agg.hour_stat(hour)
        avg = round(stat.avg_weighted_score) if stat else 0
        points.append(f"{hour}:00 - {hour + 1}:00: {avg} avg engagement")
    best_hour = agg.peak_hours[0]
    best = agg.hour_stat(best_hour)
    return dict(
        title="Optimal Posting Times Identified",
        description=(
            f"Posts published around {best_hour}:00 average "
            f"{round(best.avg_weighted_score) if best else 0} weighted engagement. "
            "Schedule your content during peak hours."
        ),
        category=InsightCategory.timing,
        platform=ALL_PLATFORMS,
        confidence=CONFIDENCE_PEAK_TIMING,
        data_points=points,
        impact=Impact.medium,
    )


def _trend(agg: Aggregates) -> dict | None:
    if agg.trend == Trend.stable:
        return None
    increasing = agg.trend == Trend.increasing
    return dict(
        title=f"Engagement Trend: {'Improving' if increasing else 'Declining'}",
        description=(
            f"Your content engagement is {agg.trend.value}. "
            + ("Keep up the good work!" if increasing else "Consider revising your content strategy.")
        ),
        category=InsightCategory.performance,
        platform=ALL_PLATFORMS,
        confidence=CONFIDENCE_TREND,
        data_points=[
            f"Average engagement: {round(agg.avg_weighted_score)}",
            f"Total posts analyzed: {agg.total_posts}",
            f"Trend: {agg.trend.value}",
        ],
        impact=Impact.medium if increasing else Impact.high,
    )


def _top_content(agg: Aggregates) -> dict | None:
    if not agg.top_posts:
        return None
    best = agg.top_posts[0]
    title = best.post.display_title
    if len(title) > TITLE_PREVIEW_CHARS:
        title = title[:TITLE_PREVIEW_CHARS].rstrip() + "..."
    return dict(
        title="Top Performing Content Analysis",
        description=(
            f'Your best post "{title}" received {best.weighted_score} weighted engagement. '
            "Analyze what made this content successful."
        ),
        category=InsightCategory.content,
        platform=best.post.platform,
        confidence=CONFIDENCE_TOP_CONTENT,
        data_points=[
            f"Likes: {best.post.likes}",
            f"Comments: {best.post.comments}",
            f"Shares: {best.post.shares}",
            f"Total engagement score: {best.weighted_score}",
        ],
        impact=Impact.high,
    )


def _high_performer_ratio(agg: Aggregates) -> dict | None:
    ratio = agg.high_performer_count / agg.total_posts
    if ratio >= HIGH_PERFORMER_TARGET:
        return None
    pct = round(ratio * 100)
    return dict(
        title="Need More High-Performing Content",
        description=(
            f"Only {pct}% of your posts perform well above average. "
            "Focus on creating more engaging content."
        ),
        category=InsightCategory.optimization,
        platform=ALL_PLATFORMS,
        confidence=CONFIDENCE_HIGH_PERFORMER_RATIO,
        data_points=[
            f"High-performing posts: {agg.high_performer_count}/{agg.total_posts}",
            f"Target: >{round(HIGH_PERFORMER_TARGET * 100)}% high-performing content",
            f"Current: {pct}%",
        ],
        impact=Impact.medium,
    )


def _comment_ratio(agg: Aggregates) -> dict | None:
    if agg.avg_likes <= 0:
        return None
    ratio = agg.avg_comments / agg.avg_likes
    if ratio >= COMMENT_LIKE_RATIO_FLOOR:
        return None
    return dict(
        title="Increase Audience Conversations",
        description=(
            f"Your content receives {agg.avg_likes:.1f} likes per post but only "
            f"{agg.avg_comments:.1f} comments. Try asking questions to spark discussions."
        ),
        category=InsightCategory.strategy,
        platform=ALL_PLATFORMS,
        confidence=CONFIDENCE_COMMENT_RATIO,
        data_points=[
            f"Average likes: {agg.avg_likes:.1f}",
            f"Average comments: {agg.avg_comments:.1f}",
            f"Comment-to-like ratio: {ratio * 100:.1f}%",
        ],
        impact=Impact.medium,
    )


def _platform_cards(agg: Aggregates) -> list[dict]:
    cards = []
    ranked = _rank_by_weighted_score(agg)
    for rank, platform in enumerate(ranked[:PLATFORM_CARD_LIMIT], start=1):
        if platform.posts < PLATFORM_CARD_MIN_POSTS:
            continue
        above = platform.avg_engagement_percent > agg.avg_engagement_percent
        cards.append(
            dict(
                title=f"{platform.name} Performance Breakdown",
                description=(
                    f"{platform.name} has {platform.posts} posts with average engagement of "
                    f"{platform.avg_engagement_percent:.1f}%. "
                    + (
                        "This is above your average!"
                        if above
                        else "Consider optimizing content for this platform."
                    )
                ),
                category=InsightCategory.recommendation,
                platform=platform.name,
                confidence=CONFIDENCE_PLATFORM_CARD,
                data_points=[
                    f"Posts: {platform.posts}",
                    f"Avg engagement: {platform.avg_engagement_percent:.1f}%",
                    f"Rank: #{rank} among {len(agg.platforms)} platforms",
                ],
                impact=Impact.medium,
            )
        )
    return cards


def generate_insights(agg: Aggregates) -> list[Insight]:
    """Apply every rule in order and return at most ``MAX_INSIGHTS`` insights."""
    if agg.total_posts == 0:
        return []

    drafts: list[dict] = []
    for rule in (
        _platform_dominance,
        _peak_timing,
        _trend,
        _top_content,
        _high_performer_ratio,
        _comment_ratio,
    ):
        draft = rule(agg)
        if draft is not None:
            drafts.append(draft)
    drafts.extend(_platform_cards(agg))

    return [
        Insight(id=index, **draft)
        for index, draft in enumerate(drafts[:MAX_INSIGHTS], start=1)
    ]
