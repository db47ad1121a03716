"""Pydantic models for scoring, aggregate statistics, insights, and snapshots."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, Field

from backend.app.models.post import Post


class Trend(StrEnum):
    increasing = "increasing"
    decreasing = "decreasing"
    stable = "stable"


class Impact(StrEnum):
    high = "high"
    medium = "medium"
    low = "low"


class InsightCategory(StrEnum):
    performance = "performance"
    timing = "timing"
    content = "content"
    strategy = "strategy"
    optimization = "optimization"
    recommendation = "recommendation"


class ScoredPost(BaseModel):
    """A post with its derived engagement metrics (never persisted)."""

    post: Post
    weighted_score: int
    engagement_percent: float
    label: str


class GroupStat(BaseModel):
    """Breakdown entry for one platform or one content type."""

    name: str
    posts: int
    total_likes: int = 0
    total_comments: int = 0
    total_shares: int = 0
    avg_weighted_score: float = 0.0
    avg_engagement_percent: float = 0.0
    performance: str = "Very Low"


class HourStat(BaseModel):
    hour: int = Field(..., ge=0, le=23)
    posts: int
    avg_weighted_score: float
    avg_engagement_percent: float


class Aggregates(BaseModel):
    """Aggregate statistics over one snapshot of posts."""

    total_posts: int = 0
    total_likes: int = 0
    total_comments: int = 0
    total_shares: int = 0
    total_weighted_score: int = 0
    avg_likes: float = 0.0
    avg_comments: float = 0.0
    avg_shares: float = 0.0
    avg_weighted_score: float = 0.0
    avg_engagement_percent: float = 0.0
    platforms: list[GroupStat] = Field(default_factory=list)
    content_types: list[GroupStat] = Field(default_factory=list)
    hours: list[HourStat] = Field(default_factory=list)
    peak_hours: list[int] = Field(default_factory=list)
    trend: Trend = Trend.stable
    top_posts: list[ScoredPost] = Field(default_factory=list)
    best_performing_content: list[str] = Field(default_factory=list)
    high_performer_count: int = 0

    def hour_stat(self, hour: int) -> HourStat | None:
        return next((h for h in self.hours if h.hour == hour), None)

    def summary(self) -> dict[str, object]:
        """Compact, JSON-safe summary for the Q&A forwarder and the report."""
        return {
            "total_posts": self.total_posts,
            "total_likes": self.total_likes,
            "total_comments": self.total_comments,
            "total_shares": self.total_shares,
            "total_weighted_score": self.total_weighted_score,
            "avg_engagement_percent": round(self.avg_engagement_percent, 1),
            "avg_weighted_score": round(self.avg_weighted_score, 1),
            "trend": self.trend.value,
            "peak_hours": self.peak_hours,
            "platforms": [
                {
                    "name": p.name,
                    "posts": p.posts,
                    "avg_engagement_percent": round(p.avg_engagement_percent, 1),
                }
                for p in self.platforms
            ],
            "content_types": [
                {
                    "name": c.name,
                    "posts": c.posts,
                    "avg_engagement_percent": round(c.avg_engagement_percent, 1),
                }
                for c in self.content_types
            ],
            "best_performing_content": self.best_performing_content,
        }


class Insight(BaseModel):
    id: int
    title: str
    description: str
    category: InsightCategory
    platform: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    data_points: list[str] = Field(default_factory=list)
    impact: Impact


class DashboardSnapshot(BaseModel):
    """Result of one full fetch + compute pass."""

    status: Literal["connected", "disconnected"]
    error_message: str | None = None
    error_category: str | None = None
    posts: list[ScoredPost] = Field(default_factory=list)
    aggregates: Aggregates = Field(default_factory=Aggregates)
    insights: list[Insight] = Field(default_factory=list)
    refreshed_at: datetime | None = None
    generation: int = 0


class RegressionPoint(BaseModel):
    index: int
    weighted_score: int
    predicted: float


class RegressionResult(BaseModel):
    slope: float = 0.0
    intercept: float = 0.0
    points: list[RegressionPoint] = Field(default_factory=list)


class PostPrediction(BaseModel):
    title: str
    weighted_score: int
    success_probability: float


class PredictionsResponse(BaseModel):
    regression: RegressionResult
    posts: list[PostPrediction] = Field(default_factory=list)
