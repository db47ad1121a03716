"""Pydantic models for content-post records.

Records arrive from the record source with inconsistent keys and loosely
typed values.  :meth:`Post.from_record` never rejects a record: numeric
fields coerce to 0 and labels fall back to canonical defaults.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_PLATFORM = "Unknown"
DEFAULT_CONTENT_TYPE = "static"
UNTITLED_POST = "Untitled Post"
# Ceiling for a single engagement count; keeps averages and bands in float range.
MAX_ENGAGEMENT_COUNT = 10**12

# First key present wins.
_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "platform": ("platform", "Platform"),
    "content_type": ("content_type", "contentType", "type"),
    "created_at": ("created_at", "createdAt", "posted_at"),
}


def coerce_count(value: Any) -> int:
    """Coerce a raw engagement count to a non-negative int (0 on anything odd).

    Values above ``MAX_ENGAGEMENT_COUNT`` are capped.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return min(value, MAX_ENGAGEMENT_COUNT) if value > 0 else 0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0
    if math.isnan(number) or math.isinf(number) or number < 0:
        return 0
    if number >= MAX_ENGAGEMENT_COUNT:
        return MAX_ENGAGEMENT_COUNT
    return int(number)


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp; ``None`` when missing or invalid."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.strip())
    except ValueError:
        return None


class Post(BaseModel):
    """A normalised content post."""

    model_config = ConfigDict(frozen=True)

    id: int | str | None = None
    title: str | None = None
    content: str | None = None
    platform: str = DEFAULT_PLATFORM
    content_type: str = DEFAULT_CONTENT_TYPE
    likes: int = 0
    comments: int = 0
    shares: int = 0
    created_at: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _resolve_aliases(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        resolved = dict(data)
        for field, keys in _FIELD_ALIASES.items():
            for key in keys:
                value = data.get(key)
                if value not in (None, ""):
                    resolved[field] = value
                    break
            else:
                resolved.pop(field, None)
        return resolved

    @field_validator("likes", "comments", "shares", mode="before")
    @classmethod
    def _coerce_counts(cls, v: Any) -> int:
        return coerce_count(v)

    @field_validator("platform", mode="before")
    @classmethod
    def _normalize_platform(cls, v: Any) -> str:
        text = str(v).strip() if v is not None else ""
        return text or DEFAULT_PLATFORM

    @field_validator("content_type", mode="before")
    @classmethod
    def _normalize_content_type(cls, v: Any) -> str:
        text = str(v).strip() if v is not None else ""
        return text or DEFAULT_CONTENT_TYPE

    @field_validator("title", "content", mode="before")
    @classmethod
    def _strip_text(cls, v: Any) -> str | None:
        if v is None:
            return None
        text = str(v).strip()
        return text or None

    @field_validator("created_at", mode="before")
    @classmethod
    def _stringify_timestamp(cls, v: Any) -> str | None:
        if v is None:
            return None
        if isinstance(v, datetime):
            return v.isoformat()
        return str(v)

    @field_validator("id", mode="before")
    @classmethod
    def _keep_scalar_id(cls, v: Any) -> int | str | None:
        if v is None or isinstance(v, (int, str)) and not isinstance(v, bool):
            return v
        return str(v)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Post:
        """Build a post from a raw row.  Never raises for malformed values."""
        return cls.model_validate(record)

    @property
    def display_title(self) -> str:
        if self.title:
            return self.title
        if self.id is not None:
            return f"Post #{self.id}"
        return UNTITLED_POST

    @property
    def created_datetime(self) -> datetime | None:
        return parse_timestamp(self.created_at)


class PostCreate(BaseModel):
    """Request body for adding a post to the record source."""

    title: str = Field(..., min_length=1, max_length=500)
    content: str | None = Field(default=None, max_length=20_000)
    platform: str | None = Field(default=None, max_length=100)
    content_type: str | None = Field(default=None, max_length=100)
    likes: int = Field(default=0, ge=0, le=MAX_ENGAGEMENT_COUNT)
    comments: int = Field(default=0, ge=0, le=MAX_ENGAGEMENT_COUNT)
    shares: int = Field(default=0, ge=0, le=MAX_ENGAGEMENT_COUNT)
    created_at: datetime | None = None
