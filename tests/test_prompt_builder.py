"""Tests for analytics question prompt assembly."""

from backend.app.models.post import Post
from backend.app.services.prompt_builder import (
    MAX_CONTEXT_POSTS,
    OUT_OF_SCOPE_REPLY,
    SYSTEM_PROMPT,
    build_qa_prompt,
    normalize_whitespace,
)

_SUMMARY = {"total_posts": 2, "avg_engagement_percent": 41.5, "platforms": [{"name": "LinkedIn"}]}


def _posts(n: int) -> list[Post]:
    return [
        Post(id=i, title=f"Post {i}", platform="LinkedIn", likes=i * 10, created_at=f"2024-01-0{i % 9 + 1}T10:00:00")
        for i in range(1, n + 1)
    ]


# ---------------------------------------------------------------------------
# Whitespace normalisation
# ---------------------------------------------------------------------------


class TestNormalizeWhitespace:
    def test_strips_and_unifies_newlines(self) -> None:
        assert normalize_whitespace("  a\r\nb\rc  ") == "a\nb\nc"

    def test_collapses_blank_runs(self) -> None:
        assert normalize_whitespace("a\n\n\n\n\nb") == "a\n\nb"


# ---------------------------------------------------------------------------
# System prompt
# ---------------------------------------------------------------------------


class TestSystemPrompt:
    def test_contains_refusal_sentence(self) -> None:
        assert OUT_OF_SCOPE_REPLY in SYSTEM_PROMPT

    def test_scoped_to_analytics(self) -> None:
        assert "social media analytics" in SYSTEM_PROMPT


# ---------------------------------------------------------------------------
# Prompt assembly
# ---------------------------------------------------------------------------


class TestBuildQaPrompt:
    def test_sections_in_order(self) -> None:
        prompt, _ = build_qa_prompt("Which platform is best?", _SUMMARY, _posts(2))
        q = prompt.index("Question:")
        s = prompt.index("Analytics summary (JSON):")
        r = prompt.index("Recent posts:")
        assert q < s < r
        assert "Which platform is best?" in prompt

    def test_deterministic(self) -> None:
        first = build_qa_prompt("Why?", _SUMMARY, _posts(3))
        second = build_qa_prompt("Why?", dict(reversed(list(_SUMMARY.items()))), _posts(3))
        assert first == second

    def test_only_last_posts_included(self) -> None:
        posts = _posts(MAX_CONTEXT_POSTS + 2)
        prompt, metadata = build_qa_prompt("q", _SUMMARY, posts)
        assert metadata["context_posts"] == MAX_CONTEXT_POSTS
        assert "- Post 1 [" not in prompt
        assert "- Post 2 [" not in prompt
        assert f"- Post {MAX_CONTEXT_POSTS + 2} [" in prompt

    def test_post_line_shape(self) -> None:
        post = Post(id=1, title="Launch", platform="Instagram", content_type="reels", likes=5, comments=2, shares=1)
        prompt, _ = build_qa_prompt("q", {}, [post])
        assert "- Launch [Instagram, reels] likes=5 comments=2 shares=1" in prompt

    def test_no_posts(self) -> None:
        prompt, metadata = build_qa_prompt("q", {}, [])
        assert "Recent posts:\n(none)" in prompt
        assert metadata["context_posts"] == 0

    def test_question_stripped(self) -> None:
        prompt, _ = build_qa_prompt("   spaced out   ", {}, [])
        assert "Question:\nspaced out\n" in prompt

    def test_metadata_length_matches(self) -> None:
        prompt, metadata = build_qa_prompt("q", _SUMMARY, _posts(1))
        assert metadata["prompt_length"] == len(prompt)
