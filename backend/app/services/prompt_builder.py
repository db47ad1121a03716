"""Deterministic prompt assembly for analytics questions.

Identical inputs always produce byte-for-byte identical output.

Usage::

    from backend.app.services.prompt_builder import build_qa_prompt

    prompt_text, metadata = build_qa_prompt(question, summary, recent_posts)
"""

import json
import logging
import re

from backend.app.core.logging import EVENT_PROMPT_ASSEMBLED, log_event
from backend.app.models.post import Post

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MAX_CONTEXT_POSTS: int = 5
"""Most recent posts included as context."""

OUT_OF_SCOPE_REPLY: str = (
    "I can only answer questions related to your social media analytics "
    "and performance data."
)

SYSTEM_PROMPT: str = (
    "You are a social media analytics assistant. Answer only questions about the "
    "user's social media analytics and performance data, using the summary and "
    "posts provided. Be concise and cite the numbers you rely on. "
    f'If a question is unrelated, reply exactly: "{OUT_OF_SCOPE_REPLY}"'
)

# Regex: three or more consecutive newlines (with optional whitespace-only lines)
_EXCESS_BLANK_LINES = re.compile(r"(\n[ \t]*){3,}")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def normalize_whitespace(text: str) -> str:
    """Normalize whitespace in *text*.

    - Strip leading/trailing whitespace
    - Convert Windows newlines (``\\r\\n``) to ``\\n``
    - Collapse runs of >2 consecutive blank lines to exactly 2
    """
    text = text.strip()
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _EXCESS_BLANK_LINES.sub("\n\n", text)
    return text


def _post_line(post: Post) -> str:
    return (
        f"- {post.display_title} [{post.platform}, {post.content_type}] "
        f"likes={post.likes} comments={post.comments} shares={post.shares}"
        + (f" posted={post.created_at}" if post.created_at else "")
    )


# ---------------------------------------------------------------------------
# Prompt assembly
# ---------------------------------------------------------------------------


def build_qa_prompt(
    question: str,
    summary: dict[str, object],
    recent_posts: list[Post],
) -> tuple[str, dict[str, object]]:
    """Build the user prompt for *question*.

    Only the last :data:`MAX_CONTEXT_POSTS` of *recent_posts* are included.

    Returns ``(prompt_text, prompt_metadata)``.
    """
    context_posts = recent_posts[-MAX_CONTEXT_POSTS:] if recent_posts else []

    sections: list[str] = [
        f"Question:\n{question.strip()}",
        "Analytics summary (JSON):\n" + json.dumps(summary, sort_keys=True, default=str),
    ]
    if context_posts:
        sections.append("Recent posts:\n" + "\n".join(_post_line(p) for p in context_posts))
    else:
        sections.append("Recent posts:\n(none)")

    prompt_text = normalize_whitespace("\n\n".join(sections))

    metadata: dict[str, object] = {
        "context_posts": len(context_posts),
        "prompt_length": len(prompt_text),
    }

    log_event(
        logger, "info", EVENT_PROMPT_ASSEMBLED,
        context_posts=len(context_posts),
        length=len(prompt_text),
    )

    return prompt_text, metadata
