"""Input validation for user-submitted text.

Validation runs on the raw input, before sanitization, and rejects the
request outright.  It is independent of the stripping done by the
sanitizer.
"""

from __future__ import annotations

import re
from typing import Optional

from freedomwall.config import ContentLimits
from freedomwall.errors import ValidationError
from freedomwall.models.poll import MAX_POLL_OPTIONS, MIN_POLL_OPTIONS

_SUSPICIOUS_PATTERNS: list[re.Pattern[str]] = [
    re.compile(p, re.IGNORECASE)
    for p in [
        r"<script",
        r"javascript:",
        r"on\w+\s*=",
        r"data:",
        r"vbscript:",
        r"<iframe",
        r"<object",
        r"<embed",
    ]
]


def is_suspicious(text: Optional[str]) -> bool:
    if not text:
        return False
    return any(p.search(text) for p in _SUSPICIOUS_PATTERNS)


def require_text(value: Optional[str], label: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{label} is required")
    return value


def check_length(value: Optional[str], ceiling: Optional[int], label: str) -> None:
    if value is not None and ceiling and len(value) > ceiling:
        raise ValidationError(f"{label} must be {ceiling} characters or less")


def reject_suspicious(*values: Optional[str]) -> None:
    for value in values:
        if is_suspicious(value):
            raise ValidationError("Content contains suspicious patterns")


# ---------------------------------------------------------------------------
# Per-entity checks
# ---------------------------------------------------------------------------


def validate_post(name: Optional[str], message: Optional[str], limits: ContentLimits) -> None:
    require_text(message, "Message")
    check_length(name, limits.name, "Name")
    check_length(message, limits.post_message, "Message")
    reject_suspicious(name, message)


def validate_comment(name: Optional[str], message: Optional[str], limits: ContentLimits) -> None:
    require_text(message, "Comment")
    check_length(name, limits.name, "Name")
    check_length(message, limits.comment_message, "Comment")
    reject_suspicious(name, message)


def validate_report(user_id: Optional[str], reason: Optional[str], limits: ContentLimits) -> None:
    if not user_id:
        raise ValidationError("User identifier is required")
    require_text(reason, "Report reason")
    check_length(reason, limits.report_reason, "Report reason")


def validate_poll(question: Optional[str], options: Optional[list[str]], limits: ContentLimits) -> None:
    if not question or not question.strip() or not options or len(options) < MIN_POLL_OPTIONS:
        raise ValidationError(f"Question and at least {MIN_POLL_OPTIONS} options are required")
    if len(options) > MAX_POLL_OPTIONS:
        raise ValidationError(f"Maximum {MAX_POLL_OPTIONS} options allowed")
    check_length(question, limits.poll_question, "Question")
    for option in options:
        require_text(option, "Option text")
        check_length(option, limits.poll_option, "Option text")
    reject_suspicious(question, *options)


def validate_banned_word(word: Optional[str], limits: ContentLimits) -> str:
    """Return the normalised word or raise."""
    require_text(word, "Word")
    normalised = word.strip().lower()
    check_length(normalised, limits.banned_word, "Word")
    return normalised
