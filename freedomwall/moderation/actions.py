"""Moderation state transitions on posts and polls.

Post state machine::

    visible  <-> hidden      (hide / unhide)
    unflagged -> flagged     (automatically at the report threshold, or flag)
    flagged  -> unflagged    (unflag: also forgets every report)
    any      -> deleted      (handled by the store)

Reports come from ordinary callers; everything else here is admin-only and
gated in the web layer.
"""

from __future__ import annotations

from freedomwall.errors import ConflictError, NotFoundError, ValidationError
from freedomwall.models.poll import Poll
from freedomwall.models.post import Comment, Post, Report

DEFAULT_FLAG_THRESHOLD = 3

ALREADY_REPORTED = "ALREADY_REPORTED"

POST_ACTIONS = ("hide", "unhide", "flag", "unflag")


def report_post(post: Post, user_id: str, reason: str, threshold: int = DEFAULT_FLAG_THRESHOLD) -> Post:
    """Record a report from *user_id* and flag the post at *threshold* reports."""
    if not user_id:
        raise ValidationError("User identifier is required")
    if user_id in post.reported_by:
        raise ConflictError("You have already reported this post", code=ALREADY_REPORTED)

    post.reports.append(Report(user_id=user_id, reason=reason.strip()))
    post.reported_by.append(user_id)
    post.report_count += 1
    if post.report_count >= threshold:
        post.is_flagged = True
    return post


def hide(post: Post) -> Post:
    post.is_hidden = True
    return post


def unhide(post: Post) -> Post:
    post.is_hidden = False
    return post


def flag(post: Post) -> Post:
    post.is_flagged = True
    return post


def unflag(post: Post) -> Post:
    """Clear the flag and start report counting afresh."""
    post.is_flagged = False
    post.report_count = 0
    post.reported_by = []
    post.reports = []
    return post


_TRANSITIONS = {
    "hide": hide,
    "unhide": unhide,
    "flag": flag,
    "unflag": unflag,
}


def apply_post_action(post: Post, action: str) -> Post:
    transition = _TRANSITIONS.get(action)
    if transition is None:
        raise ValidationError(f"Invalid action. Expected one of: {', '.join(POST_ACTIONS)}")
    return transition(post)


def add_comment(post: Post, comment: Comment) -> Post:
    if post.is_hidden:
        raise ValidationError("Cannot comment on hidden posts")
    post.comments.append(comment)
    return post


def delete_comment(post: Post, index: int) -> Comment:
    """Remove and return the comment at *index*."""
    if not 0 <= index < len(post.comments):
        raise NotFoundError("Comment not found")
    return post.comments.pop(index)


def set_poll_active(poll: Poll, active: bool) -> Poll:
    poll.is_active = active
    return poll
