"""Like, comment-reaction and poll-vote logic.

These are plain functions over the model dataclasses.  They validate first
and mutate only once every check has passed, so a rejected call leaves the
entity exactly as it was.  Persisting the result is the caller's job (see
``freedomwall.store``).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence

from freedomwall.errors import ConflictError, NotFoundError, ValidationError
from freedomwall.models.poll import Poll
from freedomwall.models.post import REACTION_KINDS, THUMBS_UP, Comment, Post, UserReaction

ADDED = "added"
CHANGED = "changed"
REMOVED = "removed"

DEVICE_ALREADY_LIKED = "DEVICE_ALREADY_LIKED"
ALREADY_VOTED = "ALREADY_VOTED"


@dataclass
class LikeResult:
    liked: bool
    likes: int

    @property
    def message(self) -> str:
        return "Post liked" if self.liked else "Post unliked"


# ---------------------------------------------------------------------------
# Likes
# ---------------------------------------------------------------------------


def device_id_of(user_id: str) -> Optional[str]:
    """Return the device part of a ``user_<device>_<session>`` id, if any."""
    parts = user_id.split("_")
    if len(parts) >= 3 and parts[0] == "user" and parts[1]:
        return parts[1]
    return None


def toggle_like(post: Post, user_id: str, device_check: bool = False) -> LikeResult:
    """Like *post* for *user_id*, or take the like back if already given.

    With *device_check* enabled, a like from a caller id that shares its
    device segment with an existing liker is refused.
    """
    if not user_id:
        raise ValidationError("User identifier is required")
    if post.is_hidden:
        raise ValidationError("Cannot like hidden posts")

    if user_id in post.liked_by:
        post.liked_by = [u for u in post.liked_by if u != user_id]
        post.likes = max(0, post.likes - 1)
        return LikeResult(liked=False, likes=post.likes)

    if device_check:
        device = device_id_of(user_id)
        if device and any(device_id_of(u) == device for u in post.liked_by):
            raise ConflictError("This device has already liked this post", code=DEVICE_ALREADY_LIKED)

    post.liked_by.append(user_id)
    post.likes += 1
    return LikeResult(liked=True, likes=post.likes)


# ---------------------------------------------------------------------------
# Comment reactions
# ---------------------------------------------------------------------------


def _bump(comment: Comment, kind: str, delta: int) -> None:
    if kind == THUMBS_UP:
        comment.thumbs_up = max(0, comment.thumbs_up + delta)
    else:
        comment.thumbs_down = max(0, comment.thumbs_down + delta)


def react(comment: Comment, user_id: str, kind: str) -> str:
    """Toggle a thumbs-up/down on *comment*.  Returns added, changed or removed."""
    if not user_id:
        raise ValidationError("User identifier is required")
    if kind not in REACTION_KINDS:
        raise ValidationError(f"Reaction must be one of: {', '.join(REACTION_KINDS)}")

    existing = comment.reaction_of(user_id)
    if existing is None:
        comment.user_reactions.append(UserReaction(user_id=user_id, reaction=kind))
        _bump(comment, kind, +1)
        return ADDED

    comment.user_reactions = [r for r in comment.user_reactions if r.user_id != user_id]
    _bump(comment, existing.reaction, -1)
    if existing.reaction == kind:
        return REMOVED

    comment.user_reactions.append(UserReaction(user_id=user_id, reaction=kind))
    _bump(comment, kind, +1)
    return CHANGED


def react_to_comment(post: Post, index: int, user_id: str, kind: str) -> tuple[str, Comment]:
    if post.is_hidden:
        raise ValidationError("Cannot react to comments on hidden posts")
    comment = post.comment_at(index)
    if comment is None:
        raise NotFoundError("Comment not found")
    return react(comment, user_id, kind), comment


# ---------------------------------------------------------------------------
# Poll votes
# ---------------------------------------------------------------------------


def vote(
    poll: Poll,
    option_indices: Sequence[int],
    user_id: str,
    now: Optional[datetime] = None,
    allow_multiple: bool = False,
) -> Poll:
    """Record one vote by *user_id* on *poll*.

    A vote may span several options only when *allow_multiple* is set.
    Either way a caller votes at most once per poll.
    """
    now = now or datetime.now(timezone.utc)
    indices = list(option_indices)

    if not user_id:
        raise ValidationError("Option index and user ID are required")
    if not indices:
        raise ValidationError("Option index and user ID are required")
    if len(indices) > 1 and not allow_multiple:
        raise ValidationError("Only one option may be selected")
    if len(set(indices)) != len(indices):
        raise ValidationError("Duplicate option index")
    if not poll.is_active:
        raise ValidationError("Poll is no longer active")
    if poll.is_expired(now):
        raise ValidationError("Poll has expired")
    for index in indices:
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(poll.options):
            raise ValidationError("Invalid option index")
    if poll.has_voted(user_id):
        raise ConflictError("You have already voted on this poll", code=ALREADY_VOTED)

    for index in indices:
        option = poll.options[index]
        option.votes += 1
        option.voters.append(user_id)
    poll.total_votes += len(indices)
    return poll
