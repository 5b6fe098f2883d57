"""Tests for likes, comment reactions and poll votes."""

from datetime import datetime, timedelta, timezone

import pytest

from freedomwall.errors import ConflictError, NotFoundError, ValidationError
from freedomwall.models.poll import Poll, PollOption
from freedomwall.models.post import THUMBS_DOWN, THUMBS_UP, Comment, Post
from freedomwall.reactions.engine import (
    ADDED,
    ALREADY_VOTED,
    CHANGED,
    DEVICE_ALREADY_LIKED,
    REMOVED,
    device_id_of,
    react,
    react_to_comment,
    toggle_like,
    vote,
)


def _poll(**kwargs) -> Poll:
    return Poll(question="Q?", options=[PollOption("a"), PollOption("b"), PollOption("c")], **kwargs)


# ── Likes ────────────────────────────────────────────────────────────


def test_like_toggle_pair_is_idempotent():
    post = Post(message="hi", likes=4, liked_by=["x", "y", "z", "w"])
    first = toggle_like(post, "u")
    assert first.liked and first.likes == 5
    second = toggle_like(post, "u")
    assert not second.liked and second.likes == 4
    assert "u" not in post.liked_by
    assert second.message == "Post unliked"


def test_unlike_never_goes_negative():
    post = Post(message="hi", likes=0, liked_by=["u"])
    assert toggle_like(post, "u").likes == 0


def test_like_requires_user_and_visible_post():
    with pytest.raises(ValidationError):
        toggle_like(Post(message="hi"), "")
    hidden = Post(message="hi", is_hidden=True)
    with pytest.raises(ValidationError):
        toggle_like(hidden, "u")
    assert hidden.likes == 0


def test_device_check():
    assert device_id_of("user_dev1_sess1") == "dev1"
    assert device_id_of("plain-id") is None

    post = Post(message="hi")
    toggle_like(post, "user_dev1_sess1", device_check=True)
    with pytest.raises(ConflictError) as exc:
        toggle_like(post, "user_dev1_sess2", device_check=True)
    assert exc.value.code == DEVICE_ALREADY_LIKED
    assert post.likes == 1

    # Without the check the second session may like.
    assert toggle_like(post, "user_dev1_sess2").likes == 2


# ── Comment reactions ────────────────────────────────────────────────


def _counts_match(comment: Comment) -> bool:
    ups = sum(1 for r in comment.user_reactions if r.reaction == THUMBS_UP)
    downs = sum(1 for r in comment.user_reactions if r.reaction == THUMBS_DOWN)
    return comment.thumbs_up == ups and comment.thumbs_down == downs


def test_reaction_toggle_sequence():
    comment = Comment(message="c")
    assert react(comment, "u", THUMBS_UP) == ADDED
    assert react(comment, "u", THUMBS_DOWN) == CHANGED
    assert (comment.thumbs_up, comment.thumbs_down) == (0, 1)
    assert react(comment, "u", THUMBS_DOWN) == REMOVED
    assert comment.user_reactions == []
    assert _counts_match(comment)


def test_one_reaction_entry_per_user():
    comment = Comment(message="c")
    sequence = [("a", THUMBS_UP), ("b", THUMBS_DOWN), ("a", THUMBS_DOWN), ("a", THUMBS_UP), ("b", THUMBS_DOWN)]
    for user, kind in sequence:
        react(comment, user, kind)
        assert _counts_match(comment)
        for u in ("a", "b"):
            assert sum(1 for r in comment.user_reactions if r.user_id == u) <= 1
        assert comment.thumbs_up >= 0 and comment.thumbs_down >= 0
    assert (comment.thumbs_up, comment.thumbs_down) == (1, 0)


def test_reaction_validation():
    comment = Comment(message="c")
    with pytest.raises(ValidationError):
        react(comment, "u", "heart")
    with pytest.raises(ValidationError):
        react(comment, "", THUMBS_UP)


def test_react_to_comment_by_index():
    post = Post(message="p", comments=[Comment(message="first")])
    result, comment = react_to_comment(post, 0, "u", THUMBS_UP)
    assert result == ADDED
    assert post.comments[0].thumbs_up == 1
    assert comment is post.comments[0]

    with pytest.raises(NotFoundError):
        react_to_comment(post, 1, "u", THUMBS_UP)
    with pytest.raises(NotFoundError):
        react_to_comment(post, -1, "u", THUMBS_UP)

    post.is_hidden = True
    with pytest.raises(ValidationError):
        react_to_comment(post, 0, "v", THUMBS_UP)


# ── Votes ────────────────────────────────────────────────────────────


def test_vote_records_voter():
    poll = _poll()
    vote(poll, [1], "u")
    assert poll.options[1].votes == 1
    assert poll.options[1].voters == ["u"]
    assert poll.total_votes == 1
    assert poll.has_voted("u")


def test_second_vote_is_rejected_for_any_option():
    poll = _poll()
    vote(poll, [0], "u")
    for index in (0, 1, 2):
        with pytest.raises(ConflictError) as exc:
            vote(poll, [index], "u")
        assert exc.value.code == ALREADY_VOTED
    assert poll.total_votes == 1


def test_inactive_and_expired_polls_do_not_change():
    now = datetime(2024, 6, 1, tzinfo=timezone.utc)
    inactive = _poll(is_active=False)
    expired = _poll(expires_at=(now - timedelta(seconds=1)).isoformat())

    for poll in (inactive, expired):
        with pytest.raises(ValidationError):
            vote(poll, [0], "u", now=now)
        assert poll.total_votes == 0
        assert all(o.votes == 0 and o.voters == [] for o in poll.options)

    still_open = _poll(expires_at=(now + timedelta(days=1)).isoformat())
    vote(still_open, [0], "u", now=now)
    assert still_open.total_votes == 1


def test_bad_indices_leave_poll_untouched():
    poll = _poll()
    for indices in ([], [3], [-1], [True], [0, 0]):
        with pytest.raises(ValidationError):
            vote(poll, indices, "u", allow_multiple=True)
    assert poll.total_votes == 0

    with pytest.raises(ValidationError):
        vote(poll, [0, 1], "u")
    assert poll.total_votes == 0


def test_multi_select_vote():
    poll = _poll()
    vote(poll, [0, 2], "u", allow_multiple=True)
    assert [o.votes for o in poll.options] == [1, 0, 1]
    assert poll.total_votes == 2
    with pytest.raises(ConflictError):
        vote(poll, [1], "u", allow_multiple=True)
