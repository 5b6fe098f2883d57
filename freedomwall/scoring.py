"""Engagement scoring.

Scores are derived from counters and only used for ranking.  Stores call
:func:`rescore` right before persisting an entity so the stored score
never drifts from the live counters.
"""

from __future__ import annotations

from typing import Union

from freedomwall.models.poll import Poll
from freedomwall.models.post import Post

COMMENT_WEIGHT = 2
VOTE_WEIGHT = 2


def post_score(post: Post) -> int:
    return post.likes + COMMENT_WEIGHT * len(post.comments)


def poll_score(poll: Poll) -> int:
    return VOTE_WEIGHT * poll.total_votes


def rescore(entity: Union[Post, Poll]) -> int:
    """Recompute and store the engagement score on *entity*."""
    if isinstance(entity, Post):
        entity.engagement_score = post_score(entity)
    elif isinstance(entity, Poll):
        entity.engagement_score = poll_score(entity)
    else:
        raise TypeError(f"Cannot score {type(entity).__name__}")
    return entity.engagement_score
