"""Post collection."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from freedomwall.models.post import Post
from freedomwall.scoring import rescore
from freedomwall.store.base import JsonCollection

SORT_LATEST = "latest"
SORT_OLDEST = "oldest"
SORT_POPULAR = "popular"
SORT_ORDERS = (SORT_LATEST, SORT_OLDEST, SORT_POPULAR)


@dataclass
class PostPage:
    posts: list[Post] = field(default_factory=list)
    current_page: int = 1
    total_pages: int = 0
    total_posts: int = 0

    @property
    def has_more(self) -> bool:
        return self.current_page < self.total_pages


def sort_posts(posts: list[Post], sort: str = SORT_LATEST) -> list[Post]:
    if sort == SORT_OLDEST:
        return sorted(posts, key=lambda p: p.created_at)
    if sort == SORT_POPULAR:
        return sorted(posts, key=lambda p: (p.engagement_score, p.created_at), reverse=True)
    return sorted(posts, key=lambda p: p.created_at, reverse=True)


class PostStore(JsonCollection[Post]):
    """Posts with their comments and reports embedded."""

    name = "posts"
    label = "Post"

    def _from_dict(self, d: dict) -> Post:
        return Post.from_dict(d)

    def _to_dict(self, entity: Post) -> dict:
        return entity.to_dict(include_private=True)

    def _before_save(self, entity: Post) -> None:
        super()._before_save(entity)
        rescore(entity)

    def page(
        self,
        page: int = 1,
        limit: int = 20,
        sort: str = SORT_LATEST,
        include_hidden: bool = False,
    ) -> PostPage:
        posts = self.list_all()
        if not include_hidden:
            posts = [p for p in posts if not p.is_hidden]
        posts = sort_posts(posts, sort)

        page = max(1, page)
        total = len(posts)
        start = (page - 1) * limit
        return PostPage(
            posts=posts[start:start + limit],
            current_page=page,
            total_pages=math.ceil(total / limit) if limit else 0,
            total_posts=total,
        )
