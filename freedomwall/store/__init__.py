"""File-backed document collections."""

from freedomwall.store.banned_words import BannedWordStore
from freedomwall.store.polls import PollStore
from freedomwall.store.posts import PostStore

__all__ = ["BannedWordStore", "PollStore", "PostStore"]
