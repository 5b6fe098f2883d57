"""Shared service instances for the running process.

Routers reach the stores, the rate limiter and the sanitizer through
``get_services``.  ``configure`` rebuilds them from a :class:`Settings`
object; the app factory calls it once and tests call it with a temporary
data directory.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from freedomwall.config import Settings
from freedomwall.errors import InternalError
from freedomwall.identity.resolver import pseudonym
from freedomwall.moderation.sanitizer import Sanitizer
from freedomwall.ratelimit.limiter import SlidingWindowRateLimiter
from freedomwall.security.audit_log import AuditLogger
from freedomwall.store import BannedWordStore, PollStore, PostStore

logger = logging.getLogger(__name__)


@dataclass
class Services:
    settings: Settings
    posts: PostStore
    polls: PollStore
    banned_words: BannedWordStore
    limiter: SlidingWindowRateLimiter
    sanitizer: Sanitizer
    audit: AuditLogger

    @classmethod
    def from_settings(cls, settings: Settings) -> "Services":
        data_dir = settings.data_dir
        return cls(
            settings=settings,
            posts=PostStore(data_dir),
            polls=PollStore(data_dir),
            banned_words=BannedWordStore(data_dir),
            limiter=SlidingWindowRateLimiter(settings.rate_limits),
            sanitizer=Sanitizer(escape=settings.escape_html),
            audit=AuditLogger(data_dir / "audit_logs"),
        )

    def clean(self, text: Optional[str]) -> str:
        """Sanitize and censor user text against the current banned words."""
        if not text:
            return ""
        try:
            banned = self.banned_words.active()
        except InternalError:
            logger.warning("Banned words unavailable; censoring with the fixed list only")
            banned = []
        return self.sanitizer(text, banned)

    def public_id(self, user_id: str) -> str:
        return pseudonym(user_id, self.settings.session_secret)


_services: Optional[Services] = None


def configure(settings: Optional[Settings] = None) -> Services:
    """(Re)build the process-wide services."""
    global _services
    _services = Services.from_settings(settings or Settings.from_env())
    return _services


def get_services() -> Services:
    """FastAPI dependency returning the process-wide services."""
    if _services is None:
        return configure()
    return _services


def get_settings() -> Settings:
    return get_services().settings
