"""Poll collection."""

from __future__ import annotations

from freedomwall.models.poll import Poll
from freedomwall.scoring import rescore
from freedomwall.store.base import JsonCollection

TRENDING_LIMIT = 5


class PollStore(JsonCollection[Poll]):
    name = "polls"
    label = "Poll"

    def _from_dict(self, d: dict) -> Poll:
        return Poll.from_dict(d)

    def _to_dict(self, entity: Poll) -> dict:
        return entity.to_dict(include_private=True)

    def _before_save(self, entity: Poll) -> None:
        super()._before_save(entity)
        rescore(entity)

    def ranked(self, active_only: bool = True) -> list[Poll]:
        """Polls by engagement score, newest first among equals."""
        polls = self.list_all()
        if active_only:
            polls = [p for p in polls if p.is_active]
        return sorted(polls, key=lambda p: (p.engagement_score, p.created_at), reverse=True)

    def trending(self, limit: int = TRENDING_LIMIT) -> list[Poll]:
        return self.ranked()[:limit]
