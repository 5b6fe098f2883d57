"""Poll model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from freedomwall.models.base import new_id, now_iso, parse_timestamp
from freedomwall.models.post import ANONYMOUS

MIN_POLL_OPTIONS = 2
MAX_POLL_OPTIONS = 6


@dataclass
class PollOption:
    text: str
    votes: int = 0
    voters: list[str] = field(default_factory=list)

    def to_dict(self, include_voters: bool = False) -> dict:
        data: dict[str, Any] = {"text": self.text, "votes": self.votes}
        if include_voters:
            data["voters"] = list(self.voters)
        return data


@dataclass
class Poll:
    question: str
    options: list[PollOption] = field(default_factory=list)
    id: str = ""
    is_active: bool = True
    expires_at: Optional[str] = None
    total_votes: int = 0
    created_by: str = ANONYMOUS
    topics: list[str] = field(default_factory=list)
    engagement_score: int = 0
    created_at: str = ""
    updated_at: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            self.id = new_id()
        if not self.created_at:
            self.created_at = now_iso()
        if not self.updated_at:
            self.updated_at = self.created_at

    def is_expired(self, now: datetime) -> bool:
        expires = parse_timestamp(self.expires_at)
        return expires is not None and now > expires

    def has_voted(self, user_id: str) -> bool:
        return any(user_id in option.voters for option in self.options)

    def results(self) -> dict:
        """Vote counts with whole-number percentages."""
        return {
            "id": self.id,
            "question": self.question,
            "totalVotes": self.total_votes,
            "results": [
                {
                    "text": option.text,
                    "votes": option.votes,
                    "percentage": (
                        round(option.votes / self.total_votes * 100) if self.total_votes > 0 else 0
                    ),
                }
                for option in self.options
            ],
            "isActive": self.is_active,
            "expiresAt": self.expires_at,
        }

    def to_dict(self, include_private: bool = False, user_id: Optional[str] = None) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "question": self.question,
            "options": [o.to_dict(include_voters=include_private) for o in self.options],
            "isActive": self.is_active,
            "expiresAt": self.expires_at,
            "totalVotes": self.total_votes,
            "createdBy": self.created_by,
            "topics": list(self.topics),
            "engagementScore": self.engagement_score,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if user_id is not None:
            data["userVoted"] = self.has_voted(user_id)
        return data

    @staticmethod
    def from_dict(d: dict) -> "Poll":
        return Poll(
            id=d["id"],
            question=d["question"],
            options=[
                PollOption(text=o["text"], votes=o.get("votes", 0), voters=list(o.get("voters", [])))
                for o in d.get("options", [])
            ],
            is_active=d.get("isActive", True),
            expires_at=d.get("expiresAt"),
            total_votes=d.get("totalVotes", 0),
            created_by=d.get("createdBy", ANONYMOUS),
            topics=list(d.get("topics", [])),
            engagement_score=d.get("engagementScore", 0),
            created_at=d.get("createdAt", ""),
            updated_at=d.get("updatedAt", ""),
        )
