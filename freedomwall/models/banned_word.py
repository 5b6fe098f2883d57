"""Banned-word model consumed by the censor."""

from __future__ import annotations

from dataclasses import dataclass

from freedomwall.models.base import new_id, now_iso


@dataclass
class BannedWord:
    """A word censored from user content while active."""

    word: str
    id: str = ""
    is_active: bool = True
    reason: str = ""
    added_by: str = "Admin"
    created_at: str = ""
    updated_at: str = ""

    def __post_init__(self) -> None:
        self.word = self.word.strip().lower()
        if not self.id:
            self.id = new_id()
        if not self.created_at:
            self.created_at = now_iso()
        if not self.updated_at:
            self.updated_at = self.created_at

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "word": self.word,
            "isActive": self.is_active,
            "reason": self.reason,
            "addedBy": self.added_by,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @staticmethod
    def from_dict(d: dict) -> "BannedWord":
        return BannedWord(
            id=d["id"],
            word=d["word"],
            is_active=d.get("isActive", True),
            reason=d.get("reason", ""),
            added_by=d.get("addedBy", "Admin"),
            created_at=d.get("createdAt", ""),
            updated_at=d.get("updatedAt", ""),
        )
