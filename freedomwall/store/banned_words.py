"""Banned-word collection."""

from __future__ import annotations

from typing import Optional

from freedomwall.errors import ConflictError
from freedomwall.models.banned_word import BannedWord
from freedomwall.store.base import JsonCollection


class BannedWordStore(JsonCollection[BannedWord]):
    name = "banned_words"
    label = "Banned word"

    def _from_dict(self, d: dict) -> BannedWord:
        return BannedWord.from_dict(d)

    def _to_dict(self, entity: BannedWord) -> dict:
        return entity.to_dict()

    def find_word(self, word: str) -> Optional[BannedWord]:
        word = word.strip().lower()
        for entry in self.list_all():
            if entry.word == word:
                return entry
        return None

    def add(self, word: str, reason: str = "", added_by: str = "Admin") -> BannedWord:
        """Add *word*; raises :class:`ConflictError` if it is already banned."""
        with self._locked():
            if self.find_word(word) is not None:
                raise ConflictError("Word already banned", code="ALREADY_BANNED")
            return self.insert(BannedWord(word=word, reason=reason.strip(), added_by=added_by))

    def active(self) -> list[BannedWord]:
        return sorted(self.find(lambda w: w.is_active), key=lambda w: w.word)

    def newest_first(self) -> list[BannedWord]:
        return sorted(self.list_all(), key=lambda w: w.created_at, reverse=True)

    def edit(
        self,
        word_id: str,
        word: Optional[str] = None,
        reason: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> BannedWord:
        """Update fields of one entry, keeping words unique."""
        with self._locked():
            if word is not None:
                existing = self.find_word(word)
                if existing is not None and existing.id != word_id:
                    raise ConflictError("Word already banned", code="ALREADY_BANNED")

            def apply(entry: BannedWord) -> None:
                if word is not None:
                    entry.word = word.strip().lower()
                if reason is not None:
                    entry.reason = reason.strip()
                if is_active is not None:
                    entry.is_active = is_active

            entry, _ = self.update(word_id, apply)
            return entry
