"""Text sanitization and censorship.

``sanitize`` strips control characters and script-like markup, censors
configured banned words and a fixed list of obfuscated slurs, then
optionally HTML-escapes the result.  Censoring sees the raw text, so banned
words containing markup characters are matched as typed.  It never raises:
if anything goes wrong the original text is returned unchanged and a
warning is logged.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Union

from freedomwall.models.banned_word import BannedWord

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")

_STRIP_PATTERNS: list[re.Pattern[str]] = [
    re.compile(p, re.IGNORECASE)
    for p in [
        r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>",
        r"javascript:",
        r"on\w+\s*=",
        r"data:",
        r"vbscript:",
    ]
]

_HTML_ENTITIES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#x27;",
    "`": "&#x60;",
    "=": "&#x3D;",
}
_HTML_CHARS = re.compile(r"[&<>\"'`=]")

# Look-alike characters accepted for each letter of a targeted term.
_LEET = {
    "a": "a4@",
    "b": "b8",
    "e": "e3",
    "g": "g9",
    "i": "i1!|",
    "l": "l1|",
    "o": "o0",
    "s": "s5$",
    "t": "t7+",
}
# Letters of a targeted term may be split by up to two of these.
_SEPARATOR = r"[\s._\-*]{0,2}"

_OBFUSCATED_TERMS = ("nigger", "faggot", "retard")
OBFUSCATED_MASK = "*****"


def obfuscation_pattern(term: str) -> re.Pattern[str]:
    """Build a regex matching leet-speak and spaced-out spellings of *term*."""
    pieces = []
    for ch in term.lower():
        variants = _LEET.get(ch, ch)
        pieces.append("[" + re.escape(variants) + "]+")
    return re.compile(r"\b" + _SEPARATOR.join(pieces) + r"\w*", re.IGNORECASE)


_OBFUSCATED_PATTERNS: list[re.Pattern[str]] = [obfuscation_pattern(t) for t in _OBFUSCATED_TERMS]


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------


def escape_html(text: str) -> str:
    return _HTML_CHARS.sub(lambda m: _HTML_ENTITIES[m.group(0)], text)


def strip_dangerous(text: str) -> str:
    """Remove control characters, script blocks, risky URI schemes and event handlers."""
    cleaned = _CONTROL_CHARS.sub("", text)
    for pattern in _STRIP_PATTERNS:
        cleaned = pattern.sub("", cleaned)
    return cleaned


def _active_words(banned_words: Iterable[Union[BannedWord, str]]) -> list[str]:
    words = []
    for entry in banned_words:
        if isinstance(entry, BannedWord):
            if entry.is_active and entry.word:
                words.append(entry.word)
        elif entry:
            words.append(entry)
    return words


def filter_banned_words(text: str, banned_words: Iterable[Union[BannedWord, str]]) -> str:
    """Mask every active banned word with an asterisk run of the same length."""
    for word in _active_words(banned_words):
        text = re.sub(re.escape(word), "*" * len(word), text, flags=re.IGNORECASE)
    return text


def mask_obfuscated(text: str) -> str:
    for pattern in _OBFUSCATED_PATTERNS:
        text = pattern.sub(OBFUSCATED_MASK, text)
    return text


# ---------------------------------------------------------------------------
# Sanitizer
# ---------------------------------------------------------------------------


@dataclass
class SanitizeResult:
    text: str
    censored: bool = False


class Sanitizer:
    """Applies the full sanitization pipeline with a fixed escaping mode."""

    def __init__(self, escape: bool = True) -> None:
        self.escape = escape

    def clean(self, text: str, banned_words: Iterable[Union[BannedWord, str]] = ()) -> SanitizeResult:
        try:
            cleaned = strip_dangerous(text).strip()
            censored = mask_obfuscated(filter_banned_words(cleaned, banned_words))
            output = escape_html(censored) if self.escape else censored
        except Exception:
            logger.warning("Sanitizer failed; passing text through unchanged", exc_info=True)
            return SanitizeResult(text=text)

        if censored != cleaned:
            logger.info("Censored content (%d chars)", len(cleaned))
        return SanitizeResult(text=output, censored=censored != cleaned)

    def __call__(self, text: str, banned_words: Iterable[Union[BannedWord, str]] = ()) -> str:
        return self.clean(text, banned_words).text


def sanitize(text: str, banned_words: Iterable[Union[BannedWord, str]] = (), escape: bool = True) -> str:
    """Module-level shortcut for ``Sanitizer(escape).clean(text, banned_words).text``."""
    return Sanitizer(escape=escape)(text, banned_words)
