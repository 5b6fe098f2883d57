"""Caller identification.

A caller id is the key used to deduplicate likes, votes and reports and to
bucket rate limits.  It is picked, in order, from an explicit client id, the
signed session cookie, the client IP, or the literal ``"unknown"``.  None of
this is authentication: a determined client can always present a fresh id.
"""

from __future__ import annotations

import hashlib
import hmac
import re
import secrets
from typing import Mapping, Optional

UNKNOWN = "unknown"

SESSION_COOKIE = "freedomwall_session"
SESSION_MAX_AGE = 30 * 24 * 60 * 60  # 30 days

_SESSION_ID = re.compile(r"^[a-f0-9]{64}$")
_IPV4_MAPPED_PREFIX = "::ffff:"


# ---------------------------------------------------------------------------
# IP address
# ---------------------------------------------------------------------------


def normalize_ip(ip: Optional[str]) -> str:
    if not ip or ip == UNKNOWN:
        return UNKNOWN
    ip = ip.strip()
    if ip.lower().startswith(_IPV4_MAPPED_PREFIX):
        return ip[len(_IPV4_MAPPED_PREFIX):]
    return ip


def client_ip(headers: Mapping[str, str], peer: Optional[str] = None) -> str:
    """Resolve the client IP from proxy headers, falling back to the peer address.

    *headers* must be a case-insensitive mapping (e.g. Starlette's ``Headers``)
    or use lower-case keys.
    """
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return normalize_ip(first)
    for header in ("x-real-ip", "cf-connecting-ip"):
        value = headers.get(header)
        if value:
            return normalize_ip(value)
    return normalize_ip(peer)


# ---------------------------------------------------------------------------
# Session cookie
# ---------------------------------------------------------------------------


def generate_session_id() -> str:
    return secrets.token_hex(32)


def is_valid_session_id(session_id: Optional[str]) -> bool:
    return bool(session_id) and bool(_SESSION_ID.match(session_id))


def _signature(value: str, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), value.encode("utf-8"), hashlib.sha256).hexdigest()


def pseudonym(user_id: str, secret: str) -> str:
    """Stable opaque stand-in for *user_id* in public views.

    Keyed and domain-separated from cookie signatures, so it reveals neither
    the id nor its cookie.
    """
    return _signature(f"public:{user_id}", secret)[:16]


def sign_value(value: str, secret: str) -> str:
    """Return ``<value>.<hmac-sha256>`` for storing in a cookie."""
    return f"{value}.{_signature(value, secret)}"


def unsign_value(signed: Optional[str], secret: str) -> Optional[str]:
    """Return the original value if the signature checks out, else ``None``."""
    if not signed or "." not in signed:
        return None
    value, _, signature = signed.rpartition(".")
    if not hmac.compare_digest(signature, _signature(value, secret)):
        return None
    return value


def session_from_cookie(cookie_value: Optional[str], secret: str) -> Optional[str]:
    session_id = unsign_value(cookie_value, secret)
    return session_id if is_valid_session_id(session_id) else None


# ---------------------------------------------------------------------------
# Caller id
# ---------------------------------------------------------------------------


def resolve_caller_id(
    explicit: Optional[str] = None,
    session_id: Optional[str] = None,
    ip: Optional[str] = None,
) -> str:
    """Pick the most specific identifier available."""
    if explicit and explicit.strip():
        return explicit.strip()
    if session_id:
        return session_id
    ip = normalize_ip(ip)
    if ip != UNKNOWN:
        return ip
    return UNKNOWN
