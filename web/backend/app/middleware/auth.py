"""Admin authorization -- the single gate for every admin-only endpoint.

A request is an admin request when either:
1. the ``admin-key`` or ``x-admin-key`` header equals the configured
   ``ADMIN_KEY`` (constant-time comparison), or
2. it carries a valid signed admin session cookie (see ``routers/admin.py``).

With no ``ADMIN_KEY`` configured nobody is an admin.
"""

from __future__ import annotations

import hmac

from fastapi import Depends, Request

from freedomwall.config import Settings
from freedomwall.errors import AuthorizationError
from freedomwall.identity.resolver import sign_value, unsign_value
from web.backend.app.dependencies import get_settings

ADMIN_COOKIE = "freedomwall_admin"
ADMIN_HEADERS = ("admin-key", "x-admin-key")
_ADMIN_MARKER = "admin"


def _cookie_secret(settings: Settings) -> str:
    # Rotating ADMIN_KEY invalidates outstanding admin sessions.
    return settings.session_secret + settings.admin_key


def admin_cookie_value(settings: Settings) -> str:
    return sign_value(_ADMIN_MARKER, _cookie_secret(settings))


def key_matches(candidate: str | None, settings: Settings) -> bool:
    if not settings.admin_key or not candidate:
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), settings.admin_key.encode("utf-8"))


def is_admin(request: Request, settings: Settings) -> bool:
    """Return True if *request* carries valid admin credentials."""
    if not settings.admin_key:
        return False
    for header in ADMIN_HEADERS:
        if key_matches(request.headers.get(header), settings):
            return True
    cookie = request.cookies.get(ADMIN_COOKIE)
    return unsign_value(cookie, _cookie_secret(settings)) == _ADMIN_MARKER


async def require_admin(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> None:
    """FastAPI dependency that rejects non-admin requests with 401."""
    if not is_admin(request, settings):
        raise AuthorizationError()
