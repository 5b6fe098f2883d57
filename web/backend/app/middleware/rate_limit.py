"""Rate-limit dependencies.

Usage in a router::

    @router.post("", dependencies=[rate_limited("post", post_key)])
    async def create_post(...):
        ...

Admin requests are never throttled.  Permitted responses carry the
``X-RateLimit-*`` headers; rejections surface as ``RateLimitError`` (429).
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Callable

from fastapi import Depends, Request, Response

from web.backend.app.dependencies import Services, get_services
from web.backend.app.middleware.auth import is_admin
from web.backend.app.middleware.identity import CallerContext, get_caller

KeyFunc = Callable[[CallerContext, dict[str, Any]], str]


async def _json_body(request: Request) -> dict[str, Any]:
    if request.method not in ("POST", "PUT", "PATCH"):
        return {}
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {}
    return body if isinstance(body, dict) else {}


# ---------------------------------------------------------------------------
# Key builders
# ---------------------------------------------------------------------------


def post_key(caller: CallerContext, body: dict[str, Any]) -> str:
    return f"{body.get('name') or 'anonymous'}:{caller.ip}"


def session_key(caller: CallerContext, body: dict[str, Any]) -> str:
    return caller.session_id or caller.ip


def user_key(caller: CallerContext, body: dict[str, Any]) -> str:
    return str(body.get("userId") or caller.ip)


def ip_key(caller: CallerContext, body: dict[str, Any]) -> str:
    return caller.ip


# ---------------------------------------------------------------------------
# Dependency factory
# ---------------------------------------------------------------------------


def rate_limited(action_class: str, key: KeyFunc = ip_key):
    """Return a ``Depends`` that throttles *action_class* per *key*."""

    async def dependency(
        request: Request,
        response: Response,
        caller: CallerContext = Depends(get_caller),
        services: Services = Depends(get_services),
    ) -> None:
        if is_admin(request, services.settings):
            return
        body = await _json_body(request)
        decision = services.limiter.check(action_class, key(caller, body))
        if decision.limit:
            response.headers["X-RateLimit-Limit"] = str(decision.limit)
            response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
            response.headers["X-RateLimit-Reset"] = datetime.fromtimestamp(
                decision.reset_at, tz=timezone.utc
            ).isoformat()

    return Depends(dependency)
