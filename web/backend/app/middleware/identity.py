"""Caller context -- who is making this request, as far as we can tell.

``get_caller`` resolves the client IP and the session cookie, issuing a new
signed session cookie on first contact.  Endpoints combine it with any
client-supplied ``userId`` through :meth:`CallerContext.caller_id`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request, Response

from freedomwall.config import Settings
from freedomwall.identity.resolver import (
    SESSION_COOKIE,
    SESSION_MAX_AGE,
    client_ip,
    generate_session_id,
    resolve_caller_id,
    session_from_cookie,
    sign_value,
)
from freedomwall.models.post import Origin
from web.backend.app.dependencies import get_settings


@dataclass
class CallerContext:
    ip: str
    session_id: Optional[str] = None
    user_agent: str = ""
    header_user_id: Optional[str] = None

    def caller_id(self, explicit: Optional[str] = None) -> str:
        """Body ``userId`` first, then the ``user-id`` header, session, IP."""
        return resolve_caller_id(explicit or self.header_user_id, self.session_id, self.ip)

    def origin(self) -> Origin:
        return Origin(ip=self.ip, user_agent=self.user_agent, session_id=self.session_id or "")


def request_ip(request: Request) -> str:
    peer = request.client.host if request.client else None
    return client_ip(request.headers, peer)


async def get_caller(
    request: Request,
    response: Response,
    settings: Settings = Depends(get_settings),
) -> CallerContext:
    session_id = session_from_cookie(request.cookies.get(SESSION_COOKIE), settings.session_secret)
    if session_id is None:
        session_id = generate_session_id()
        response.set_cookie(
            SESSION_COOKIE,
            sign_value(session_id, settings.session_secret),
            max_age=SESSION_MAX_AGE,
            httponly=True,
            secure=settings.secure_cookies,
            samesite="strict",
            path="/",
        )
    return CallerContext(
        ip=request_ip(request),
        session_id=session_id,
        user_agent=request.headers.get("user-agent", ""),
        header_user_id=request.headers.get("user-id"),
    )
