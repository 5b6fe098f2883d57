"""Admin router -- admin session cookie and the audit trail.

Prefix: ``/api/v1/admin``
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response

from freedomwall.config import Settings
from freedomwall.errors import AuthorizationError
from web.backend.app.dependencies import Services, get_services, get_settings
from web.backend.app.middleware.auth import ADMIN_COOKIE, admin_cookie_value, key_matches, require_admin
from web.backend.app.middleware.identity import request_ip
from web.backend.app.models.api import AdminSessionRequest, AuditEntryResponse, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/admin", tags=["admin"])

ADMIN_SESSION_MAX_AGE = 8 * 60 * 60


@router.post("/session", response_model=MessageResponse)
async def start_session(
    req: AdminSessionRequest,
    request: Request,
    response: Response,
    settings: Settings = Depends(get_settings),
):
    """Exchange the admin key for a signed admin session cookie."""
    if not key_matches(req.admin_key, settings):
        logger.warning("Rejected admin login from %s", request_ip(request))
        raise AuthorizationError()
    response.set_cookie(
        ADMIN_COOKIE,
        admin_cookie_value(settings),
        max_age=ADMIN_SESSION_MAX_AGE,
        httponly=True,
        secure=settings.secure_cookies,
        samesite="strict",
        path="/",
    )
    return MessageResponse(message="Admin session started")


@router.delete("/session", response_model=MessageResponse)
async def end_session(response: Response):
    response.delete_cookie(ADMIN_COOKIE, path="/")
    return MessageResponse(message="Admin session ended")


@router.get(
    "/audit",
    response_model=list[AuditEntryResponse],
    dependencies=[Depends(require_admin)],
)
async def list_audit(
    action: Optional[str] = Query(None),
    resource_type: Optional[str] = Query(None, alias="resourceType"),
    resource_id: Optional[str] = Query(None, alias="resourceId"),
    limit: int = Query(200, ge=1, le=1000),
    services: Services = Depends(get_services),
):
    """Admin actions, newest first."""
    entries = services.audit.get_events(
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        limit=limit,
    )
    return [AuditEntryResponse.model_validate(asdict(e)) for e in entries]
