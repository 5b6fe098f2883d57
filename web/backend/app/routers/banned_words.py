"""Banned words router.

Prefix: ``/api/v1/banned-words``

The public listing returns the active words only; everything else is admin.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from freedomwall.errors import NotFoundError
from freedomwall.moderation import validator
from web.backend.app.dependencies import Services, get_services
from web.backend.app.middleware.auth import require_admin
from web.backend.app.middleware.identity import request_ip
from web.backend.app.models.api import (
    BannedWordResponse,
    CreateBannedWordRequest,
    MessageResponse,
    UpdateBannedWordRequest,
)

router = APIRouter(prefix="/api/v1/banned-words", tags=["banned-words"])


@router.get("", response_model=list[str])
async def list_active_words(services: Services = Depends(get_services)):
    return [w.word for w in services.banned_words.active()]


@router.get(
    "/admin",
    response_model=list[BannedWordResponse],
    dependencies=[Depends(require_admin)],
)
async def list_words_admin(services: Services = Depends(get_services)):
    return [BannedWordResponse.model_validate(w.to_dict()) for w in services.banned_words.newest_first()]


@router.post(
    "",
    status_code=201,
    response_model=BannedWordResponse,
    dependencies=[Depends(require_admin)],
)
async def add_word(
    req: CreateBannedWordRequest,
    request: Request,
    services: Services = Depends(get_services),
):
    word = validator.validate_banned_word(req.word, services.settings.content_limits)
    entry = services.banned_words.add(word, reason=req.reason or "")
    services.audit.log_event(
        action="banned_word.add",
        resource_type="banned_word",
        resource_id=entry.id,
        details={"word": entry.word},
        ip_address=request_ip(request),
    )
    return BannedWordResponse.model_validate(entry.to_dict())


@router.put(
    "/{word_id}",
    response_model=BannedWordResponse,
    dependencies=[Depends(require_admin)],
)
async def update_word(
    word_id: str,
    req: UpdateBannedWordRequest,
    request: Request,
    services: Services = Depends(get_services),
):
    word = None
    if req.word is not None:
        word = validator.validate_banned_word(req.word, services.settings.content_limits)
    entry = services.banned_words.edit(word_id, word=word, reason=req.reason, is_active=req.is_active)
    services.audit.log_event(
        action="banned_word.update",
        resource_type="banned_word",
        resource_id=word_id,
        details=req.model_dump(exclude_none=True),
        ip_address=request_ip(request),
    )
    return BannedWordResponse.model_validate(entry.to_dict())


@router.delete(
    "/{word_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
)
async def delete_word(
    word_id: str,
    request: Request,
    services: Services = Depends(get_services),
):
    if not services.banned_words.delete(word_id):
        raise NotFoundError("Banned word not found")
    services.audit.log_event(
        action="banned_word.delete",
        resource_type="banned_word",
        resource_id=word_id,
        ip_address=request_ip(request),
    )
    return MessageResponse(message="Banned word deleted successfully")
