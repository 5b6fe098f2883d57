"""Polls router.

Prefix: ``/api/v1/polls``
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from freedomwall.errors import NotFoundError, ValidationError
from freedomwall.models.base import parse_timestamp
from freedomwall.models.poll import Poll, PollOption
from freedomwall.models.post import ANONYMOUS
from freedomwall.moderation import actions, validator
from freedomwall.reactions import engine
from web.backend.app.dependencies import Services, get_services
from web.backend.app.middleware.auth import require_admin
from web.backend.app.middleware.identity import CallerContext, get_caller, request_ip
from web.backend.app.middleware.rate_limit import ip_key, post_key, rate_limited, user_key
from web.backend.app.models.api import (
    AdminPollResponse,
    CreatePollRequest,
    MessageResponse,
    PollResponse,
    PollResultsResponse,
    PollStatusRequest,
    VoteRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/polls", tags=["polls"])


def _public(poll: Poll, user_id: Optional[str] = None) -> PollResponse:
    return PollResponse.model_validate(poll.to_dict(user_id=user_id))


def _admin(poll: Poll) -> AdminPollResponse:
    return AdminPollResponse.model_validate(poll.to_dict(include_private=True))


def _expiry(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    try:
        return parse_timestamp(value).isoformat()
    except ValueError:
        raise ValidationError("Invalid expiry date")


# =========================================================================
# Public endpoints
# =========================================================================


@router.get(
    "",
    response_model=list[PollResponse],
    response_model_exclude_unset=True,
    dependencies=[rate_limited("read", ip_key)],
)
async def list_polls(
    user_id: Optional[str] = Query(None, alias="userId"),
    services: Services = Depends(get_services),
):
    """Active polls, highest engagement first."""
    return [_public(p, user_id) for p in services.polls.ranked()]


@router.get(
    "/trending",
    response_model=list[PollResponse],
    response_model_exclude_unset=True,
    dependencies=[rate_limited("read", ip_key)],
)
async def trending_polls(services: Services = Depends(get_services)):
    return [_public(p) for p in services.polls.trending()]


@router.get(
    "/admin",
    response_model=list[AdminPollResponse],
    dependencies=[Depends(require_admin)],
)
async def list_polls_admin(services: Services = Depends(get_services)):
    return [_admin(p) for p in services.polls.ranked(active_only=False)]


@router.post(
    "",
    status_code=201,
    response_model=PollResponse,
    response_model_exclude_unset=True,
    dependencies=[rate_limited("post", post_key)],
)
async def create_poll(
    req: CreatePollRequest,
    services: Services = Depends(get_services),
):
    """Create a poll with two to six options."""
    validator.validate_poll(req.question, req.options, services.settings.content_limits)

    poll = Poll(
        question=services.clean(req.question),
        options=[PollOption(text=services.clean(text)) for text in req.options],
        expires_at=_expiry(req.expires_at),
        created_by=services.clean(req.name) or ANONYMOUS,
        topics=[t for t in (services.clean(topic) for topic in req.topics) if t],
    )
    services.polls.insert(poll)
    logger.info("Created poll %s with %d options", poll.id, len(poll.options))
    return _public(poll)


@router.post(
    "/{poll_id}/vote",
    response_model=PollResponse,
    response_model_exclude_unset=True,
    dependencies=[rate_limited("vote", user_key)],
)
async def vote(
    poll_id: str,
    req: VoteRequest,
    caller: CallerContext = Depends(get_caller),
    services: Services = Depends(get_services),
):
    """Cast the caller's vote.  One vote per caller per poll."""
    user_id = caller.caller_id(req.user_id)
    allow_multiple = services.settings.multi_select_polls
    poll, _ = services.polls.update(
        poll_id,
        lambda p: engine.vote(p, req.indices(), user_id, allow_multiple=allow_multiple),
    )
    return _public(poll, user_id)


@router.get(
    "/{poll_id}/results",
    response_model=PollResultsResponse,
    dependencies=[rate_limited("read", ip_key)],
)
async def poll_results(poll_id: str, services: Services = Depends(get_services)):
    return PollResultsResponse.model_validate(services.polls.require(poll_id).results())


# =========================================================================
# Admin endpoints
# =========================================================================


@router.put(
    "/{poll_id}/status",
    response_model=AdminPollResponse,
    dependencies=[Depends(require_admin)],
)
async def set_poll_status(
    poll_id: str,
    req: PollStatusRequest,
    request: Request,
    services: Services = Depends(get_services),
):
    poll, _ = services.polls.update(poll_id, lambda p: actions.set_poll_active(p, req.is_active))
    services.audit.log_event(
        action="poll.activate" if req.is_active else "poll.deactivate",
        resource_type="poll",
        resource_id=poll_id,
        ip_address=request_ip(request),
    )
    return _admin(poll)


@router.delete(
    "/{poll_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
)
async def delete_poll(
    poll_id: str,
    request: Request,
    services: Services = Depends(get_services),
):
    if not services.polls.delete(poll_id):
        raise NotFoundError("Poll not found")
    services.audit.log_event(
        action="poll.delete",
        resource_type="poll",
        resource_id=poll_id,
        ip_address=request_ip(request),
    )
    return MessageResponse(message="Poll deleted successfully")
