"""Posts router -- the wall itself.

Prefix: ``/api/v1/posts``
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from freedomwall.errors import NotFoundError, ValidationError
from freedomwall.identity.resolver import UNKNOWN
from freedomwall.models.post import ANONYMOUS, Comment, Post
from freedomwall.moderation import actions, validator
from freedomwall.reactions import engine
from freedomwall.store.posts import SORT_LATEST, SORT_ORDERS, sort_posts
from web.backend.app.dependencies import Services, get_services
from web.backend.app.middleware.auth import require_admin
from web.backend.app.middleware.identity import CallerContext, get_caller, request_ip
from web.backend.app.middleware.rate_limit import ip_key, post_key, rate_limited, session_key, user_key
from web.backend.app.models.api import (
    AdminPostResponse,
    CreateCommentRequest,
    CreatePostRequest,
    LikeRequest,
    LikeResponse,
    MessageResponse,
    ModeratedPostResponse,
    PostListResponse,
    PostResponse,
    PostStatusRequest,
    ReactionSummaryResponse,
    ReactRequest,
    ReactResponse,
    ReportRequest,
    ReportResultResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/posts", tags=["posts"])

_SORT_PATTERN = "^(" + "|".join(SORT_ORDERS) + ")$"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _public(services: Services, post: Post, user_id: Optional[str] = None) -> PostResponse:
    return PostResponse.model_validate(post.to_dict(user_id=user_id, mask_id=services.public_id))


def _admin(post: Post) -> AdminPostResponse:
    return AdminPostResponse.model_validate(post.to_dict(include_private=True))


def _require_caller(caller: CallerContext, explicit: Optional[str]) -> str:
    user_id = caller.caller_id(explicit)
    if user_id == UNKNOWN:
        raise ValidationError("User identifier is required")
    return user_id


def _visible(services: Services, post_id: str) -> Post:
    post = services.posts.require(post_id)
    if post.is_hidden:
        raise NotFoundError("Post not found")
    return post


# =========================================================================
# Public endpoints
# =========================================================================


@router.get(
    "",
    response_model=PostListResponse,
    response_model_exclude_unset=True,
    dependencies=[rate_limited("read", ip_key)],
)
async def list_posts(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    sort: str = Query(SORT_LATEST, pattern=_SORT_PATTERN),
    user_id: Optional[str] = Query(None, alias="userId"),
    services: Services = Depends(get_services),
):
    """List visible posts, paginated."""
    result = services.posts.page(page=page, limit=limit, sort=sort)
    return PostListResponse(
        posts=[_public(services, p, user_id) for p in result.posts],
        current_page=result.current_page,
        total_pages=result.total_pages,
        has_more=result.has_more,
        total_posts=result.total_posts,
    )


@router.get(
    "/admin",
    response_model=list[AdminPostResponse],
    dependencies=[Depends(require_admin)],
)
async def list_posts_admin(
    sort: str = Query(SORT_LATEST, pattern=_SORT_PATTERN),
    services: Services = Depends(get_services),
):
    """Every post, hidden and flagged included, with tracking metadata."""
    return [_admin(p) for p in sort_posts(services.posts.list_all(), sort)]


@router.get(
    "/{post_id}",
    response_model=PostResponse,
    response_model_exclude_unset=True,
    dependencies=[rate_limited("read", ip_key)],
)
async def get_post(
    post_id: str,
    user_id: Optional[str] = Query(None, alias="userId"),
    services: Services = Depends(get_services),
):
    return _public(services, _visible(services, post_id), user_id)


@router.post(
    "",
    status_code=201,
    response_model=PostResponse,
    response_model_exclude_unset=True,
    dependencies=[rate_limited("post", post_key)],
)
async def create_post(
    req: CreatePostRequest,
    caller: CallerContext = Depends(get_caller),
    services: Services = Depends(get_services),
):
    """Create a post.  The name defaults to ``Anonymous``."""
    validator.validate_post(req.name, req.message, services.settings.content_limits)

    message = services.clean(req.message)
    if not message:
        raise ValidationError("Message cannot be empty")
    post = Post(
        name=services.clean(req.name) or ANONYMOUS,
        message=message,
        origin=caller.origin(),
    )
    services.posts.insert(post)
    logger.info("Created post %s", post.id)
    return _public(services, post)


@router.post(
    "/{post_id}/like",
    response_model=LikeResponse,
    dependencies=[rate_limited("like", user_key)],
)
async def like_post(
    post_id: str,
    req: LikeRequest,
    caller: CallerContext = Depends(get_caller),
    services: Services = Depends(get_services),
):
    """Toggle the caller's like on a post."""
    user_id = _require_caller(caller, req.user_id)
    device_check = services.settings.device_like_check
    _, result = services.posts.update(
        post_id, lambda post: engine.toggle_like(post, user_id, device_check=device_check)
    )
    return LikeResponse(likes=result.likes, liked=result.liked, message=result.message)


@router.post(
    "/{post_id}/comment",
    status_code=201,
    response_model=PostResponse,
    response_model_exclude_unset=True,
    dependencies=[rate_limited("comment", session_key)],
)
async def add_comment(
    post_id: str,
    req: CreateCommentRequest,
    services: Services = Depends(get_services),
):
    validator.validate_comment(req.name, req.message, services.settings.content_limits)

    message = services.clean(req.message)
    if not message:
        raise ValidationError("Comment cannot be empty")
    comment = Comment(name=services.clean(req.name) or ANONYMOUS, message=message)
    post, _ = services.posts.update(post_id, lambda p: actions.add_comment(p, comment))
    return _public(services, post)


@router.post(
    "/{post_id}/comments/{comment_index}/react",
    response_model=ReactResponse,
    dependencies=[rate_limited("like", user_key)],
)
async def react_to_comment(
    post_id: str,
    comment_index: int,
    req: ReactRequest,
    caller: CallerContext = Depends(get_caller),
    services: Services = Depends(get_services),
):
    """Toggle a thumbs-up/thumbs-down on one comment."""
    if not req.reaction:
        raise ValidationError("Reaction is required")
    user_id = _require_caller(caller, req.user_id)
    _, (result, comment) = services.posts.update(
        post_id, lambda post: engine.react_to_comment(post, comment_index, user_id, req.reaction)
    )
    return ReactResponse(
        result=result,
        comment=ReactionSummaryResponse.model_validate(
            comment.reaction_summary(user_id=user_id, mask_id=services.public_id)
        ),
    )


@router.post(
    "/{post_id}/report",
    response_model=ReportResultResponse,
    dependencies=[rate_limited("report", user_key)],
)
async def report_post(
    post_id: str,
    req: ReportRequest,
    caller: CallerContext = Depends(get_caller),
    services: Services = Depends(get_services),
):
    user_id = _require_caller(caller, req.user_id)
    validator.validate_report(user_id, req.reason, services.settings.content_limits)

    reason = services.clean(req.reason)
    threshold = services.settings.auto_flag_threshold
    post, _ = services.posts.update(
        post_id, lambda p: actions.report_post(p, user_id, reason, threshold=threshold)
    )
    if post.is_flagged:
        logger.info("Post %s flagged after %d reports", post.id, post.report_count)
    return ReportResultResponse(
        message="Post reported successfully",
        report_count=post.report_count,
        is_flagged=post.is_flagged,
    )


# =========================================================================
# Admin endpoints
# =========================================================================


@router.put(
    "/{post_id}/status",
    response_model=ModeratedPostResponse,
    dependencies=[Depends(require_admin)],
)
async def set_post_status(
    post_id: str,
    req: PostStatusRequest,
    request: Request,
    services: Services = Depends(get_services),
):
    """Hide, unhide, flag or unflag a post."""
    post, _ = services.posts.update(post_id, lambda p: actions.apply_post_action(p, req.action))
    services.audit.log_event(
        action=f"post.{req.action}",
        resource_type="post",
        resource_id=post_id,
        ip_address=request_ip(request),
    )
    return ModeratedPostResponse(message=f"Post {req.action} applied", post=_admin(post))


@router.delete(
    "/{post_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
)
async def delete_post(
    post_id: str,
    request: Request,
    services: Services = Depends(get_services),
):
    if not services.posts.delete(post_id):
        raise NotFoundError("Post not found")
    services.audit.log_event(
        action="post.delete",
        resource_type="post",
        resource_id=post_id,
        ip_address=request_ip(request),
    )
    return MessageResponse(message="Post deleted successfully")


@router.delete(
    "/{post_id}/comment/{comment_index}",
    response_model=ModeratedPostResponse,
    dependencies=[Depends(require_admin)],
)
async def delete_comment(
    post_id: str,
    comment_index: int,
    request: Request,
    services: Services = Depends(get_services),
):
    post, removed = services.posts.update(post_id, lambda p: actions.delete_comment(p, comment_index))
    services.audit.log_event(
        action="comment.delete",
        resource_type="post",
        resource_id=post_id,
        details={"index": comment_index, "message": removed.message[:100]},
        ip_address=request_ip(request),
    )
    return ModeratedPostResponse(message="Comment deleted successfully", post=_admin(post))
