"""Pydantic models for API request/response serialization.

Field names are snake_case in Python and camelCase on the wire.  Request
fields are deliberately permissive (mostly optional strings) so that
missing or empty values reach the validators and come back as a 400 with
a specific message.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------


class MessageResponse(ApiModel):
    message: str


# ---------------------------------------------------------------------------
# Posts
# ---------------------------------------------------------------------------


class UserReactionResponse(ApiModel):
    user_id: str
    reaction: str


class ReactionSummaryResponse(ApiModel):
    thumbs_up: int = 0
    thumbs_down: int = 0
    user_reaction: Optional[str] = None
    user_reactions: list[UserReactionResponse] = Field(default_factory=list)


class CommentResponse(ReactionSummaryResponse):
    name: str
    message: str
    created_at: str = ""


class ReportResponse(ApiModel):
    user_id: str
    reason: str
    reported_at: str = ""


class OriginResponse(ApiModel):
    ip: str = ""
    user_agent: str = ""
    session_id: str = ""


class PostResponse(ApiModel):
    """Public view of a post."""

    id: str
    name: str
    message: str
    likes: int = 0
    comments: list[CommentResponse] = Field(default_factory=list)
    report_count: int = 0
    is_hidden: bool = False
    is_flagged: bool = False
    engagement_score: int = 0
    created_at: str = ""
    updated_at: str = ""
    user_liked: Optional[bool] = None


class AdminPostResponse(PostResponse):
    """Admin view of a post, including moderation metadata."""

    liked_by: list[str] = Field(default_factory=list)
    reports: list[ReportResponse] = Field(default_factory=list)
    reported_by: list[str] = Field(default_factory=list)
    origin: OriginResponse = Field(default_factory=OriginResponse)


class PostListResponse(ApiModel):
    posts: list[PostResponse] = Field(default_factory=list)
    current_page: int = 1
    total_pages: int = 0
    has_more: bool = False
    total_posts: int = 0


class CreatePostRequest(ApiModel):
    name: Optional[str] = None
    message: Optional[str] = None


class LikeRequest(ApiModel):
    user_id: Optional[str] = None


class LikeResponse(ApiModel):
    likes: int
    liked: bool
    message: str = ""


class CreateCommentRequest(ApiModel):
    name: Optional[str] = None
    message: Optional[str] = None


class ReactRequest(ApiModel):
    reaction: Optional[str] = None
    user_id: Optional[str] = None


class ReactResponse(ApiModel):
    result: str
    comment: ReactionSummaryResponse


class ReportRequest(ApiModel):
    user_id: Optional[str] = None
    reason: Optional[str] = None


class ReportResultResponse(ApiModel):
    message: str
    report_count: int
    is_flagged: bool


class PostStatusRequest(ApiModel):
    action: str


class ModeratedPostResponse(ApiModel):
    message: str
    post: AdminPostResponse


# ---------------------------------------------------------------------------
# Polls
# ---------------------------------------------------------------------------


class PollOptionResponse(ApiModel):
    text: str
    votes: int = 0


class AdminPollOptionResponse(PollOptionResponse):
    voters: list[str] = Field(default_factory=list)


class PollResponse(ApiModel):
    id: str
    question: str
    options: list[PollOptionResponse] = Field(default_factory=list)
    is_active: bool = True
    expires_at: Optional[str] = None
    total_votes: int = 0
    created_by: str = "Anonymous"
    topics: list[str] = Field(default_factory=list)
    engagement_score: int = 0
    created_at: str = ""
    updated_at: str = ""
    user_voted: Optional[bool] = None


class AdminPollResponse(PollResponse):
    options: list[AdminPollOptionResponse] = Field(default_factory=list)


class CreatePollRequest(ApiModel):
    question: Optional[str] = None
    options: Optional[list[str]] = None
    expires_at: Optional[str] = None
    topics: list[str] = Field(default_factory=list)
    name: Optional[str] = None


class VoteRequest(ApiModel):
    option_index: Optional[int] = None
    option_indices: Optional[list[int]] = None
    user_id: Optional[str] = None

    def indices(self) -> list[int]:
        if self.option_indices is not None:
            return list(self.option_indices)
        if self.option_index is not None:
            return [self.option_index]
        return []


class PollResultEntry(ApiModel):
    text: str
    votes: int
    percentage: int


class PollResultsResponse(ApiModel):
    id: str
    question: str
    total_votes: int
    results: list[PollResultEntry] = Field(default_factory=list)
    is_active: bool
    expires_at: Optional[str] = None


class PollStatusRequest(ApiModel):
    is_active: bool


# ---------------------------------------------------------------------------
# Banned words
# ---------------------------------------------------------------------------


class BannedWordResponse(ApiModel):
    id: str
    word: str
    is_active: bool = True
    reason: str = ""
    added_by: str = "Admin"
    created_at: str = ""
    updated_at: str = ""


class CreateBannedWordRequest(ApiModel):
    word: Optional[str] = None
    reason: Optional[str] = None


class UpdateBannedWordRequest(ApiModel):
    word: Optional[str] = None
    reason: Optional[str] = None
    is_active: Optional[bool] = None


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


class AdminSessionRequest(ApiModel):
    admin_key: Optional[str] = None


class AuditEntryResponse(ApiModel):
    id: str
    timestamp: str
    actor: str
    action: str
    resource_type: str
    resource_id: str
    details: dict[str, Any] = Field(default_factory=dict)
    ip_address: str = ""
    success: bool = True
