"""Post, comment and report models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from freedomwall.models.base import new_id, now_iso

ANONYMOUS = "Anonymous"

THUMBS_UP = "thumbsUp"
THUMBS_DOWN = "thumbsDown"
REACTION_KINDS = (THUMBS_UP, THUMBS_DOWN)


@dataclass
class UserReaction:
    user_id: str
    reaction: str

    def to_dict(self) -> dict:
        return {"userId": self.user_id, "reaction": self.reaction}


@dataclass
class Comment:
    """A comment owned by a post.  Addressed by its index in the post."""

    message: str
    name: str = ANONYMOUS
    created_at: str = ""
    thumbs_up: int = 0
    thumbs_down: int = 0
    user_reactions: list[UserReaction] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.created_at:
            self.created_at = now_iso()
        if not self.name:
            self.name = ANONYMOUS

    def reaction_of(self, user_id: str) -> Optional[UserReaction]:
        for entry in self.user_reactions:
            if entry.user_id == user_id:
                return entry
        return None

    def reaction_summary(
        self,
        include_private: bool = False,
        user_id: Optional[str] = None,
        mask_id: Optional[Callable[[str], str]] = None,
    ) -> dict:
        """Counts, plus the reaction of *user_id* when given.

        Raw caller ids are only listed with *include_private*; otherwise
        ``userReactions`` is listed only when *mask_id* is given, with each
        id replaced by ``mask_id(id)``.
        """
        data: dict[str, Any] = {"thumbsUp": self.thumbs_up, "thumbsDown": self.thumbs_down}
        if user_id is not None:
            own = self.reaction_of(user_id)
            data["userReaction"] = own.reaction if own else None
        if include_private:
            data["userReactions"] = [r.to_dict() for r in self.user_reactions]
        elif mask_id is not None:
            data["userReactions"] = [
                {"userId": mask_id(r.user_id), "reaction": r.reaction} for r in self.user_reactions
            ]
        return data

    def to_dict(
        self,
        include_private: bool = False,
        user_id: Optional[str] = None,
        mask_id: Optional[Callable[[str], str]] = None,
    ) -> dict:
        return {
            "name": self.name,
            "message": self.message,
            "createdAt": self.created_at,
            **self.reaction_summary(include_private, user_id, mask_id),
        }

    @staticmethod
    def from_dict(d: dict) -> "Comment":
        return Comment(
            message=d["message"],
            name=d.get("name", ANONYMOUS),
            created_at=d.get("createdAt", ""),
            thumbs_up=d.get("thumbsUp", 0),
            thumbs_down=d.get("thumbsDown", 0),
            user_reactions=[
                UserReaction(user_id=r["userId"], reaction=r["reaction"])
                for r in d.get("userReactions", [])
            ],
        )


@dataclass
class Report:
    user_id: str
    reason: str
    reported_at: str = ""

    def __post_init__(self) -> None:
        if not self.reported_at:
            self.reported_at = now_iso()

    def to_dict(self) -> dict:
        return {"userId": self.user_id, "reason": self.reason, "reportedAt": self.reported_at}


@dataclass
class Origin:
    """Where a post came from.  Only ever shown to admins."""

    ip: str = ""
    user_agent: str = ""
    session_id: str = ""

    def to_dict(self) -> dict:
        return {"ip": self.ip, "userAgent": self.user_agent, "sessionId": self.session_id}


@dataclass
class Post:
    """A wall post together with its comments, likes and reports."""

    message: str
    name: str = ANONYMOUS
    id: str = ""
    likes: int = 0
    liked_by: list[str] = field(default_factory=list)
    comments: list[Comment] = field(default_factory=list)
    report_count: int = 0
    reports: list[Report] = field(default_factory=list)
    reported_by: list[str] = field(default_factory=list)
    is_hidden: bool = False
    is_flagged: bool = False
    engagement_score: int = 0
    created_at: str = ""
    updated_at: str = ""
    origin: Origin = field(default_factory=Origin)

    def __post_init__(self) -> None:
        if not self.id:
            self.id = new_id()
        if not self.name:
            self.name = ANONYMOUS
        if not self.created_at:
            self.created_at = now_iso()
        if not self.updated_at:
            self.updated_at = self.created_at

    def comment_at(self, index: int) -> Optional[Comment]:
        if 0 <= index < len(self.comments):
            return self.comments[index]
        return None

    def to_dict(
        self,
        include_private: bool = False,
        user_id: Optional[str] = None,
        mask_id: Optional[Callable[[str], str]] = None,
    ) -> dict[str, Any]:
        """Serialise for the API.

        Caller ids (likers, reporters, comment reactions) and origin
        metadata are only included when *include_private* is set (admin
        listings and storage).  With *user_id* the view carries that
        caller's own like and reactions; *mask_id* replaces the ids in
        public comment reaction lists.
        """
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "message": self.message,
            "likes": self.likes,
            "comments": [c.to_dict(include_private, user_id, mask_id) for c in self.comments],
            "reportCount": self.report_count,
            "isHidden": self.is_hidden,
            "isFlagged": self.is_flagged,
            "engagementScore": self.engagement_score,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if user_id is not None:
            data["userLiked"] = user_id in self.liked_by
        if include_private:
            data["likedBy"] = list(self.liked_by)
            data["reports"] = [r.to_dict() for r in self.reports]
            data["reportedBy"] = list(self.reported_by)
            data["origin"] = self.origin.to_dict()
        return data

    @staticmethod
    def from_dict(d: dict) -> "Post":
        origin = d.get("origin") or {}
        return Post(
            id=d["id"],
            name=d.get("name", ANONYMOUS),
            message=d["message"],
            likes=d.get("likes", 0),
            liked_by=list(d.get("likedBy", [])),
            comments=[Comment.from_dict(c) for c in d.get("comments", [])],
            report_count=d.get("reportCount", 0),
            reports=[
                Report(user_id=r["userId"], reason=r.get("reason", ""), reported_at=r.get("reportedAt", ""))
                for r in d.get("reports", [])
            ],
            reported_by=list(d.get("reportedBy", [])),
            is_hidden=d.get("isHidden", False),
            is_flagged=d.get("isFlagged", False),
            engagement_score=d.get("engagementScore", 0),
            created_at=d.get("createdAt", ""),
            updated_at=d.get("updatedAt", ""),
            origin=Origin(
                ip=origin.get("ip", ""),
                user_agent=origin.get("userAgent", ""),
                session_id=origin.get("sessionId", ""),
            ),
        )
