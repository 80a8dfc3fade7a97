"""
Schemas for submissions entering the report pipeline.

RedditPost mirrors the subset of a Reddit link object the bot reads.
PostData is the processed form handed to the matcher and the reporter.
"""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field, field_validator

from media_reliability.matching.schemas import ScanContent


def _link_fullname(v: str | None) -> str | None:
    """Prefix bare link ids with t3_."""
    if not v or v.startswith("t3_"):
        return v
    return f"t3_{v}"


class RedditPost(BaseModel):
    """A Reddit submission as returned by /api/info."""

    id: str = Field(..., description="Fullname, e.g. t3_abc123")
    subreddit_name: str = Field(..., description="Subreddit without r/ prefix")
    title: str = Field(..., description="Post title")
    url: str = Field(..., description="Link target; the permalink for self-posts")
    body: str | None = Field(default=None, description="Self-text, markdown")
    author_name: str | None = Field(default=None, description="Author username")
    crosspost_parent_id: str | None = Field(
        default=None,
        description="Fullname of the original post when this is a crosspost",
    )

    @field_validator("id", "crosspost_parent_id")
    @classmethod
    def ensure_fullname(cls, v: str | None) -> str | None:
        """Store link ids with the t3_ prefix."""
        return _link_fullname(v)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "RedditPost":
        """
        Build a post from a Reddit link listing child's "data" object.

        Args:
            data: Raw link data (name, subreddit, title, url, selftext, ...)

        Returns:
            RedditPost instance
        """
        return cls(
            id=data.get("name") or data["id"],
            subreddit_name=data["subreddit"],
            title=data["title"],
            url=data.get("url") or data.get("permalink", ""),
            body=data.get("selftext") or None,
            author_name=data.get("author"),
            crosspost_parent_id=data.get("crosspost_parent"),
        )


class PostSubmitEvent(BaseModel):
    """A new-submission notification; every field may be missing."""

    post_id: str | None = None
    crosspost_parent_id: str | None = None
    subreddit_name: str | None = None
    author_name: str | None = None

    @field_validator("post_id", "crosspost_parent_id")
    @classmethod
    def ensure_fullname(cls, v: str | None) -> str | None:
        return _link_fullname(v)

    @classmethod
    def from_post(cls, post: RedditPost) -> "PostSubmitEvent":
        """Build the event a new-submission stream would emit for this post."""
        return cls(
            post_id=post.id,
            crosspost_parent_id=post.crosspost_parent_id,
            subreddit_name=post.subreddit_name,
            author_name=post.author_name,
        )


@dataclass(frozen=True)
class PostData:
    """A processed submission: identity plus the normalized scan content."""

    id: str
    subreddit_name: str
    content: ScanContent
    is_self_post: bool = False
