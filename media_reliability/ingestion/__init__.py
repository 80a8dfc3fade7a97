"""Ingestion: Reddit submissions to normalized scan content."""

from media_reliability.ingestion.post import extract_links, is_self_link, process_post
from media_reliability.ingestion.schemas import PostData, PostSubmitEvent, RedditPost

__all__ = [
    "PostData",
    "PostSubmitEvent",
    "RedditPost",
    "extract_links",
    "is_self_link",
    "process_post",
]
