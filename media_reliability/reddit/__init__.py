"""Reddit API access: OAuth client on top of a retrying HTTP layer."""

from media_reliability.reddit.client import RedditAPIError, RedditClient
from media_reliability.reddit.http_client import (
    HTTPClient,
    HTTPClientError,
    RateLimiter,
    RateLimitError,
    RetryConfig,
)

__all__ = [
    "HTTPClient",
    "HTTPClientError",
    "RateLimitError",
    "RateLimiter",
    "RedditAPIError",
    "RedditClient",
    "RetryConfig",
]
