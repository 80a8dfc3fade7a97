"""
Reddit API client for the reliability bot.

Thin wrapper over the OAuth API for the handful of calls the bot makes:
- Fetch a submission by id
- Submit, distinguish (sticky) and lock the report comment
- Set link flair
- Send a private message (error reports)

Authenticates as a script app with the password grant; the token is
fetched lazily and refreshed once on a 401.
"""

import logging
import time
from typing import Any

from media_reliability.config.settings import Settings, get_settings
from media_reliability.ingestion.schemas import RedditPost
from media_reliability.reddit.http_client import (
    HTTPClient,
    HTTPClientError,
    RateLimiter,
    RetryConfig,
)

logger = logging.getLogger(__name__)

# Reddit API endpoints
REDDIT_API_BASE = "https://oauth.reddit.com"
REDDIT_TOKEN_URL = "https://www.reddit.com/api/v1/access_token"


class RedditAPIError(HTTPClientError):
    """Raised when Reddit answers 200 but reports errors in the payload."""

    pass


def _fullname(thing_id: str, prefix: str) -> str:
    """Add a kind prefix (t1_, t3_) unless already present."""
    return thing_id if thing_id.startswith(f"{prefix}_") else f"{prefix}_{thing_id}"


class RedditClient:
    """
    Async Reddit OAuth client.

    Rate Limits:
        - 60 requests per minute by default (settings.reddit_rate_limit)

    Usage:
        async with RedditClient() as reddit:
            post = await reddit.get_post_by_id("t3_abc123")
    """

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: HTTPClient | None = None,
    ):
        """
        Initialize Reddit client.

        Args:
            settings: Credentials and limits, defaults to get_settings()
            http_client: Preconfigured HTTP client (mainly for tests)
        """
        self._settings = settings or get_settings()
        self._http = http_client or HTTPClient(
            retry_config=RetryConfig(
                max_retries=self._settings.max_http_retries,
                max_backoff_seconds=self._settings.max_backoff_seconds,
            ),
            timeout=self._settings.http_timeout_seconds,
            rate_limiter=RateLimiter(rate=self._settings.reddit_rate_limit),
            headers={"User-Agent": self._settings.reddit_user_agent},
        )
        self._access_token: str | None = None
        self._token_expires_at: float = 0.0

        if not self._settings.reddit_configured:
            logger.warning(
                "Reddit API credentials not configured. "
                "Client will not be able to authenticate."
            )

    async def __aenter__(self) -> "RedditClient":
        await self._http.__aenter__()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self._http.__aexit__(exc_type, exc_val, exc_tb)

    # ── Auth ────────────────────────────────────────────────────

    async def _get_access_token(self) -> str:
        """
        Get an OAuth access token, reusing the cached one until it expires.

        Raises:
            HTTPClientError: If credentials are missing or rejected
        """
        if self._access_token and time.monotonic() < self._token_expires_at:
            return self._access_token

        if not self._settings.reddit_configured:
            raise HTTPClientError("Reddit API credentials not configured")

        response = await self._http.post(
            REDDIT_TOKEN_URL,
            data={
                "grant_type": "password",
                "username": self._settings.reddit_username,
                "password": self._settings.reddit_password,
            },
            auth=(self._settings.reddit_client_id, self._settings.reddit_client_secret),
        )
        payload = response.json()
        token = payload.get("access_token")
        if not token:
            raise HTTPClientError(
                f"Reddit token request failed: {payload.get('error', 'no access_token')}",
                status_code=response.status_code,
                response_body=response.text,
            )

        # Refresh a minute early
        self._access_token = token
        self._token_expires_at = time.monotonic() + float(payload.get("expires_in", 3600)) - 60
        logger.debug("Obtained Reddit access token")
        return token

    async def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {await self._get_access_token()}"}

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        try:
            response = await self._http.get(
                f"{REDDIT_API_BASE}{path}", params=params, headers=await self._auth_headers()
            )
        except HTTPClientError as e:
            if e.status_code != 401:
                raise
            self._access_token = None
            response = await self._http.get(
                f"{REDDIT_API_BASE}{path}", params=params, headers=await self._auth_headers()
            )
        return response.json()

    async def _post(self, path: str, data: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self._http.post(
                f"{REDDIT_API_BASE}{path}", data=data, headers=await self._auth_headers()
            )
        except HTTPClientError as e:
            if e.status_code != 401:
                raise
            self._access_token = None
            response = await self._http.post(
                f"{REDDIT_API_BASE}{path}", data=data, headers=await self._auth_headers()
            )

        payload = response.json() if response.content else {}
        errors = payload.get("json", {}).get("errors") if isinstance(payload, dict) else None
        if errors:
            raise RedditAPIError(
                f"Reddit rejected {path}: {errors}",
                status_code=response.status_code,
                response_body=response.text,
            )
        return payload

    # ── Operations ──────────────────────────────────────────────

    async def get_post_by_id(self, post_id: str) -> RedditPost:
        """
        Fetch a submission.

        Args:
            post_id: Fullname (t3_abc) or bare id (abc)

        Raises:
            HTTPClientError: On transport errors
            LookupError: If Reddit returns no such post
        """
        fullname = _fullname(post_id, "t3")
        payload = await self._get("/api/info", params={"id": fullname, "raw_json": 1})
        children = payload.get("data", {}).get("children", [])
        if not children:
            raise LookupError(f"Post {fullname} not found")
        return RedditPost.from_api(children[0]["data"])

    async def submit_comment(self, parent_id: str, text: str) -> str:
        """
        Reply to a submission.

        Returns:
            Fullname of the new comment (t1_...)
        """
        payload = await self._post(
            "/api/comment",
            data={"api_type": "json", "thing_id": _fullname(parent_id, "t3"), "text": text},
        )
        things = payload.get("json", {}).get("data", {}).get("things", [])
        if not things:
            raise RedditAPIError(f"Comment on {parent_id} returned no thing")
        return things[0]["data"]["name"]

    async def distinguish_comment(self, comment_id: str, sticky: bool = True) -> None:
        """Distinguish a comment as moderator, optionally stickied."""
        await self._post(
            "/api/distinguish",
            data={
                "api_type": "json",
                "id": _fullname(comment_id, "t1"),
                "how": "yes",
                "sticky": "true" if sticky else "false",
            },
        )

    async def lock(self, thing_id: str) -> None:
        """Lock a comment or submission (fullname required)."""
        await self._post("/api/lock", data={"id": thing_id})

    async def set_post_flair(
        self,
        subreddit_name: str,
        post_id: str,
        text: str,
        flair_template_id: str = "",
        css_class: str = "",
    ) -> None:
        """Apply link flair to a submission."""
        data = {
            "api_type": "json",
            "link": _fullname(post_id, "t3"),
            "text": text,
        }
        if flair_template_id:
            data["flair_template_id"] = flair_template_id
        if css_class:
            data["css_class"] = css_class
        await self._post(f"/r/{subreddit_name}/api/selectflair", data=data)

    async def send_private_message(self, to: str, subject: str, text: str) -> None:
        """
        Send a private message.

        Args:
            to: Username, or "/r/name" to reach a subreddit's modmail
        """
        await self._post(
            "/api/compose",
            data={"api_type": "json", "to": to, "subject": subject, "text": text},
        )
