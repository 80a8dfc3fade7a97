"""
Transport for the Reddit API: pacing, retries and error mapping.

RedditClient opens one HTTPClient per session. Each attempt first takes
a token from the RateLimiter. 429s, transient 5xx answers, timeouts and
dropped connections are retried with jittered exponential backoff.
Reddit reports the caller's remaining quota in X-Ratelimit-* headers;
those are fed back into the limiter so the bot slows down before Reddit
starts refusing requests.
"""

import asyncio
import logging
import random
import time
from dataclasses import dataclass, field
from typing import Any

import httpx

logger = logging.getLogger(__name__)

_TRANSIENT_STATUSES = frozenset({429, 500, 502, 503, 504})
_TRANSIENT_ERRORS = (httpx.TimeoutException, httpx.ConnectError, httpx.ReadError)


@dataclass
class RateLimiter:
    """
    Token bucket refilled continuously at `rate` tokens per minute.

    The bucket starts full, so up to `rate` calls may go out back to back
    before pacing kicks in.
    """

    rate: int
    _tokens: float = field(init=False)
    _stamp: float = field(init=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    def __post_init__(self) -> None:
        self._tokens = float(self.rate)
        self._stamp = time.monotonic()

    def _refill(self) -> None:
        now = time.monotonic()
        self._tokens = min(float(self.rate), self._tokens + (now - self._stamp) * self.rate / 60.0)
        self._stamp = now

    async def acquire(self) -> None:
        """Take one token, sleeping until the bucket holds one."""
        async with self._lock:
            self._refill()
            if self._tokens >= 1:
                self._tokens -= 1
                return

            delay = (1 - self._tokens) * 60.0 / self.rate
            logger.debug(f"Pacing request for {delay:.2f}s")
            await asyncio.sleep(delay)
            self._tokens = 0.0
            self._stamp = time.monotonic()

    def sync_with_server(self, remaining: float, reset_seconds: float) -> None:
        """
        Align the bucket with the quota Reddit reports.

        With nothing left, the next acquire() waits out the reset window.
        """
        if remaining < 1:
            self._tokens = 1 - reset_seconds * self.rate / 60.0
        else:
            self._tokens = min(self._tokens, remaining)


@dataclass
class RetryConfig:
    """
    Backoff policy for transient failures.

    Delay for retry n (0-indexed) is min(base_delay * 2**n, max_backoff_seconds),
    stretched by up to jitter_factor of itself.
    """

    max_retries: int = 3
    max_backoff_seconds: float = 60.0
    base_delay: float = 1.0
    jitter_factor: float = 0.1

    def calculate_backoff(self, attempt: int) -> float:
        """Seconds to wait before retry number `attempt` (0-indexed)."""
        delay = min(self.base_delay * (2**attempt), self.max_backoff_seconds)
        return delay * (1 + self.jitter_factor * random.random())

    def is_retryable_status(self, status_code: int) -> bool:
        """429 and gateway-style 5xx answers are worth another try."""
        return status_code in _TRANSIENT_STATUSES

    def is_retryable_exception(self, exc: Exception) -> bool:
        """Timeouts and broken connections are worth another try."""
        return isinstance(exc, _TRANSIENT_ERRORS)


class HTTPClientError(Exception):
    """A Reddit request failed; carries the last status and body when known."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class RateLimitError(HTTPClientError):
    """Reddit kept answering 429 until retries ran out."""

    pass


def _header_float(response: httpx.Response, name: str) -> float | None:
    value = response.headers.get(name)
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class HTTPClient:
    """
    Async HTTP session with pacing and retries.

    Example:
        async with HTTPClient(RetryConfig(max_retries=3)) as client:
            response = await client.post(
                "https://oauth.reddit.com/api/comment",
                data={"thing_id": "t3_abc", "text": "..."},
                headers={"Authorization": "Bearer ..."},
            )
    """

    def __init__(
        self,
        retry_config: RetryConfig | None = None,
        timeout: float = 30.0,
        rate_limiter: RateLimiter | None = None,
        headers: dict[str, str] | None = None,
    ):
        """
        Args:
            retry_config: Backoff policy, RetryConfig() when None
            timeout: Per-request timeout in seconds
            rate_limiter: Token bucket consulted before every attempt
            headers: Sent with every request (User-Agent)
        """
        self.retry_config = retry_config or RetryConfig()
        self.timeout = timeout
        self._rate_limiter = rate_limiter
        self._headers = dict(headers) if headers else {}
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "HTTPClient":
        self._client = httpx.AsyncClient(timeout=self.timeout, headers=self._headers)
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """GET with pacing and retries."""
        return await self._request_with_retry("GET", url, params=params, headers=headers)

    async def post(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        data: dict[str, Any] | None = None,
        auth: tuple[str, str] | None = None,
    ) -> httpx.Response:
        """
        Form-encoded POST with pacing and retries.

        Args:
            data: Form fields (Reddit's write endpoints take forms, not JSON)
            auth: HTTP basic credentials, used for the token endpoint

        Raises:
            RateLimitError: Still 429 after the last retry
            HTTPClientError: Any other failure
        """
        return await self._request_with_retry(
            "POST", url, params=params, headers=headers, data=data, auth=auth
        )

    async def _request_with_retry(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        data: dict[str, Any] | None = None,
        auth: tuple[str, str] | None = None,
    ) -> httpx.Response:
        if self._client is None:
            raise RuntimeError("HTTPClient must be used as async context manager")

        attempts = self.retry_config.max_retries + 1
        for attempt in range(attempts):
            last_attempt = attempt == attempts - 1
            if self._rate_limiter is not None:
                await self._rate_limiter.acquire()

            try:
                response = await self._client.request(
                    method,
                    url,
                    params=params or None,
                    headers=headers or None,
                    data=data,
                    auth=auth,
                )
            except httpx.HTTPError as e:
                if not self.retry_config.is_retryable_exception(e):
                    raise HTTPClientError(f"{method} {url} failed: {e}") from e
                if last_attempt:
                    raise HTTPClientError(f"Request failed after {attempts} attempts: {e}") from e
                await self._back_off(attempt, url, type(e).__name__)
                continue

            self._observe_quota(response)
            status = response.status_code

            if self.retry_config.is_retryable_status(status):
                if not last_attempt:
                    await self._back_off(attempt, url, f"status {status}", response)
                    continue
                if status == 429:
                    raise RateLimitError(
                        f"Rate limit exceeded for {url} after {attempts} attempts",
                        status_code=status,
                        response_body=response.text,
                    )
                raise HTTPClientError(
                    f"Request failed with status {status} after {attempts} attempts",
                    status_code=status,
                    response_body=response.text,
                )

            if status >= 400:
                raise HTTPClientError(
                    f"Request failed with status {status}",
                    status_code=status,
                    response_body=response.text,
                )

            return response

        raise HTTPClientError(f"No attempts made for {url}")

    async def _back_off(
        self,
        attempt: int,
        url: str,
        reason: str,
        response: httpx.Response | None = None,
    ) -> None:
        """Sleep before the next attempt, preferring Reddit's Retry-After."""
        delay = self.retry_config.calculate_backoff(attempt)
        if response is not None:
            retry_after = _header_float(response, "retry-after")
            if retry_after is not None:
                delay = min(retry_after, self.retry_config.max_backoff_seconds)

        logger.warning(
            f"{reason} from {url} on attempt {attempt + 1}/{self.retry_config.max_retries + 1}, "
            f"retrying in {delay:.2f}s"
        )
        await asyncio.sleep(delay)

    def _observe_quota(self, response: httpx.Response) -> None:
        """Feed Reddit's X-Ratelimit-* headers into the limiter."""
        if self._rate_limiter is None:
            return
        remaining = _header_float(response, "x-ratelimit-remaining")
        reset = _header_float(response, "x-ratelimit-reset")
        if remaining is not None and reset is not None:
            self._rate_limiter.sync_with_server(remaining, reset)
