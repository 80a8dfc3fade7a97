"""Tests for the retrying HTTP layer under the Reddit client."""

import base64
from unittest.mock import AsyncMock, patch

import httpx
import pytest
import respx

from media_reliability.reddit.http_client import (
    HTTPClient,
    HTTPClientError,
    RateLimiter,
    RateLimitError,
    RetryConfig,
)

API_URL = "https://oauth.reddit.com/api/info"
FAST_RETRY = RetryConfig(max_retries=2, base_delay=0.01, jitter_factor=0.0)


class TestRetryConfig:
    """Tests for RetryConfig."""

    def test_defaults(self):
        config = RetryConfig()

        assert config.max_retries == 3
        assert config.max_backoff_seconds == 60.0
        assert config.base_delay == 1.0
        assert config.jitter_factor == 0.1

    def test_backoff_doubles_until_capped(self):
        config = RetryConfig(base_delay=0.5, max_backoff_seconds=3.0, jitter_factor=0.0)

        assert [config.calculate_backoff(n) for n in range(5)] == [0.5, 1.0, 2.0, 3.0, 3.0]

    def test_jitter_bounded(self):
        config = RetryConfig(base_delay=2.0, jitter_factor=0.5)

        backoffs = [config.calculate_backoff(0) for _ in range(50)]

        assert all(2.0 <= b < 3.0 for b in backoffs)

    @pytest.mark.parametrize("status", [429, 500, 502, 503, 504])
    def test_retryable_status(self, status):
        assert RetryConfig().is_retryable_status(status) is True

    @pytest.mark.parametrize("status", [200, 204, 400, 401, 403, 404, 501])
    def test_non_retryable_status(self, status):
        assert RetryConfig().is_retryable_status(status) is False

    def test_retryable_exceptions(self):
        config = RetryConfig()

        assert config.is_retryable_exception(httpx.ReadTimeout("slow"))
        assert config.is_retryable_exception(httpx.ConnectError("refused"))
        assert config.is_retryable_exception(httpx.ReadError("reset"))
        assert not config.is_retryable_exception(ValueError("bad"))


class TestRateLimiter:
    """Tests for RateLimiter."""

    @pytest.mark.asyncio
    async def test_burst_within_capacity_does_not_wait(self):
        limiter = RateLimiter(rate=5)

        with patch("media_reliability.reddit.http_client.asyncio.sleep", new_callable=AsyncMock) as sleep:
            for _ in range(5):
                await limiter.acquire()

        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_waits_when_bucket_empty(self):
        limiter = RateLimiter(rate=60)
        limiter._tokens = 0.0

        with patch("media_reliability.reddit.http_client.asyncio.sleep", new_callable=AsyncMock) as sleep:
            await limiter.acquire()

        sleep.assert_awaited_once()
        wait = sleep.await_args.args[0]
        assert 0 < wait <= 1.0

    def test_server_quota_caps_tokens(self):
        limiter = RateLimiter(rate=60)

        limiter.sync_with_server(remaining=5, reset_seconds=120)

        assert limiter._tokens == 5

    @pytest.mark.asyncio
    async def test_exhausted_server_quota_waits_for_reset(self):
        limiter = RateLimiter(rate=60)
        limiter.sync_with_server(remaining=0, reset_seconds=30)

        with patch("media_reliability.reddit.http_client.asyncio.sleep", new_callable=AsyncMock) as sleep:
            await limiter.acquire()

        assert sleep.await_args.args[0] == pytest.approx(30, abs=0.1)


class TestHTTPClient:
    """Tests for HTTPClient."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_get_with_params(self):
        route = respx.get(API_URL).mock(return_value=httpx.Response(200, json={"kind": "Listing"}))

        async with HTTPClient() as client:
            response = await client.get(API_URL, params={"id": "t3_abc", "raw_json": 1})

        assert response.json() == {"kind": "Listing"}
        request = route.calls.last.request
        assert request.url.params["id"] == "t3_abc"
        assert request.url.params["raw_json"] == "1"

    @pytest.mark.asyncio
    @respx.mock
    async def test_post_form_encoded(self):
        route = respx.post("https://oauth.reddit.com/api/comment").mock(
            return_value=httpx.Response(200, json={})
        )

        async with HTTPClient() as client:
            await client.post(
                "https://oauth.reddit.com/api/comment",
                data={"thing_id": "t3_abc", "text": "hello world"},
            )

        request = route.calls.last.request
        assert request.headers["content-type"] == "application/x-www-form-urlencoded"
        assert request.content == b"thing_id=t3_abc&text=hello+world"

    @pytest.mark.asyncio
    @respx.mock
    async def test_post_basic_auth(self):
        route = respx.post("https://www.reddit.com/api/v1/access_token").mock(
            return_value=httpx.Response(200, json={})
        )

        async with HTTPClient() as client:
            await client.post(
                "https://www.reddit.com/api/v1/access_token",
                data={"grant_type": "password"},
                auth=("id", "secret"),
            )

        expected = base64.b64encode(b"id:secret").decode()
        assert route.calls.last.request.headers["Authorization"] == f"Basic {expected}"

    @pytest.mark.asyncio
    @respx.mock
    async def test_default_and_request_headers(self):
        route = respx.get(API_URL).mock(return_value=httpx.Response(200, json={}))

        async with HTTPClient(headers={"User-Agent": "media-reliability/test"}) as client:
            await client.get(API_URL, headers={"Authorization": "Bearer tok"})

        request = route.calls.last.request
        assert request.headers["User-Agent"] == "media-reliability/test"
        assert request.headers["Authorization"] == "Bearer tok"

    @pytest.mark.asyncio
    @respx.mock
    async def test_retries_then_succeeds(self):
        route = respx.get(API_URL).mock(
            side_effect=[
                httpx.Response(503, text="busy"),
                httpx.Response(429, text="slow down"),
                httpx.Response(200, json={"ok": True}),
            ]
        )

        async with HTTPClient(retry_config=FAST_RETRY) as client:
            response = await client.get(API_URL)

        assert response.status_code == 200
        assert route.call_count == 3

    @pytest.mark.asyncio
    @respx.mock
    async def test_rate_limit_error_after_retries(self):
        route = respx.get(API_URL).mock(return_value=httpx.Response(429, text="slow down"))

        async with HTTPClient(retry_config=FAST_RETRY) as client:
            with pytest.raises(RateLimitError) as exc_info:
                await client.get(API_URL)

        assert route.call_count == 3
        assert exc_info.value.status_code == 429
        assert "Rate limit exceeded" in str(exc_info.value)

    @pytest.mark.asyncio
    @respx.mock
    async def test_server_error_after_retries(self):
        respx.get(API_URL).mock(return_value=httpx.Response(502, text="bad gateway"))

        async with HTTPClient(retry_config=FAST_RETRY) as client:
            with pytest.raises(HTTPClientError) as exc_info:
                await client.get(API_URL)

        assert exc_info.value.status_code == 502
        assert exc_info.value.response_body == "bad gateway"
        assert "failed with status 502 after 3 attempts" in str(exc_info.value)

    @pytest.mark.asyncio
    @respx.mock
    async def test_client_error_not_retried(self):
        route = respx.get(API_URL).mock(return_value=httpx.Response(403, text="forbidden"))

        async with HTTPClient(retry_config=FAST_RETRY) as client:
            with pytest.raises(HTTPClientError) as exc_info:
                await client.get(API_URL)

        assert route.call_count == 1
        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    @respx.mock
    async def test_connect_error_retried(self):
        route = respx.get(API_URL).mock(
            side_effect=[httpx.ConnectError("refused"), httpx.Response(200, json={})]
        )

        async with HTTPClient(retry_config=FAST_RETRY) as client:
            response = await client.get(API_URL)

        assert response.status_code == 200
        assert route.call_count == 2

    @pytest.mark.asyncio
    @respx.mock
    async def test_timeout_exhausts_retries(self):
        respx.get(API_URL).mock(side_effect=httpx.ReadTimeout("slow"))

        async with HTTPClient(retry_config=FAST_RETRY) as client:
            with pytest.raises(HTTPClientError, match="after 3 attempts"):
                await client.get(API_URL)

    @pytest.mark.asyncio
    @respx.mock
    async def test_rate_limiter_acquired_per_attempt(self):
        respx.get(API_URL).mock(
            side_effect=[httpx.Response(500), httpx.Response(200, json={})]
        )
        limiter = RateLimiter(rate=60)
        limiter.acquire = AsyncMock()

        async with HTTPClient(retry_config=FAST_RETRY, rate_limiter=limiter) as client:
            await client.get(API_URL)

        assert limiter.acquire.await_count == 2

    @pytest.mark.asyncio
    async def test_requires_context_manager(self):
        client = HTTPClient()

        with pytest.raises(RuntimeError, match="must be used as async context manager"):
            await client.get(API_URL)

    @pytest.mark.asyncio
    @respx.mock
    async def test_retry_after_header_honoured(self):
        respx.get(API_URL).mock(
            side_effect=[
                httpx.Response(429, headers={"Retry-After": "7"}),
                httpx.Response(200, json={}),
            ]
        )

        with patch("media_reliability.reddit.http_client.asyncio.sleep", new_callable=AsyncMock) as sleep:
            async with HTTPClient(retry_config=FAST_RETRY) as client:
                await client.get(API_URL)

        sleep.assert_awaited_once_with(7.0)

    @pytest.mark.asyncio
    @respx.mock
    async def test_quota_headers_feed_limiter(self):
        respx.get(API_URL).mock(
            return_value=httpx.Response(
                200,
                json={},
                headers={"X-Ratelimit-Remaining": "12.0", "X-Ratelimit-Reset": "300"},
            )
        )
        limiter = RateLimiter(rate=60)

        async with HTTPClient(rate_limiter=limiter) as client:
            await client.get(API_URL)

        assert limiter._tokens == 12.0
