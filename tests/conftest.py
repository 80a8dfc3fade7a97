"""Pytest fixtures for media-reliability tests."""

import json
from collections.abc import Callable
from itertools import count
from typing import Any

import pytest

from media_reliability.config.settings import Settings
from media_reliability.ingestion.schemas import RedditPost
from media_reliability.sources.schemas import Source

_ids = count(1)


@pytest.fixture
def make_source() -> Callable[..., Source]:
    """
    Factory for registry entries.

    Only raw fields are accepted; normalized fields are always derived
    by the model itself.
    """

    def _make(**overrides: Any) -> Source:
        data: dict[str, Any] = {
            "id": f"source-{next(_ids)}",
            "name": "name",
            "nameIsCommon": False,
            "type": "journalist",
            "tier": None,
            "organization": None,
            "twitter": None,
            "domains": None,
        }
        data.update(overrides)
        return Source.model_validate(data)

    return _make


@pytest.fixture
def acme_source(make_source) -> Source:
    """Tier 2 outlet with one domain."""
    return make_source(
        id="a",
        name="Acme News",
        type="media",
        tier=2,
        domains=["acme.example"],
    )


@pytest.fixture
def registry_entries() -> list[dict[str, Any]]:
    """A small registry covering every source type and tier shape."""
    return [
        {
            "id": "acme",
            "name": "Acme News",
            "type": "media",
            "tier": 2,
            "twitter": "AcmeNews",
            "domains": ["acme.example"],
        },
        {
            "id": "tabloid",
            "name": "Daily Gossip",
            "type": "media",
            "tier": 5,
            "domains": ["dailygossip.example"],
        },
        {
            "id": "jane",
            "name": "Jane Reporter",
            "type": "journalist",
            "tier": 1,
            "organization": "Acme News",
            "twitter": "janereports",
        },
        {
            "id": "scoops",
            "name": "Scoops",
            "nameIsCommon": True,
            "type": "aggregator",
            "tier": None,
            "twitter": "fastscoops",
        },
    ]


@pytest.fixture
def registry_json(registry_entries) -> str:
    """registry_entries serialized as moderators would paste them."""
    return json.dumps(registry_entries)


@pytest.fixture
def test_settings() -> Settings:
    """Settings with complete Reddit credentials."""
    return Settings(
        environment="development",
        log_level="DEBUG",
        reddit_client_id="client-id",
        reddit_client_secret="client-secret",
        reddit_username="reliability-bot",
        reddit_password="hunter2",
        max_http_retries=0,
    )


@pytest.fixture
def link_post() -> RedditPost:
    """A link post to an Acme article."""
    return RedditPost(
        id="t3_abc123",
        subreddit_name="soccer",
        title="Club agrees fee for striker",
        url="https://www.acme.example/sport/transfer",
        author_name="some_user",
    )
