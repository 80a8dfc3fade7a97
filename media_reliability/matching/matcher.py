"""
Source matching engine.

Decides which registry sources a submission references. Four channels
are scanned independently and their matches are unioned:

- title: source name, then Twitter handle
- url:   Twitter profile URL, then source domain
- links: same as url, over every link found in the body
- body:  same as title (only when body analysis is enabled)

The result is deduplicated on Source.id and sorted by tier, untiered
sources last. Nothing here raises for registry data: a pattern that
cannot be built simply never matches.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from media_reliability.matching.patterns import handle_pattern, name_pattern, profile_path_pattern
from media_reliability.matching.schemas import MatchOptions, ParsedUrl, ScanContent
from media_reliability.sources.schemas import Source

logger = logging.getLogger(__name__)

TWITTER_HOSTNAMES = frozenset({"twitter.com", "x.com"})


# ── Title ───────────────────────────────────────────────────


def is_name_in_title(title_normalized: str, source: Source) -> bool:
    """
    Check if source.name is in the title.

    If source.name_is_common, only these patterns match:
        name: at the start of the title
        [name] anywhere in the title
        (name) anywhere in the title
    otherwise the name matches anywhere as a whole word.
    """
    pattern = name_pattern(source.name_normalized, source.name_is_common)
    return pattern is not None and pattern.search(title_normalized) is not None


def is_twitter_in_title(title_normalized: str, source: Source) -> bool:
    """Check if the source's handle is referenced in the title (@handle, [handle], ...)."""
    if not source.twitter_normalized:
        return False

    pattern = handle_pattern(source.twitter_normalized)
    return pattern is not None and pattern.search(title_normalized) is not None


# ── URL ─────────────────────────────────────────────────────


def is_twitter_in_url(url: ParsedUrl, source: Source) -> bool:
    """
    Check if the URL is a Twitter/X link to the source's profile.

    Only these paths match:
        /twitter_handle/status/1234567890
        /twitter_handle/
        /twitter_handle
    """
    if not source.twitter_normalized:
        return False

    if url.hostname.lower() not in TWITTER_HOSTNAMES:
        return False

    pattern = profile_path_pattern(source.twitter_normalized)
    return pattern is not None and pattern.search(url.path) is not None


def _hostname_in_domains(hostname: str, domains: Sequence[str]) -> bool:
    """Hostname equals a domain or is a subdomain of it (en.m.foo.com for foo.com)."""
    for domain in domains:
        if hostname == domain or hostname.endswith("." + domain):
            return True
    return False


def is_domain_in_url(url: ParsedUrl, source: Source) -> bool:
    """
    Check if the URL belongs to one of the source's domains.

    The primary URL has already had "www." stripped during post
    processing; it is stripped again here so a raw ParsedUrl works too.
    """
    if not source.domains:
        return False

    return _hostname_in_domains(url.without_www().hostname, source.domains)


# ── Links ───────────────────────────────────────────────────


def is_twitter_in_links(urls: Iterable[ParsedUrl], source: Source) -> bool:
    """Check if any link is a Twitter/X link to the source's profile."""
    if not source.twitter_normalized:
        return False

    return any(is_twitter_in_url(url, source) for url in urls)


def is_domain_in_links(urls: Iterable[ParsedUrl], source: Source) -> bool:
    """
    Check if any link belongs to one of the source's domains.

    Link hostnames are compared as received (no "www." stripping).
    """
    if not source.domains:
        return False

    return any(_hostname_in_domains(url.hostname, source.domains) for url in urls)


# ── Body ────────────────────────────────────────────────────


def is_name_in_body(body_normalized: str, source: Source) -> bool:
    """
    Check if source.name occurs anywhere in the body.

    Same rules as is_name_in_title(); the start-of-text anchor for
    common names refers to the start of the whole body.
    """
    pattern = name_pattern(source.name_normalized, source.name_is_common)
    if pattern is None:
        return False
    return any(True for _ in pattern.finditer(body_normalized))


def is_twitter_in_body(body_normalized: str, source: Source) -> bool:
    """Check if the source's handle is referenced anywhere in the body."""
    if not source.twitter_normalized:
        return False

    pattern = handle_pattern(source.twitter_normalized)
    if pattern is None:
        return False
    return any(True for _ in pattern.finditer(body_normalized))


# ── Aggregation ─────────────────────────────────────────────


def _tier_sort_key(source: Source) -> tuple[bool, int]:
    """Tiered sources first by tier; untiered sources after them."""
    return (source.tier is None, source.tier or 0)


class SourceMatcher:
    """
    Runs a source registry against submissions.

    The registry is held as an immutable tuple and never modified, so a
    single matcher can serve concurrent scans.

    Usage:
        >>> matcher = SourceMatcher(sources, MatchOptions(analyze_body=True))
        >>> matched = matcher.find(content)
        >>> if matched is None:
        ...     print("no sources found")
    """

    def __init__(
        self,
        sources: Iterable[Source],
        options: MatchOptions | None = None,
    ):
        """
        Initialize matcher.

        Args:
            sources: Validated registry entries
            options: Matching switches, defaults to MatchOptions()
        """
        self._sources: tuple[Source, ...] = tuple(sources)
        self.options = options or MatchOptions()

    @property
    def sources(self) -> tuple[Source, ...]:
        """Registry entries this matcher scans for."""
        return self._sources

    def find(self, content: ScanContent) -> tuple[Source, ...] | None:
        """
        Find every registry source referenced by the content.

        Args:
            content: Normalized submission

        Returns:
            Matched sources sorted by tier (untiered last), or None if
            nothing matched
        """
        found: dict[str, Source] = {}

        self._match_title(content.title_normalized, found)

        if content.url is not None:
            self._match_url(content.url, found)

        if content.links:
            self._match_links(content.links, found)

        if content.body_normalized and self.options.analyze_body:
            self._match_body(content.body_normalized, found)

        if not found:
            return None

        result = tuple(sorted(found.values(), key=_tier_sort_key))
        logger.debug(f"Matched {len(result)} sources: {[s.id for s in result]}")
        return result

    def _match_title(self, title_normalized: str, found: dict[str, Source]) -> None:
        for source in self._sources:
            if source.id in found:
                continue
            if is_name_in_title(title_normalized, source) or is_twitter_in_title(title_normalized, source):
                found[source.id] = source

    def _match_url(self, url: ParsedUrl, found: dict[str, Source]) -> None:
        for source in self._sources:
            if source.id in found:
                continue
            if is_twitter_in_url(url, source) or is_domain_in_url(url, source):
                found[source.id] = source

    def _match_links(self, urls: Sequence[ParsedUrl], found: dict[str, Source]) -> None:
        for source in self._sources:
            if source.id in found:
                continue
            if is_twitter_in_links(urls, source) or is_domain_in_links(urls, source):
                found[source.id] = source

    def _match_body(self, body_normalized: str, found: dict[str, Source]) -> None:
        for source in self._sources:
            if source.id in found:
                continue
            if is_name_in_body(body_normalized, source) or is_twitter_in_body(body_normalized, source):
                found[source.id] = source


def find_sources(
    content: ScanContent,
    sources: Iterable[Source],
    options: MatchOptions | None = None,
) -> tuple[Source, ...] | None:
    """
    Find registry sources referenced by the content.

    Convenience wrapper around SourceMatcher for one-off scans.
    """
    return SourceMatcher(sources, options).find(content)
