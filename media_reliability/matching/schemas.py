"""Value objects consumed by the source matcher."""

from dataclasses import dataclass
from urllib.parse import urljoin, urlsplit


@dataclass(frozen=True)
class ParsedUrl:
    """
    A URL reduced to the parts the matcher looks at.

    hostname is lowercased by urlsplit; path is "/" for bare hosts so
    "https://foo.com" and "https://foo.com/" behave the same.
    """

    href: str
    hostname: str
    path: str

    @classmethod
    def parse(cls, raw: str, base: str | None = None) -> "ParsedUrl":
        """
        Parse an absolute (or base-relative) URL.

        Args:
            raw: URL text
            base: Base URL used to resolve relative values

        Returns:
            ParsedUrl instance

        Raises:
            ValueError: If the URL has no hostname or is otherwise malformed
        """
        href = urljoin(base, raw) if base else raw
        parts = urlsplit(href)
        if parts.scheme not in ("http", "https") or not parts.hostname:
            raise ValueError(f"Not an http(s) URL: {raw!r}")
        return cls(href=href, hostname=parts.hostname, path=parts.path or "/")

    def without_www(self) -> "ParsedUrl":
        """Return a copy with a leading "www." removed from the hostname."""
        if self.hostname.startswith("www."):
            return ParsedUrl(href=self.href, hostname=self.hostname[4:], path=self.path)
        return self


@dataclass(frozen=True)
class ScanContent:
    """
    The normalized view of one submission.

    Built by media_reliability.ingestion.process_post(); url and links never
    point back at Reddit itself, and only url has had "www." stripped.
    """

    title_normalized: str
    body_normalized: str | None = None
    url: ParsedUrl | None = None
    links: tuple[ParsedUrl, ...] | None = None


@dataclass(frozen=True)
class MatchOptions:
    """Per-installation switches consulted by the matcher."""

    analyze_body: bool = False
