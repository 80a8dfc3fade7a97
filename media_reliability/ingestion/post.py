"""
Post processing: turns a RedditPost into matcher input.

- Resolves the post URL against reddit.com (self-posts carry a relative
  permalink) and drops it when it points back at Reddit
- Strips "www." from the primary URL hostname only; link hostnames are
  kept as written
- Extracts links from the body with linkify-it (schemeless ones such as
  "bbc.co.uk/sport" included), dropping Reddit self-links
- Normalizes title and body for accent/case-insensitive matching
"""

import logging

from linkify_it import LinkifyIt

from media_reliability.ingestion.schemas import PostData, RedditPost
from media_reliability.matching.schemas import ParsedUrl, ScanContent
from media_reliability.text.normalizer import normalize_text

logger = logging.getLogger(__name__)

REDDIT_BASE_URL = "https://www.reddit.com"

# Reddit's own hosts: canonical web, short links and media CDNs
SELF_HOSTNAMES = frozenset({
    "reddit.com",
    "www.reddit.com",
    "redd.it",
    "v.redd.it",
    "i.redd.it",
})

# Hosts a self-post permalink resolves to
_PERMALINK_HOSTNAMES = frozenset({"reddit.com", "www.reddit.com"})

# Default options: fuzzy (schemeless) links and emails on, case-insensitive schemes
_linkify = LinkifyIt()

# Sentence punctuation that commonly trails a pasted link
_TRAILING_PUNCTUATION = ".,;:!?'\"*"


def _trim_link(link: str) -> str:
    """Drop trailing punctuation and an unbalanced ")" left by markdown."""
    while link:
        if link[-1] in _TRAILING_PUNCTUATION:
            link = link[:-1]
        elif link[-1] == ")" and link.count(")") > link.count("("):
            link = link[:-1]
        else:
            break
    return link


def is_self_link(url: ParsedUrl) -> bool:
    """Check if the URL points at Reddit itself."""
    return url.hostname in SELF_HOSTNAMES


def extract_links(body: str) -> tuple[ParsedUrl, ...] | None:
    """
    Extract external links from markdown/plain text.

    Args:
        body: Post self-text

    Returns:
        Parsed links in order of appearance, or None if there are none
    """
    links = []
    for match in _linkify.match(body) or ():
        # Schemeless matches come back prefixed with "http://"
        raw = _trim_link(match.url)
        try:
            url = ParsedUrl.parse(raw, REDDIT_BASE_URL)
        except ValueError:
            logger.debug(f"Skipping unparsable link {raw!r}")
            continue
        if is_self_link(url):
            continue
        links.append(url)

    return tuple(links) if links else None


def process_post(post: RedditPost) -> PostData:
    """
    Build the matcher's view of a submission.

    Args:
        post: Submission fetched from Reddit

    Returns:
        PostData with normalized title/body, external url and links
    """
    url: ParsedUrl | None
    is_self_post = False
    try:
        url = ParsedUrl.parse(post.url, REDDIT_BASE_URL)
    except ValueError:
        logger.warning(f"Post {post.id} has an unparsable url {post.url!r}")
        url = None

    if url is not None:
        is_self_post = url.hostname in _PERMALINK_HOSTNAMES
        url = None if is_self_link(url) else url.without_www()

    body = post.body if post.body else None

    return PostData(
        id=post.id,
        subreddit_name=post.subreddit_name,
        content=ScanContent(
            title_normalized=normalize_text(post.title),
            body_normalized=normalize_text(body) if body else None,
            url=url,
            links=extract_links(body) if body else None,
        ),
        is_self_post=is_self_post,
    )
