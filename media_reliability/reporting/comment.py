"""Markdown report and flair text for matched sources."""

from collections.abc import Sequence

from media_reliability.ingestion.schemas import PostData
from media_reliability.sources.schemas import Source, SourceType

REPORT_HEADER = "**Media reliability report:**"

UNRELIABLE_WARNING = (
    "❗ Readers beware: This post contains information from unreliable and/or "
    "untrustworthy source(s). As such, we highly encourage our userbase to question "
    "the authenticity of any claims or quotes presented by it before jumping into "
    "conclusions or taking things as a fact."
)

# Tiers at or above this are flagged as unreliable
UNRELIABLE_TIER = 3

_RELIABILITY_LEVELS = {
    1: "very reliable",
    2: "reliable",
    3: "❗ unreliable",
    4: "❗ very unreliable",
    5: "❗ extremely unreliable",
}


def reliability_level(tier: int | None) -> str:
    """
    Human-readable reliability for a tier.

    Raises:
        ValueError: If tier is not 1-5
    """
    try:
        return _RELIABILITY_LEVELS[tier]
    except KeyError:
        raise ValueError(f"Invalid tier: {tier}") from None


def source_label(source: Source) -> str:
    """Source name linked to its Twitter profile, or else its first domain."""
    if source.twitter:
        return f"{source.name} ([@{source.twitter}](https://twitter.com/{source.twitter}))"
    if source.domains:
        domain = source.domains[0]
        return f"{source.name} ([{domain}](https://{domain}))"
    return source.name


def source_line(source: Source) -> str:
    """
    One report line.

    Examples:
        **Tier 1**: Acme News ([acme.example](https://acme.example)) - very reliable
        **Aggregator**: Fast Scoops ([@fastscoops](https://twitter.com/fastscoops))
    """
    label = source_label(source)
    if source.is_tiered:
        return f"**Tier {source.tier}**: {label} - {reliability_level(source.tier)}"
    return f"**{source.type.capitalize()}**: {label}"


def has_unreliable(sources: Sequence[Source]) -> bool:
    """Check if any source is tier 3 or worse."""
    return any(s.is_tiered and s.tier >= UNRELIABLE_TIER for s in sources)


def build_report(sources: Sequence[Source], footer: str = "") -> str:
    """
    Render the reliability report comment.

    Args:
        sources: Matched sources, already tier-sorted
        footer: Markdown appended after the list (skipped when empty)

    Returns:
        Markdown blocks separated by blank lines
    """
    blocks = [
        REPORT_HEADER,
        *(f"- {source_line(source)}" for source in sources),
        UNRELIABLE_WARNING if has_unreliable(sources) else None,
        footer,
    ]
    return "\n\n".join(block for block in blocks if block)


def should_flair(post: PostData, sources: Sequence[Source]) -> bool:
    """
    Decide whether the post gets a reliability flair.

    Self-posts are never flaired. Sources are tier-sorted, so if the
    first has no tier then none has, and the post is left alone.
    """
    if post.is_self_post:
        return False
    return bool(sources) and sources[0].is_tiered


def flair_text(sources: Sequence[Source]) -> str | None:
    """
    Flair for the most reliable matched source.

    Returns:
        "Tier N", "Aggregator" for an untiered aggregator, or None
    """
    if not sources:
        return None
    first = sources[0]
    if first.is_tiered:
        return f"Tier {first.tier}"
    if first.type == SourceType.AGGREGATOR:
        return "Aggregator"
    return None
