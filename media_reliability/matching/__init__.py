"""Source matching: text normalization and the per-channel matcher."""

from media_reliability.matching.matcher import SourceMatcher, find_sources
from media_reliability.text.normalizer import normalize_text
from media_reliability.matching.schemas import MatchOptions, ParsedUrl, ScanContent

__all__ = [
    "MatchOptions",
    "ParsedUrl",
    "ScanContent",
    "SourceMatcher",
    "find_sources",
    "normalize_text",
]
