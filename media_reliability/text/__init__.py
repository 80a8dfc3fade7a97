"""Text canonicalization shared by content and registry processing."""

from media_reliability.text.normalizer import normalize_text

__all__ = ["normalize_text"]
