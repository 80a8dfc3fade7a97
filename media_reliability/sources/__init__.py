"""Sources: the curated registry of publishers, journalists and aggregators."""

from media_reliability.sources.registry import (
    RegistryValidationError,
    load_sources,
    load_sources_file,
)
from media_reliability.sources.schemas import Source, SourceType

__all__ = [
    "RegistryValidationError",
    "Source",
    "SourceType",
    "load_sources",
    "load_sources_file",
]
