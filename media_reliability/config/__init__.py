"""Process-level configuration."""

from media_reliability.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
