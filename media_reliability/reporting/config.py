"""Configuration for the reliability reporter.

Uses Pydantic settings for environment-based configuration,
following the same pattern as the other configs in the project.
"""

import re
from pathlib import Path
from typing import Any

from pydantic import Field, TypeAdapter, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from media_reliability.matching.schemas import MatchOptions
from media_reliability.sources.registry import (
    RegistryValidationError,
    format_validation_error,
    load_sources,
    load_sources_file,
)
from media_reliability.sources.schemas import Source

# Reddit usernames can only contain alphanumeric characters, underscores and hyphens
_USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


def parse_usernames(value: str) -> list[str]:
    """
    Parse a comma-separated username list.

    Args:
        value: e.g. "AutoModerator, some_bot"

    Returns:
        Usernames with surrounding whitespace removed, blanks dropped

    Raises:
        ValueError: If a username contains characters Reddit does not allow
    """
    usernames = [u.strip() for u in value.split(",")]
    usernames = [u for u in usernames if u]
    invalid = [u for u in usernames if not _USERNAME_PATTERN.match(u)]
    if invalid:
        raise ValueError(
            "Invalid input. Reddit usernames can only contain alphanumeric "
            "characters, underscores and hyphens."
        )
    return usernames


class ReporterConfig(BaseSettings):
    """
    Configuration for the reliability report bot.

    All settings can be overridden via environment variables with RELIABILITY_ prefix.
    Example: RELIABILITY_ANALYZE_POST_BODY=true

    Attributes:
        sources: Registry as a JSON array (used when sources_file is unset).
        sources_file: Path to a registry JSON file.
        flair_template_id: Flair template applied to tiered posts.
        flair_css_class: CSS class applied with the flair.
        comment_footer: Markdown appended to every report.
        analyze_post_body: Scan the post body for names and handles.
        ignored_users: Comma-separated authors whose posts are skipped.
        error_report_subreddit_name: Subreddit that receives error modmail.
    """

    model_config = SettingsConfigDict(
        env_prefix="RELIABILITY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Registry
    sources: str = Field(
        default="[]",
        description="List of media reliability sources in JSON format.",
    )
    sources_file: Path | None = Field(
        default=None,
        description="Registry JSON file; takes precedence over `sources`.",
    )

    # Flair
    flair_template_id: str = Field(
        default="",
        description="The flair template ID to apply when assigning the flair.",
    )
    flair_css_class: str = Field(
        default="",
        description="The CSS class to apply when assigning the flair.",
    )

    # Comment
    comment_footer: str = Field(
        default="",
        description="Footer appended to each report comment. Markdown is supported.",
    )

    # Behaviour
    analyze_post_body: bool = Field(
        default=False,
        description="Analyze the post body for source names and twitter handles (non-links).",
    )
    ignored_users: str = Field(
        default="AutoModerator",
        description="Comma separated list of users whose posts are ignored.",
    )
    error_report_subreddit_name: str = Field(
        default="",
        description="Subreddit to modmail on errors; blank disables error reports.",
    )

    @field_validator("sources")
    @classmethod
    def validate_sources(cls, v: str) -> str:
        """Reject registry JSON that does not validate."""
        load_sources(v)
        return v

    @field_validator("ignored_users")
    @classmethod
    def validate_ignored_users(cls, v: str) -> str:
        parse_usernames(v)
        return v

    @property
    def ignored_usernames(self) -> list[str]:
        """Ignored authors as a list."""
        return parse_usernames(self.ignored_users)

    @property
    def match_options(self) -> MatchOptions:
        """Matcher switches derived from this config."""
        return MatchOptions(analyze_body=self.analyze_post_body)

    def load_sources(self) -> tuple[Source, ...]:
        """
        Load the configured registry.

        Returns:
            Validated sources from sources_file if set, else from sources

        Raises:
            RegistryValidationError: If the registry is invalid
        """
        if self.sources_file is not None:
            return load_sources_file(self.sources_file)
        return load_sources(self.sources)

    def is_ignored_user(self, username: str) -> bool:
        """Check if posts by this author should be skipped (case-insensitive)."""
        return any(u.lower() == username.lower() for u in self.ignored_usernames)


def validate_setting(key: str, value: Any) -> str | None:
    """
    Validate a single reporter setting, settings-form style.

    Args:
        key: ReporterConfig field name
        value: Raw value as entered

    Returns:
        None when valid, otherwise a message describing the problem

    Raises:
        KeyError: If key is not a ReporterConfig field
    """
    field = ReporterConfig.model_fields[key]

    if key == "sources":
        if not isinstance(value, str):
            return f'Invalid value for "{key}" setting. Error:\n Expected string, received {type(value).__name__}'
        try:
            load_sources(value)
        except RegistryValidationError as e:
            return str(e)
        return None

    if key == "ignored_users":
        if not isinstance(value, str):
            return f'Invalid value for "{key}" setting. Error:\n Expected string, received {type(value).__name__}'
        try:
            parse_usernames(value)
        except ValueError as e:
            return f'Invalid value for "{key}" setting. Error:\n {e}'
        return None

    try:
        TypeAdapter(field.annotation).validate_python(value, strict=True)
    except ValidationError as e:
        return f'Invalid value for "{key}" setting. Error:\n {format_validation_error(e)}'
    return None
