"""Regex construction for registry-derived literals.

Every source name and handle is inserted with re.escape(), so registry
data is always matched as plain text. Patterns are compiled once per
literal and cached; a literal that still cannot be compiled yields None,
which the matcher treats as "never matches".
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache

logger = logging.getLogger(__name__)

# Word boundaries that also work when the literal itself starts or ends
# with a non-word character (e.g. "yahoo!")
_NOT_AFTER_WORD = r"(?<!\w)"
_NOT_BEFORE_WORD = r"(?!\w)"

_PATTERN_CACHE_SIZE = 4096


def whole_word(literal: str) -> str:
    """Literal bounded by a non-word character or the string edge on both sides."""
    return f"{_NOT_AFTER_WORD}{re.escape(literal)}{_NOT_BEFORE_WORD}"


def leading_label(literal: str, prefix: str = "") -> str:
    """Literal immediately followed by a colon at the very start of the text."""
    return rf"\A{prefix}{re.escape(literal)}:"


def bracketed(literal: str) -> str:
    """Literal enclosed in square brackets."""
    return rf"\[{re.escape(literal)}\]"


def parenthesized(literal: str) -> str:
    """Literal enclosed in parentheses."""
    return rf"\({re.escape(literal)}\)"


def mentioned(literal: str) -> str:
    """Literal right after "@", whatever precedes it, and not continued by a word character."""
    return f"@{re.escape(literal)}{_NOT_BEFORE_WORD}"


def _compile_alternatives(alternatives: list[str]) -> re.Pattern[str] | None:
    """Join fragments into one case-insensitive pattern."""
    joined = "|".join(f"(?:{fragment})" for fragment in alternatives)
    try:
        return re.compile(joined, re.IGNORECASE)
    except re.error as e:
        logger.warning(f"Discarding uncompilable pattern {joined!r}: {e}")
        return None


@lru_cache(maxsize=_PATTERN_CACHE_SIZE)
def name_pattern(name_normalized: str, is_common: bool) -> re.Pattern[str] | None:
    """
    Pattern for a source name in a title or body.

    Uncommon names match anywhere as a whole word. Common names only
    match as "name: ..." at the start, "[name]" or "(name)".

    Args:
        name_normalized: Normalized source name
        is_common: Whether the name collides with ordinary vocabulary

    Returns:
        Compiled pattern, or None if the name cannot match anything
    """
    if not name_normalized:
        return None

    if is_common:
        return _compile_alternatives([
            leading_label(name_normalized),
            bracketed(name_normalized),
            parenthesized(name_normalized),
        ])

    return _compile_alternatives([whole_word(name_normalized)])


@lru_cache(maxsize=_PATTERN_CACHE_SIZE)
def handle_pattern(handle_normalized: str) -> re.Pattern[str] | None:
    """
    Pattern for a Twitter handle in a title or body.

    Matches "handle:" or "@handle:" at the start, "@handle" anywhere,
    "[handle]" and "(handle)". A bare handle in prose does not match.
    """
    if not handle_normalized:
        return None

    return _compile_alternatives([
        leading_label(handle_normalized, prefix="@?"),
        mentioned(handle_normalized),
        bracketed(handle_normalized),
        parenthesized(handle_normalized),
    ])


@lru_cache(maxsize=_PATTERN_CACHE_SIZE)
def profile_path_pattern(handle_normalized: str) -> re.Pattern[str] | None:
    """
    Pattern for a Twitter profile path.

    The handle must be the whole first path segment:
    /handle, /handle/ and /handle/status/123 match; /handleX does not.
    """
    if not handle_normalized:
        return None

    return _compile_alternatives([rf"\A/{re.escape(handle_normalized)}(?:/|\s|\Z)"])
