"""Accent- and case-insensitive text canonicalization.

Titles, bodies, source names and source handles all go through
normalize_text() before matching, so "Le Équipe" and "le equipe"
compare equal.
"""

import re
import unicodedata

# Combining Diacritical Marks block
_COMBINING_MARKS = re.compile(r"[\u0300-\u036f]")


def normalize_text(text: str) -> str:
    """
    Remove diacritics and convert to lowercase.

    Args:
        text: Raw text

    Returns:
        NFD-decomposed text with combining marks stripped, lowercased
    """
    decomposed = unicodedata.normalize("NFD", text)
    return _COMBINING_MARKS.sub("", decomposed).lower()
