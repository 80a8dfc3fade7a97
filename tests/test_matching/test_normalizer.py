"""Tests for text normalization."""

import pytest

from media_reliability.text.normalizer import normalize_text


class TestNormalizeText:
    """Tests for normalize_text."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("fÓÓ", "foo"),
            ("Le Équipe", "le equipe"),
            ("São Paulo", "sao paulo"),
            ("Müller", "muller"),
            ("plain ascii", "plain ascii"),
            ("", ""),
        ],
    )
    def test_strips_diacritics_and_lowercases(self, raw, expected):
        assert normalize_text(raw) == expected

    def test_idempotent(self):
        once = normalize_text("Crème Brûlée: ÀÉÎÕÜ")
        assert normalize_text(once) == once

    def test_preserves_non_latin_base_characters(self):
        """Only combining marks are removed; other characters survive lowercased."""
        assert normalize_text("ΑΘΗΝΑ") == "αθηνα"
        assert normalize_text("Łódź") == "łodz"

    def test_keeps_punctuation_and_whitespace(self):
        assert normalize_text("[Foo]: (Bar)\n@Baz!") == "[foo]: (bar)\n@baz!"
