"""
Tests for fuzzy matching helpers.

These tests verify:
- Whitespace normalization
- Similarity scores for each algorithm
- "Did you mean" suggestions
"""

import pytest

from virtual_screen_reader.fuzzy import closest_names, normalize_whitespace, similarity


class TestNormalizeWhitespace:
    """Tests for normalize_whitespace."""

    def test_collapses_runs(self) -> None:
        """Test that whitespace runs become single spaces."""
        assert normalize_whitespace("  Hello \n\t world  ") == "Hello world"

    def test_empty(self) -> None:
        """Test whitespace-only input."""
        assert normalize_whitespace(" \n ") == ""


class TestSimilarity:
    """Tests for similarity."""

    def test_identical(self) -> None:
        """Test that identical strings score 1.0, ignoring case."""
        assert similarity("Billing", "billing") == 1.0

    def test_partial(self) -> None:
        """Test that a substring scores 1.0 with partial_ratio."""
        assert similarity("Billing details", "details") == 1.0

    def test_ratio_penalizes_length(self) -> None:
        """Test that ratio compares whole strings."""
        assert similarity("Billing details", "details", "ratio") < 1.0

    def test_token_sort(self) -> None:
        """Test that token_sort_ratio ignores word order."""
        assert similarity("street billing", "billing street", "token_sort_ratio") == 1.0

    def test_empty_strings(self) -> None:
        """Test that empty input scores zero."""
        assert similarity("", "x") == 0.0
        assert similarity("x", "  ") == 0.0

    def test_unknown_algorithm(self) -> None:
        """Test that unknown algorithms are rejected."""
        with pytest.raises(ValueError, match="Unknown algorithm"):
            similarity("a", "b", "soundex")


class TestClosestNames:
    """Tests for closest_names."""

    def test_typo(self) -> None:
        """Test suggestions for a misspelled name."""
        assert closest_names("headng", ["heading", "link", "table"])[0] == "heading"

    def test_nothing_close(self) -> None:
        """Test that distant names are not suggested."""
        assert closest_names("zzzz", ["heading", "link"]) == []

    def test_limit(self) -> None:
        """Test the suggestion limit."""
        names = ["heading1", "heading2", "heading3", "heading4"]
        assert len(closest_names("heading", names, limit=2)) == 2
