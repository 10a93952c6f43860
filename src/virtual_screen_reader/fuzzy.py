"""
Fuzzy string matching for search and "did you mean" suggestions.

This module wraps the rapidfuzz library so that text search can tolerate
small variations, and so rejected filter or outline names can be answered
with the closest valid names.

Example:
    >>> from virtual_screen_reader.fuzzy import closest_names
    >>> closest_names("headng", ["heading", "link", "landmark"])
    ['heading']
"""

import re
from collections.abc import Iterable

from rapidfuzz import fuzz, process


def normalize_whitespace(text: str) -> str:
    """Collapse whitespace runs to single spaces and trim."""
    return re.sub(r"\s+", " ", text).strip()


ALGORITHMS = {
    "ratio": fuzz.ratio,
    "partial_ratio": fuzz.partial_ratio,
    "token_sort_ratio": fuzz.token_sort_ratio,
    "token_set_ratio": fuzz.token_set_ratio,
}


def similarity(text: str, pattern: str, algorithm: str = "partial_ratio") -> float:
    """Similarity of two strings between 0.0 and 1.0, case-insensitive.

    Args:
        text: The text to check
        pattern: The pattern to compare against
        algorithm: One of ratio, partial_ratio, token_sort_ratio,
            token_set_ratio

    Raises:
        ValueError: If the algorithm is unknown
    """
    scorer = ALGORITHMS.get(algorithm)
    if scorer is None:
        raise ValueError(
            f"Unknown algorithm '{algorithm}'. Valid options: {', '.join(sorted(ALGORITHMS))}"
        )
    text = normalize_whitespace(text).lower()
    pattern = normalize_whitespace(pattern).lower()
    if not text or not pattern:
        return 0.0
    return scorer(text, pattern) / 100.0


def closest_names(
    name: str, choices: Iterable[str], limit: int = 3, cutoff: float = 60
) -> list[str]:
    """The valid names closest to a rejected one, best first."""
    matches = process.extract(name.lower(), list(choices), scorer=fuzz.WRatio, limit=limit)
    return [choice for choice, score, _ in matches if score >= cutoff]
