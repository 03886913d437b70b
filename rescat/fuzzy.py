"""Approximate substring matching scored by normalized edit distance.

A pattern matches a text when some substring of the text is within
``max_errors`` edits (insertions, deletions, substitutions) of the pattern.
Errors are counted with a bit-parallel shift-and automaton, one bit per
pattern position and one state word per allowed error count.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Dict, Optional

# Exact hits still score slightly above zero so weighted products stay finite.
EXACT_MATCH_SCORE = 0.001

_TOKEN_PATTERN = re.compile(r"[^ ]+")


@dataclass(frozen=True)
class FuzzyPattern:
    """A lower-cased query compiled for repeated matching."""

    text: str
    max_errors: int
    masks: Dict[str, int]

    @property
    def length(self) -> int:
        return len(self.text)


def compile_pattern(
    query: str, *, threshold: float, min_match_length: int
) -> Optional[FuzzyPattern]:
    """Compile ``query`` or return None when it can never satisfy the limits."""
    text = query.strip().lower()
    length = len(text)
    if length < min_match_length:
        return None
    allowed = math.floor(threshold * length + 1e-9)
    max_errors = min(allowed, length - min_match_length)
    masks: Dict[str, int] = {}
    for position, char in enumerate(text):
        masks[char] = masks.get(char, 0) | (1 << position)
    return FuzzyPattern(text=text, max_errors=max_errors, masks=masks)


def min_errors(pattern: FuzzyPattern, text: str) -> Optional[int]:
    """Fewest edits needed to find ``pattern`` inside ``text``, or None if over budget."""
    haystack = text.lower()
    if pattern.text in haystack:
        return 0
    budget = pattern.max_errors
    if budget <= 0:
        return None

    length = pattern.length
    accept = 1 << (length - 1)
    full = (1 << length) - 1
    masks = pattern.masks
    rows = [(1 << errors) - 1 for errors in range(budget + 1)]
    best: Optional[int] = None

    for char in haystack:
        mask = masks.get(char, 0)
        previous_old = rows[0]
        previous_new = ((previous_old << 1) | 1) & mask
        rows[0] = previous_new
        for errors in range(1, len(rows)):
            old = rows[errors]
            new = (
                (((old << 1) | 1) & mask)
                | previous_old
                | ((previous_old | previous_new) << 1)
                | 1
            ) & full
            rows[errors] = new
            previous_old, previous_new = old, new

        for errors, row in enumerate(rows):
            if row & accept:
                best = errors
                # Rows above the best count can no longer improve the result.
                del rows[errors:]
                break
        if best == 0 or not rows:
            return best
    return best


def match_score(pattern: FuzzyPattern, text: str) -> Optional[float]:
    """Return ``errors / len(pattern)`` for a match, None when nothing matches."""
    if not text:
        return None
    errors = min_errors(pattern, text)
    if errors is None:
        return None
    return max(EXACT_MATCH_SCORE, errors / pattern.length)


def field_norm(value: str) -> float:
    """Field-length norm: ``1 / sqrt(token_count)`` rounded to three places."""
    tokens = len(_TOKEN_PATTERN.findall(value))
    if tokens == 0:
        return 1.0
    return round(1 / math.sqrt(tokens), 3)


__all__ = [
    "EXACT_MATCH_SCORE",
    "FuzzyPattern",
    "compile_pattern",
    "field_norm",
    "match_score",
    "min_errors",
]
