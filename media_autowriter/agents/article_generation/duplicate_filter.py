"""Duplicate-theme detection against a tenant's published titles.

Similarity is the mean of a word-set Jaccard score and a normalized
Levenshtein score. A candidate is a duplicate when its best score against any
existing title is strictly greater than ``DUPLICATE_THRESHOLD``.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Sequence

from media_autowriter.agents.article_generation.models import (
    ExistingTitle,
    SimilarArticle,
    ThemeCheckResult,
)

DUPLICATE_THRESHOLD = 0.7

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Lowercase, trim and collapse runs of whitespace to one space."""
    return _WHITESPACE_RE.sub(" ", (text or "").lower().strip())


def levenshtein_distance(first: str, second: str) -> int:
    """Single-character insert/delete/substitute edit distance."""
    if first == second:
        return 0
    if not first:
        return len(second)
    if not second:
        return len(first)

    previous = list(range(len(second) + 1))
    for i, char_a in enumerate(first, start=1):
        current = [i]
        for j, char_b in enumerate(second, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + cost,
                )
            )
        previous = current
    return previous[-1]


def jaccard_similarity(first: str, second: str) -> float:
    """Word-set Jaccard similarity of two normalized strings."""
    words_a = set(first.split())
    words_b = set(second.split())
    union = words_a | words_b
    if not union:
        return 0.0
    return len(words_a & words_b) / len(union)


def text_similarity(first: str, second: str) -> float:
    """Hybrid lexical similarity in [0, 1]."""
    if not first or not second:
        return 0.0

    normalized_a = normalize_text(first)
    normalized_b = normalize_text(second)
    if not normalized_a or not normalized_b:
        return 0.0
    if normalized_a == normalized_b:
        return 1.0

    max_length = max(len(normalized_a), len(normalized_b))
    edit_similarity = 1 - levenshtein_distance(normalized_a, normalized_b) / max_length
    return (jaccard_similarity(normalized_a, normalized_b) + edit_similarity) / 2


def check_theme(
    theme: str,
    existing_titles: Sequence[ExistingTitle],
    threshold: float = DUPLICATE_THRESHOLD,
) -> ThemeCheckResult:
    """Score one candidate against every existing title, keeping the best match."""
    best_score = 0.0
    best_match = None
    for existing in existing_titles:
        score = text_similarity(theme, existing.title)
        if score > best_score:
            best_score = score
            best_match = existing

    is_duplicate = best_score > threshold
    return ThemeCheckResult(
        theme=theme,
        is_duplicate=is_duplicate,
        similarity=best_score,
        most_similar_article=(
            SimilarArticle(id=best_match.id, title=best_match.title)
            if is_duplicate and best_match is not None
            else None
        ),
    )


def check_theme_duplicates(
    themes: Iterable[str],
    existing_titles: Sequence[ExistingTitle],
    threshold: float = DUPLICATE_THRESHOLD,
) -> List[ThemeCheckResult]:
    """Classify each candidate theme as unique or duplicate, preserving order."""
    return [check_theme(theme, existing_titles, threshold) for theme in themes]


def summarize_theme_check(results: Sequence[ThemeCheckResult]) -> Dict[str, object]:
    """Split results into unique themes and duplicates."""
    return {
        "unique_themes": [r.theme for r in results if not r.is_duplicate],
        "duplicates": [r for r in results if r.is_duplicate],
        "total_checked": len(results),
    }
