"""Unit tests for the duplicate-theme filter."""

import pytest

from media_autowriter.agents.article_generation.duplicate_filter import (
    DUPLICATE_THRESHOLD,
    check_theme,
    check_theme_duplicates,
    jaccard_similarity,
    levenshtein_distance,
    normalize_text,
    summarize_theme_check,
    text_similarity,
)
from media_autowriter.agents.article_generation.models import ExistingTitle


@pytest.mark.unit
class TestNormalizeText:
    """Tests for normalize_text."""

    def test_lowercases_trims_and_collapses(self):
        assert normalize_text("  Hello   World \n") == "hello world"

    def test_none_and_empty(self):
        assert normalize_text("") == ""
        assert normalize_text(None) == ""


@pytest.mark.unit
class TestLevenshteinDistance:
    """Tests for levenshtein_distance."""

    def test_known_distances(self):
        assert levenshtein_distance("kitten", "sitting") == 3
        assert levenshtein_distance("flaw", "lawn") == 2

    def test_empty_side(self):
        assert levenshtein_distance("", "abc") == 3
        assert levenshtein_distance("abc", "") == 3

    def test_identical(self):
        assert levenshtein_distance("同じ文字列", "同じ文字列") == 0

    def test_symmetric(self):
        assert levenshtein_distance("リモートワーク", "リモート会議") == levenshtein_distance(
            "リモート会議", "リモートワーク"
        )


@pytest.mark.unit
class TestTextSimilarity:
    """Tests for the hybrid Jaccard / Levenshtein score."""

    def test_identical_after_normalization_scores_one(self):
        assert text_similarity("  Remote   Work Guide", "remote work guide") == 1.0

    def test_empty_input_scores_zero(self):
        assert text_similarity("", "anything") == 0.0
        assert text_similarity("anything", "") == 0.0
        assert text_similarity("   ", "anything") == 0.0

    def test_mean_of_jaccard_and_edit_similarity(self):
        # Jaccard 2/4 = 0.5, edit 1 - 1/8 = 0.875
        assert text_similarity("aa bb cc", "aa bb cd") == pytest.approx(0.6875)

    def test_jaccard_uses_word_sets(self):
        assert jaccard_similarity("a b c", "a b d") == pytest.approx(0.5)
        assert jaccard_similarity("", "") == 0.0

    def test_score_is_bounded(self):
        score = text_similarity("完全に別のテーマ", "unrelated english title")
        assert 0.0 <= score <= 1.0


@pytest.mark.unit
class TestCheckTheme:
    """Tests for threshold classification."""

    def test_threshold_value(self):
        assert DUPLICATE_THRESHOLD == 0.7

    def test_just_below_threshold_is_unique(self):
        result = check_theme("aa bb cc", [ExistingTitle(id="a1", title="aa bb cd")])
        assert result.similarity == pytest.approx(0.6875)
        assert result.is_duplicate is False
        assert result.most_similar_article is None

    def test_just_above_threshold_is_duplicate(self):
        # Jaccard 3/5 = 0.6, edit 1 - 1/7 ~ 0.857, mean ~ 0.729
        result = check_theme("a b c d", [ExistingTitle(id="a1", title="a b c e")])
        assert result.similarity == pytest.approx((0.6 + 6 / 7) / 2)
        assert result.is_duplicate is True
        assert result.most_similar_article.id == "a1"
        assert result.most_similar_article.title == "a b c e"

    def test_best_match_is_reported(self):
        existing = [
            ExistingTitle(id="far", title="まったく関係のない記事"),
            ExistingTitle(id="exact", title="2025年版 リモートワーク導入ガイド"),
        ]
        result = check_theme("  2025年版  リモートワーク導入ガイド ", existing)
        assert result.is_duplicate is True
        assert result.similarity == 1.0
        assert result.most_similar_article.id == "exact"

    def test_no_existing_titles(self):
        result = check_theme("新しいテーマ", [])
        assert result.is_duplicate is False
        assert result.similarity == 0.0

    def test_custom_threshold(self):
        existing = [ExistingTitle(id="a1", title="aa bb cd")]
        assert check_theme("aa bb cc", existing, threshold=0.6).is_duplicate is True


@pytest.mark.unit
class TestCheckThemeDuplicates:
    """Tests for batch checking and summary."""

    def test_preserves_order_and_classifies(self):
        existing = [ExistingTitle(id="a1", title="Remote work guide")]
        results = check_theme_duplicates(
            ["remote work guide", "Cloud accounting basics"],
            existing,
        )
        assert [r.theme for r in results] == ["remote work guide", "Cloud accounting basics"]
        assert [r.is_duplicate for r in results] == [True, False]

    def test_deterministic(self):
        existing = [ExistingTitle(id="a1", title="a b c e")]
        first = check_theme_duplicates(["a b c d", "x y z"], existing)
        second = check_theme_duplicates(["a b c d", "x y z"], existing)
        assert first == second

    def test_summarize(self):
        existing = [ExistingTitle(id="a1", title="Remote work guide")]
        results = check_theme_duplicates(["remote work guide", "Cloud accounting"], existing)
        summary = summarize_theme_check(results)
        assert summary["unique_themes"] == ["Cloud accounting"]
        assert [d.theme for d in summary["duplicates"]] == ["remote work guide"]
        assert summary["total_checked"] == 2
