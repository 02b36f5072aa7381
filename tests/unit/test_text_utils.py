"""Unit tests for text and JSON helpers."""

import pytest

from media_autowriter.utils.json_utils import extract_json_object
from media_autowriter.utils.text import (
    build_table_of_contents,
    calculate_reading_time,
    clean_single_line,
    fallback_slug,
    slugify,
    strip_tags,
    truncate_with_ellipsis,
)


@pytest.mark.unit
class TestTruncateWithEllipsis:
    def test_short_text_unchanged(self):
        assert truncate_with_ellipsis("短いタイトル", 70) == "短いタイトル"

    def test_long_text_cut_to_ceiling(self):
        result = truncate_with_ellipsis("あ" * 85, 70)
        assert len(result) == 70
        assert result == "あ" * 67 + "..."

    def test_exact_length_unchanged(self):
        assert truncate_with_ellipsis("a" * 160, 160) == "a" * 160


@pytest.mark.unit
class TestSlugs:
    def test_slugify(self):
        assert slugify("Remote Work: 2025 Trends!") == "remote-work-2025-trends"

    def test_slugify_collapses_hyphens(self):
        assert slugify("--a   b--c--") == "a-b-c"

    def test_slugify_drops_non_ascii(self):
        assert slugify("日本語のみ") == ""

    def test_fallback_slug_uses_title_when_ascii(self):
        assert fallback_slug("DX Guide for SMEs") == "dx-guide-for-smes"

    def test_fallback_slug_timestamp_for_japanese(self):
        assert fallback_slug("リモートワーク入門").startswith("article-")


@pytest.mark.unit
class TestHtmlHelpers:
    def test_strip_tags(self):
        assert strip_tags("<p>Hello <strong>world</strong></p>") == "Hello world"

    def test_table_of_contents(self):
        content = '<h2>導入</h2><p>本文</p><h3 class="sub">手順 <em>1</em></h3><h4>対象外</h4>'
        assert build_table_of_contents(content) == [
            {"id": "heading-0", "level": 2, "text": "導入"},
            {"id": "heading-1", "level": 3, "text": "手順 1"},
        ]

    def test_reading_time_rounds_up(self):
        assert calculate_reading_time("<p>" + "あ" * 501 + "</p>") == 2

    def test_reading_time_minimum_one(self):
        assert calculate_reading_time("<p>短い</p>") == 1
        assert calculate_reading_time("") == 1

    def test_clean_single_line(self):
        assert clean_single_line('\n  「中小企業の経理担当者」\n補足') == "中小企業の経理担当者"


@pytest.mark.unit
class TestExtractJsonObject:
    def test_fenced_json(self):
        text = 'Here you go:\n```json\n{"sections": [{"heading": "A"}]}\n```'
        assert extract_json_object(text) == {"sections": [{"heading": "A"}]}

    def test_bare_object_with_trailing_comma(self):
        text = 'outline: {"sections": [{"heading": "A",},]} done'
        assert extract_json_object(text) == {"sections": [{"heading": "A"}]}

    def test_no_json(self):
        assert extract_json_object("no json here") is None
        assert extract_json_object("") is None
