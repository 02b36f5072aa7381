"""Crew definitions for article generation (themes, audience, outline, writing, images, metadata)."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Sequence

from media_autowriter.agents.article_generation import prompts
from media_autowriter.agents.article_generation.models import (
    ArticleMetadata,
    ArticleSection,
    CategoryInfo,
    GeneratedImage,
    ImagePatternInfo,
    OutlineSection,
    PromptTemplate,
    WriterInfo,
)
from media_autowriter.llm_gateway.base import GenerationParams
from media_autowriter.llm_gateway.gateway import LLMGateway
from media_autowriter.utils.exceptions import LLMOutputError
from media_autowriter.utils.json_utils import extract_json_object
from media_autowriter.utils.logging import get_logger
from media_autowriter.utils.text import (
    clean_single_line,
    fallback_slug,
    slugify,
    strip_tags,
    truncate_with_ellipsis,
)

logger = get_logger(__name__)

META_TITLE_MAX_LENGTH = 70
META_DESCRIPTION_MAX_LENGTH = 160
ALT_TEXT_MAX_LENGTH = 100
AUDIENCE_MAX_LENGTH = 30

_THEME_LINE_RE = re.compile(
    r"^[ \t*_#>]*(?:テーマ|Theme)\s*\d+\s*[*_]*\s*[：:]\s*(.+)$", re.IGNORECASE | re.MULTILINE
)
_MARKDOWN_LEAD_RE = re.compile(r"^[\s#>]*")
_LIST_PREFIX_RE = re.compile(r"^(?:[-*・•]\s+|\d+\s*[.)、．]\s*)")
# Lines ending like this introduce the list rather than name a theme
_LEAD_IN_ENDINGS = ("：", ":", "。")
_CODE_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")
_LEADING_H2_RE = re.compile(r"^\s*<h2[^>]*>.*?</h2>\s*", re.IGNORECASE | re.DOTALL)
_AUDIENCE_SPLIT_RE = re.compile(r"[、,，/／]")

# Alt texts that describe nothing; replaced by a heading/title description
GENERIC_ALT_TEXTS = frozenset(
    {
        "",
        "image",
        "photo",
        "picture",
        "illustration",
        "画像",
        "イメージ",
        "写真",
        "イラスト",
        "アイキャッチ",
        "アイキャッチ画像",
    }
)


def parse_themes(text: str, limit: int) -> List[str]:
    """
    Extract theme candidates from a model answer.

    ``Theme N: ...`` lines (or their Japanese form, optionally wrapped in
    markdown emphasis) are preferred. Otherwise bulleted or numbered lines
    count as candidates, minus lead-ins such as ``以下のテーマを提案します。``.
    At most ``limit`` are kept.
    """
    themes = [_clean_theme(match) for match in _THEME_LINE_RE.findall(text or "")]
    themes = [theme for theme in themes if theme]
    if not themes:
        for line in (text or "").splitlines():
            line = _MARKDOWN_LEAD_RE.sub("", line)
            prefix = _LIST_PREFIX_RE.match(line)
            if not prefix:
                continue
            theme = _clean_theme(line[prefix.end():])
            if theme and not theme.endswith(_LEAD_IN_ENDINGS):
                themes.append(theme)
    return themes[:limit]


def _clean_theme(text: str) -> str:
    return clean_single_line(text.strip().strip("*_").strip())


def parse_outline(text: str) -> List[OutlineSection]:
    """Parse ``{"sections": [{"heading", "summary"}]}`` into outline sections."""
    data = extract_json_object(text)
    if data is None:
        raise LLMOutputError("Outline response is not valid JSON")

    raw_sections = data.get("sections")
    if not isinstance(raw_sections, list):
        raise LLMOutputError("Outline response has no 'sections' list")

    sections = []
    for raw in raw_sections:
        if not isinstance(raw, dict):
            continue
        heading = str(raw.get("heading") or "").strip()
        if heading:
            sections.append(OutlineSection(heading=heading, summary=str(raw.get("summary") or "").strip()))

    if not sections:
        raise LLMOutputError("Outline contains no sections")
    return sections


def clean_section_body(text: str) -> str:
    """Drop code fences and a repeated leading ``h2`` from a section answer."""
    body = _CODE_FENCE_RE.sub("", text.strip()).strip()
    return _LEADING_H2_RE.sub("", body, count=1).strip()


def clean_alt_text(raw: str, heading: Optional[str], title: str) -> str:
    """Single-line alt text, never generic, at most ``ALT_TEXT_MAX_LENGTH`` characters."""
    alt = clean_single_line(raw)
    if alt.lower().rstrip("。.") in GENERIC_ALT_TEXTS:
        alt = f"{heading} - {title}" if heading else title
    return truncate_with_ellipsis(alt, ALT_TEXT_MAX_LENGTH)


@dataclass
class ThemeCrew:
    """Crew proposing candidate article themes for a category."""

    gateway: LLMGateway
    candidate_count: int = 5

    async def run(
        self,
        category: CategoryInfo,
        pattern: Optional[PromptTemplate] = None,
        excluded_titles: Sequence[str] = (),
        today: Optional[date] = None,
    ) -> List[str]:
        system, user = prompts.theme_prompt(
            category,
            pattern,
            self.candidate_count,
            today or date.today(),
            excluded_titles,
        )
        text = await self.gateway.generate_text(
            "themes", system, user, GenerationParams(temperature=0.8, max_tokens=1000)
        )
        themes = parse_themes(text, self.candidate_count)
        if not themes:
            raise LLMOutputError("No themes could be parsed from the model output")
        logger.debug("themes_parsed", count=len(themes))
        return themes


@dataclass
class AudienceCrew:
    """Crew proposing one concrete reader persona."""

    gateway: LLMGateway

    async def run(self, category: CategoryInfo, title: str) -> str:
        system, user = prompts.audience_prompt(category, title)
        text = await self.gateway.generate_text(
            "audience", system, user, GenerationParams(temperature=0.9, max_tokens=50)
        )
        # The model sometimes lists several personas; keep the first
        audience = _AUDIENCE_SPLIT_RE.split(clean_single_line(text))[0].strip()
        if not audience:
            raise LLMOutputError("Empty target audience")
        return audience[:AUDIENCE_MAX_LENGTH]


@dataclass
class OutlineCrew:
    """Crew producing the section outline, steered by the composition pattern."""

    gateway: LLMGateway

    async def run(
        self,
        title: str,
        category: CategoryInfo,
        target_audience: str,
        pattern: Optional[PromptTemplate] = None,
    ) -> List[OutlineSection]:
        system, user = prompts.outline_prompt(title, category, target_audience, pattern)
        text = await self.gateway.generate_text(
            "outline", system, user, GenerationParams(temperature=0.7, max_tokens=1500)
        )
        return parse_outline(text)


@dataclass
class SectionWritingCrew:
    """Crew writing section bodies one after another."""

    gateway: LLMGateway
    max_tokens: int = 2000

    async def run(
        self,
        title: str,
        target_audience: str,
        outline: Sequence[OutlineSection],
        writer: WriterInfo,
        writing_style: Optional[PromptTemplate] = None,
    ) -> List[ArticleSection]:
        """
        Write every section in outline order.

        Each call sees the HTML of all earlier sections, so later sections
        build on (and avoid repeating) what was already written.
        """
        written: List[ArticleSection] = []
        for index, outline_section in enumerate(outline):
            previous_html = "\n\n".join(section.to_html() for section in written)
            system, user = prompts.section_prompt(
                title,
                target_audience,
                outline_section,
                index,
                len(outline),
                previous_html,
                writer,
                writing_style,
            )
            text = await self.gateway.generate_text(
                "sections",
                system,
                user,
                GenerationParams(temperature=0.7, max_tokens=self.max_tokens),
            )
            body = clean_section_body(text)
            if not body:
                raise LLMOutputError(f"Empty body for section '{outline_section.heading}'")
            written.append(ArticleSection(heading=outline_section.heading, body=body))
        return written


@dataclass
class ImageCrew:
    """Crew generating the featured image and section images with alt text."""

    gateway: LLMGateway
    section_image_count: int = 1

    async def run(
        self,
        title: str,
        sections: Sequence[ArticleSection],
        image_pattern: ImagePatternInfo,
    ) -> List[GeneratedImage]:
        lead_text = strip_tags(sections[0].body) if sections else ""
        images = [await self._generate(title, None, None, lead_text, image_pattern)]
        for index, section in enumerate(sections[: self.section_image_count]):
            images.append(
                await self._generate(title, section.heading, index, strip_tags(section.body), image_pattern)
            )
        return images

    async def _generate(
        self,
        title: str,
        heading: Optional[str],
        section_index: Optional[int],
        surrounding_text: str,
        image_pattern: ImagePatternInfo,
    ) -> GeneratedImage:
        subject = f"{heading} ({title})" if heading else title
        prompt = prompts.image_prompt(image_pattern.prompt, subject)
        result = await self.gateway.generate_image(prompt, image_pattern.size)
        alt = await self.generate_alt_text(title, heading, surrounding_text)
        return GeneratedImage(url=result.url, alt=alt, prompt=prompt, section_index=section_index)

    async def generate_alt_text(self, title: str, heading: Optional[str], surrounding_text: str) -> str:
        system, user = prompts.alt_text_prompt(title, heading, surrounding_text)
        text = await self.gateway.generate_text(
            "alt_text", system, user, GenerationParams(temperature=0.3, max_tokens=100)
        )
        return clean_alt_text(text, heading, title)


@dataclass
class MetadataCrew:
    """Crew producing meta title, meta description and the URL slug."""

    gateway: LLMGateway
    params: GenerationParams = field(default_factory=lambda: GenerationParams(temperature=0.3, max_tokens=150))

    async def run(self, title: str, content_html: str) -> ArticleMetadata:
        system, user = prompts.meta_title_prompt(title)
        raw_title = await self.gateway.generate_text("metadata", system, user, self.params)
        meta_title = truncate_with_ellipsis(clean_single_line(raw_title) or title, META_TITLE_MAX_LENGTH)

        system, user = prompts.meta_description_prompt(title, strip_tags(content_html))
        raw_description = await self.gateway.generate_text(
            "metadata", system, user, GenerationParams(temperature=0.3, max_tokens=300)
        )
        meta_description = truncate_with_ellipsis(
            " ".join(raw_description.split()).strip("\"'「」"),
            META_DESCRIPTION_MAX_LENGTH,
        )

        slug = await self.generate_slug(title)
        return ArticleMetadata(meta_title=meta_title, meta_description=meta_description, slug=slug)

    async def generate_slug(self, title: str) -> str:
        system, user = prompts.slug_prompt(title)
        raw_slug = await self.gateway.generate_text(
            "slug", system, user, GenerationParams(temperature=0.3, max_tokens=50)
        )
        slug = slugify(clean_single_line(raw_slug))
        if not slug:
            logger.warning("slug_fallback_used", title=title)
            slug = fallback_slug(title)
        return slug
