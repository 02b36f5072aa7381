"""Pydantic schemas for article generation API.

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from media_autowriter.agents.article_generation.models import (
    GenerationRequest,
    GenerationResult,
    ThemeCheckResult,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ArticleGenerationRequest(CamelModel):
    # Mandatory ids are checked by the pipeline so that missing ones map to 400
    tenant_id: Optional[str] = None
    category_id: Optional[str] = None
    writer_id: Optional[str] = None
    image_prompt_pattern_id: Optional[str] = None
    pattern_id: Optional[str] = None
    writing_style_id: Optional[str] = None
    target_audience: Optional[str] = None
    publish_status: str = "published"

    def to_domain(self, header_tenant_id: Optional[str] = None) -> GenerationRequest:
        """Body tenant wins over the ``X-Media-Id`` header."""
        return GenerationRequest(
            tenant_id=self.tenant_id or header_tenant_id,
            category_id=self.category_id,
            writer_id=self.writer_id,
            image_prompt_pattern_id=self.image_prompt_pattern_id,
            pattern_id=self.pattern_id,
            writing_style_id=self.writing_style_id,
            target_audience=self.target_audience,
            publish_status=self.publish_status,
        )


class ArticleGenerationResponse(CamelModel):
    success: bool = True
    article_id: str
    title: str
    slug: str
    meta_title: str
    meta_description: str
    target_audience: str
    section_count: int
    image_count: int
    is_published: bool
    duration_seconds: float

    @classmethod
    def from_result(cls, result: GenerationResult) -> "ArticleGenerationResponse":
        return cls(
            article_id=result.article_id,
            title=result.title,
            slug=result.slug,
            meta_title=result.meta_title,
            meta_description=result.meta_description,
            target_audience=result.target_audience,
            section_count=result.section_count,
            image_count=result.image_count,
            is_published=result.is_published,
            duration_seconds=result.duration_seconds,
        )


class SimilarArticleResponse(CamelModel):
    id: str
    title: str


class ThemeCheckResponse(CamelModel):
    theme: str
    is_duplicate: bool
    similarity: float
    most_similar_article: Optional[SimilarArticleResponse] = None

    @classmethod
    def from_result(cls, result: ThemeCheckResult) -> "ThemeCheckResponse":
        similar = result.most_similar_article
        return cls(
            theme=result.theme,
            is_duplicate=result.is_duplicate,
            similarity=round(result.similarity, 4),
            most_similar_article=(
                SimilarArticleResponse(id=similar.id, title=similar.title) if similar else None
            ),
        )


class ThemeGenerationRequest(CamelModel):
    category_id: Optional[str] = None
    pattern_id: Optional[str] = None


class ThemeGenerationResponse(CamelModel):
    themes: List[str]
    candidates: List[ThemeCheckResponse]
    category_id: str
    pattern_id: Optional[str] = None


class ThemeDuplicateCheckRequest(CamelModel):
    themes: List[str] = Field(default_factory=list)


class ThemeDuplicateCheckResponse(CamelModel):
    unique_themes: List[str]
    duplicates: List[ThemeCheckResponse]
    total_checked: int
    existing_articles_count: int
