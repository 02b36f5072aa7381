"""Domain types shared by the generation pipeline, the repository and the trigger."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from html import escape
from typing import Iterable, List, Optional, Union

from media_autowriter.utils.exceptions import ValidationError

PUBLISH_STATUSES = ("published", "draft", "scheduled")
IMAGE_SIZES = ("1024x1024", "1792x1024", "1024x1792")

_MANDATORY_FIELDS = {
    "tenant_id": "tenantId",
    "category_id": "categoryId",
    "writer_id": "writerId",
    "image_prompt_pattern_id": "imagePromptPatternId",
}


@dataclass
class GenerationRequest:
    """Parameters of one article generation run."""

    tenant_id: Optional[str] = None
    category_id: Optional[str] = None
    writer_id: Optional[str] = None
    image_prompt_pattern_id: Optional[str] = None
    pattern_id: Optional[str] = None
    writing_style_id: Optional[str] = None
    target_audience: Optional[str] = None
    publish_status: str = "published"

    def validate(self) -> None:
        """Raise ValidationError listing every missing mandatory id."""
        missing = [
            wire_name
            for attr, wire_name in _MANDATORY_FIELDS.items()
            if not (getattr(self, attr) or "").strip()
        ]
        if missing:
            raise ValidationError(
                f"Missing required parameters: {', '.join(missing)}",
                fields=missing,
            )
        if self.publish_status not in PUBLISH_STATUSES:
            raise ValidationError(
                f"publishStatus must be one of {', '.join(PUBLISH_STATUSES)}",
                fields=["publishStatus"],
            )


@dataclass(frozen=True)
class CategoryInfo:
    id: str
    name: str
    description: str = ""


@dataclass(frozen=True)
class WriterInfo:
    id: str
    handle_name: str
    bio: str = ""


@dataclass(frozen=True)
class PromptTemplate:
    """Named prompt text: composition patterns and writing styles."""

    id: str
    name: str
    prompt: str
    description: str = ""


@dataclass(frozen=True)
class ImagePatternInfo:
    id: str
    name: str
    prompt: str
    size: str = "1792x1024"


@dataclass
class GenerationContext:
    """Entities loaded for one run; read-only once generation starts."""

    category: CategoryInfo
    writer: WriterInfo
    image_pattern: ImagePatternInfo
    pattern: Optional[PromptTemplate] = None
    writing_style: Optional[PromptTemplate] = None


@dataclass(frozen=True)
class ExistingTitle:
    id: str
    title: str


@dataclass(frozen=True)
class SimilarArticle:
    id: str
    title: str


@dataclass(frozen=True)
class ThemeCheckResult:
    theme: str
    is_duplicate: bool
    similarity: float
    most_similar_article: Optional[SimilarArticle] = None


@dataclass(frozen=True)
class OutlineSection:
    heading: str
    summary: str = ""


@dataclass(frozen=True)
class ArticleSection:
    heading: str
    body: str

    def to_html(self) -> str:
        return f"<h2>{escape(self.heading)}</h2>\n{self.body}"


@dataclass(frozen=True)
class GeneratedImage:
    url: str
    alt: str
    prompt: str
    # None for the featured image
    section_index: Optional[int] = None


@dataclass(frozen=True)
class ArticleMetadata:
    meta_title: str
    meta_description: str
    slug: str


@dataclass
class ArticleRecord:
    """Fully assembled article, handed to the repository in one write."""

    tenant_id: str
    title: str
    slug: str
    content: str
    sections: List[ArticleSection]
    excerpt: str
    meta_title: str
    meta_description: str
    images: List[GeneratedImage]
    table_of_contents: List[dict]
    reading_time: int
    target_audience: str
    category_id: str
    writer_id: str
    image_prompt_pattern_id: str
    pattern_id: Optional[str] = None
    writing_style_id: Optional[str] = None
    is_published: bool = True
    is_scheduled: bool = False

    @property
    def featured_image(self) -> Optional[GeneratedImage]:
        return next((img for img in self.images if img.section_index is None), None)


@dataclass(frozen=True)
class GenerationResult:
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


@dataclass(frozen=True)
class ScheduleConfig:
    """Read-only view of a ScheduledGeneration row."""

    id: str
    tenant_id: str
    name: str
    days_of_week: List[int]
    time_of_day: str
    is_active: bool
    category_id: str
    writer_id: str
    image_prompt_pattern_id: str
    pattern_id: Optional[str] = None
    writing_style_id: Optional[str] = None
    target_audience: Optional[str] = None
    publish_status: str = "published"
    timezone: Optional[str] = None
    last_executed_at: Optional[datetime] = None

    def to_request(self) -> GenerationRequest:
        return GenerationRequest(
            tenant_id=self.tenant_id,
            category_id=self.category_id,
            writer_id=self.writer_id,
            image_prompt_pattern_id=self.image_prompt_pattern_id,
            pattern_id=self.pattern_id,
            writing_style_id=self.writing_style_id,
            target_audience=self.target_audience,
            publish_status=self.publish_status,
        )


@dataclass(frozen=True)
class ScheduleRunResult:
    schedule_id: str
    schedule_name: str
    success: bool
    article_id: Optional[str] = None
    error: Optional[str] = None


@dataclass
class TriggerSummary:
    current_day_of_week: int
    current_time: str
    results: List[ScheduleRunResult] = field(default_factory=list)

    @property
    def executed_count(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)


def normalize_days_of_week(values: Iterable[Union[int, str]]) -> List[int]:
    """
    Coerce stored weekday entries to sorted unique ints in 0..6 (0 = Sunday).

    Older schedules store the indices as strings; anything that is not a
    weekday index is dropped.
    """
    days = set()
    for value in values or ():
        try:
            day = int(str(value).strip())
        except ValueError:
            continue
        if 0 <= day <= 6:
            days.add(day)
    return sorted(days)
