"""Content repository: the persistence contract used by the pipeline and the trigger."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from media_autowriter.agents.article_generation.models import (
    ArticleRecord,
    CategoryInfo,
    ExistingTitle,
    ImagePatternInfo,
    PromptTemplate,
    ScheduleConfig,
    WriterInfo,
    normalize_days_of_week,
)
from media_autowriter.database import (
    crud_articles,
    crud_patterns,
    crud_schedules,
    crud_taxonomy,
)
from media_autowriter.database.db_session import AsyncSessionLocal, session_scope
from media_autowriter.database.models import ScheduledGeneration
from media_autowriter.utils.exceptions import PersistenceError
from media_autowriter.utils.logging import get_logger
from media_autowriter.utils.retry import retry_database_operation

logger = get_logger(__name__)


class ContentRepository(ABC):
    """Tenant-scoped reads and the single article write of a generation run."""

    @abstractmethod
    async def get_tenant_category(self, tenant_id: str, category_id: str) -> Optional[CategoryInfo]:
        ...

    @abstractmethod
    async def get_writer(self, tenant_id: str, writer_id: str) -> Optional[WriterInfo]:
        ...

    @abstractmethod
    async def get_composition_pattern(self, tenant_id: str, pattern_id: str) -> Optional[PromptTemplate]:
        ...

    @abstractmethod
    async def get_image_prompt_pattern(self, tenant_id: str, pattern_id: str) -> Optional[ImagePatternInfo]:
        ...

    @abstractmethod
    async def get_writing_style(self, tenant_id: str, style_id: str) -> Optional[PromptTemplate]:
        ...

    @abstractmethod
    async def list_published_titles(self, tenant_id: str) -> List[ExistingTitle]:
        ...

    @abstractmethod
    async def create_article(self, record: ArticleRecord) -> str:
        """Persist the article and return its id. Called once per successful run."""

    @abstractmethod
    async def list_active_schedules(self) -> List[ScheduleConfig]:
        ...

    @abstractmethod
    async def mark_schedule_executed(self, schedule_id: str, executed_at: datetime) -> None:
        ...


def _schedule_config(row: ScheduledGeneration) -> ScheduleConfig:
    return ScheduleConfig(
        id=row.id,
        tenant_id=row.media_id,
        name=row.name,
        days_of_week=normalize_days_of_week(row.days_of_week),
        time_of_day=row.time_of_day,
        is_active=row.is_active,
        category_id=row.category_id,
        writer_id=row.writer_id,
        image_prompt_pattern_id=row.image_prompt_pattern_id,
        pattern_id=row.pattern_id,
        writing_style_id=row.writing_style_id,
        target_audience=row.target_audience,
        publish_status=row.publish_status,
        timezone=row.timezone,
        last_executed_at=row.last_executed_at,
    )


class SQLContentRepository(ContentRepository):
    """ContentRepository over the async SQLAlchemy models."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal) -> None:
        self._session_factory = session_factory

    @retry_database_operation()
    async def get_tenant_category(self, tenant_id: str, category_id: str) -> Optional[CategoryInfo]:
        async with session_scope(self._session_factory) as session:
            row = await crud_taxonomy.get_category(session, media_id=tenant_id, category_id=category_id)
            if row is None:
                return None
            return CategoryInfo(id=row.id, name=row.name, description=row.description or "")

    @retry_database_operation()
    async def get_writer(self, tenant_id: str, writer_id: str) -> Optional[WriterInfo]:
        async with session_scope(self._session_factory) as session:
            row = await crud_taxonomy.get_writer(session, media_id=tenant_id, writer_id=writer_id)
            if row is None:
                return None
            return WriterInfo(id=row.id, handle_name=row.handle_name, bio=row.bio or "")

    @retry_database_operation()
    async def get_composition_pattern(self, tenant_id: str, pattern_id: str) -> Optional[PromptTemplate]:
        async with session_scope(self._session_factory) as session:
            row = await crud_patterns.get_article_pattern(session, media_id=tenant_id, pattern_id=pattern_id)
            if row is None:
                return None
            return PromptTemplate(
                id=row.id,
                name=row.name,
                prompt=row.prompt,
                description=row.description or "",
            )

    @retry_database_operation()
    async def get_image_prompt_pattern(self, tenant_id: str, pattern_id: str) -> Optional[ImagePatternInfo]:
        async with session_scope(self._session_factory) as session:
            row = await crud_patterns.get_image_prompt_pattern(
                session, media_id=tenant_id, pattern_id=pattern_id
            )
            if row is None:
                return None
            return ImagePatternInfo(id=row.id, name=row.name, prompt=row.prompt, size=row.size)

    @retry_database_operation()
    async def get_writing_style(self, tenant_id: str, style_id: str) -> Optional[PromptTemplate]:
        async with session_scope(self._session_factory) as session:
            row = await crud_patterns.get_writing_style(session, media_id=tenant_id, style_id=style_id)
            if row is None:
                return None
            return PromptTemplate(
                id=row.id,
                name=row.name,
                prompt=row.prompt,
                description=row.description or "",
            )

    @retry_database_operation()
    async def list_published_titles(self, tenant_id: str) -> List[ExistingTitle]:
        async with session_scope(self._session_factory) as session:
            rows = await crud_articles.list_published_titles(session, media_id=tenant_id)
            return [ExistingTitle(id=row["id"], title=row["title"]) for row in rows]

    async def create_article(self, record: ArticleRecord) -> str:
        featured = record.featured_image
        try:
            async with session_scope(self._session_factory) as session:
                article = await crud_articles.create_article(
                    session,
                    media_id=record.tenant_id,
                    title=record.title,
                    slug=record.slug,
                    content=record.content,
                    category_id=record.category_id,
                    writer_id=record.writer_id,
                    sections=[{"heading": s.heading, "body": s.body} for s in record.sections],
                    excerpt=record.excerpt,
                    meta_title=record.meta_title,
                    meta_description=record.meta_description,
                    featured_image=featured.url if featured else None,
                    featured_image_alt=featured.alt if featured else None,
                    images=[
                        {
                            "url": image.url,
                            "alt": image.alt,
                            "section_index": image.section_index,
                            "prompt": image.prompt,
                        }
                        for image in record.images
                    ],
                    table_of_contents=record.table_of_contents,
                    reading_time=record.reading_time,
                    target_audience=record.target_audience,
                    pattern_id=record.pattern_id,
                    writing_style_id=record.writing_style_id,
                    image_prompt_pattern_id=record.image_prompt_pattern_id,
                    is_published=record.is_published,
                    is_scheduled=record.is_scheduled,
                    is_ai_generated=True,
                    view_count=0,
                )
                return article.id
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to save article '{record.title}': {exc}") from exc

    @retry_database_operation()
    async def list_active_schedules(self) -> List[ScheduleConfig]:
        async with session_scope(self._session_factory) as session:
            rows = await crud_schedules.list_active_schedules(session)
            return [_schedule_config(row) for row in rows]

    async def mark_schedule_executed(self, schedule_id: str, executed_at: datetime) -> None:
        try:
            async with session_scope(self._session_factory) as session:
                await crud_schedules.mark_schedule_executed(
                    session,
                    schedule_id=schedule_id,
                    executed_at=executed_at,
                )
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to stamp schedule {schedule_id}: {exc}") from exc
