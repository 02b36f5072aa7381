"""CRUD operations for composition patterns, image prompt patterns and writing styles."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from media_autowriter.agents.article_generation.models import IMAGE_SIZES
from media_autowriter.database.models import ArticlePattern, ImagePromptPattern, WritingStyle
from media_autowriter.utils.exceptions import ValidationError
from media_autowriter.utils.logging import get_logger


logger = get_logger(__name__)


async def create_article_pattern(
    db_session: AsyncSession,
    *,
    media_id: str,
    name: str,
    prompt: str,
    description: Optional[str] = None,
) -> ArticlePattern:
    pattern = ArticlePattern(media_id=media_id, name=name, prompt=prompt, description=description)
    db_session.add(pattern)
    await db_session.flush()
    logger.info("article_pattern_created", pattern_id=pattern.id, media_id=media_id)
    return pattern


async def get_article_pattern(
    db_session: AsyncSession,
    *,
    media_id: str,
    pattern_id: str,
) -> Optional[ArticlePattern]:
    stmt = select(ArticlePattern).where(
        ArticlePattern.id == pattern_id,
        ArticlePattern.media_id == media_id,
    )
    result = await db_session.execute(stmt)
    return result.scalar_one_or_none()


async def create_image_prompt_pattern(
    db_session: AsyncSession,
    *,
    media_id: str,
    name: str,
    prompt: str,
    size: str = "1792x1024",
    description: Optional[str] = None,
) -> ImagePromptPattern:
    if size not in IMAGE_SIZES:
        raise ValidationError(
            f"Unsupported image size '{size}' (expected one of {', '.join(IMAGE_SIZES)})",
            fields=["size"],
        )
    pattern = ImagePromptPattern(
        media_id=media_id,
        name=name,
        prompt=prompt,
        size=size,
        description=description,
    )
    db_session.add(pattern)
    await db_session.flush()
    logger.info("image_prompt_pattern_created", pattern_id=pattern.id, media_id=media_id)
    return pattern


async def get_image_prompt_pattern(
    db_session: AsyncSession,
    *,
    media_id: str,
    pattern_id: str,
) -> Optional[ImagePromptPattern]:
    stmt = select(ImagePromptPattern).where(
        ImagePromptPattern.id == pattern_id,
        ImagePromptPattern.media_id == media_id,
    )
    result = await db_session.execute(stmt)
    return result.scalar_one_or_none()


async def create_writing_style(
    db_session: AsyncSession,
    *,
    media_id: str,
    name: str,
    prompt: str,
    writer_id: Optional[str] = None,
    description: Optional[str] = None,
) -> WritingStyle:
    style = WritingStyle(
        media_id=media_id,
        writer_id=writer_id,
        name=name,
        prompt=prompt,
        description=description,
    )
    db_session.add(style)
    await db_session.flush()
    logger.info("writing_style_created", style_id=style.id, media_id=media_id)
    return style


async def get_writing_style(
    db_session: AsyncSession,
    *,
    media_id: str,
    style_id: str,
) -> Optional[WritingStyle]:
    stmt = select(WritingStyle).where(
        WritingStyle.id == style_id,
        WritingStyle.media_id == media_id,
    )
    result = await db_session.execute(stmt)
    return result.scalar_one_or_none()
