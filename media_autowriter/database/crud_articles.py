"""CRUD operations for articles."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from media_autowriter.database.models import Article
from media_autowriter.utils.logging import get_logger


logger = get_logger(__name__)


async def create_article(
    db_session: AsyncSession,
    *,
    media_id: str,
    title: str,
    slug: str,
    content: str,
    category_id: str,
    writer_id: str,
    **fields: Any,
) -> Article:
    """Insert an article row and flush it so its id is available."""
    try:
        article = Article(
            media_id=media_id,
            title=title,
            slug=slug,
            content=content,
            category_id=category_id,
            writer_id=writer_id,
            **fields,
        )
        db_session.add(article)
        await db_session.flush()

        logger.info(
            "article_created",
            article_id=article.id,
            media_id=media_id,
            slug=slug,
            is_published=article.is_published,
        )
        return article
    except SQLAlchemyError as exc:
        logger.error(
            "article_create_failed",
            error=str(exc),
            media_id=media_id,
            title=title,
        )
        raise


async def get_article(
    db_session: AsyncSession,
    *,
    media_id: str,
    article_id: str,
) -> Optional[Article]:
    """Get an article by id, scoped to its media tenant."""
    stmt: Select[Any] = select(Article).where(
        Article.id == article_id,
        Article.media_id == media_id,
    )
    result = await db_session.execute(stmt)
    return result.scalar_one_or_none()


async def list_published_titles(
    db_session: AsyncSession,
    *,
    media_id: str,
) -> List[Dict[str, str]]:
    """Return ``{"id", "title"}`` for every published article of a tenant."""
    stmt = (
        select(Article.id, Article.title)
        .where(
            Article.media_id == media_id,
            Article.is_published.is_(True),
        )
        .order_by(Article.created_at.desc())
    )
    result = await db_session.execute(stmt)
    return [{"id": row.id, "title": row.title} for row in result.all()]
