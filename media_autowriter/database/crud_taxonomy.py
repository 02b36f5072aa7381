"""CRUD operations for categories and writers."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from media_autowriter.database.models import Category, Writer
from media_autowriter.utils.logging import get_logger


logger = get_logger(__name__)


async def create_category(
    db_session: AsyncSession,
    *,
    media_id: str,
    name: str,
    slug: Optional[str] = None,
    description: Optional[str] = None,
) -> Category:
    category = Category(media_id=media_id, name=name, slug=slug, description=description)
    db_session.add(category)
    await db_session.flush()
    logger.info("category_created", category_id=category.id, media_id=media_id)
    return category


async def get_category(
    db_session: AsyncSession,
    *,
    media_id: str,
    category_id: str,
) -> Optional[Category]:
    """Get a category by id; other tenants' categories are invisible."""
    stmt = select(Category).where(Category.id == category_id, Category.media_id == media_id)
    result = await db_session.execute(stmt)
    return result.scalar_one_or_none()


async def create_writer(
    db_session: AsyncSession,
    *,
    media_id: str,
    handle_name: str,
    bio: Optional[str] = None,
    icon: Optional[str] = None,
) -> Writer:
    writer = Writer(media_id=media_id, handle_name=handle_name, bio=bio, icon=icon)
    db_session.add(writer)
    await db_session.flush()
    logger.info("writer_created", writer_id=writer.id, media_id=media_id)
    return writer


async def get_writer(
    db_session: AsyncSession,
    *,
    media_id: str,
    writer_id: str,
) -> Optional[Writer]:
    stmt = select(Writer).where(Writer.id == writer_id, Writer.media_id == media_id)
    result = await db_session.execute(stmt)
    return result.scalar_one_or_none()
