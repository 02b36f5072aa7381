"""SQLAlchemy models for the media tenant content tables."""

from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    Index,
    Integer,
    String,
    Text,
    TIMESTAMP,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from media_autowriter.database.db_session import Base

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite for local runs and tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def _document_id() -> str:
    return uuid4().hex


class TimestampMixin:
    """Mixin for server-generated created_at and updated_at timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class TenantOwnedMixin:
    """Document-style string id plus the owning media tenant."""

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_document_id)
    media_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)


# 1. categories
class Category(Base, TenantOwnedMixin, TimestampMixin):
    """Article category of a media tenant."""

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


# 2. writers
class Writer(Base, TenantOwnedMixin, TimestampMixin):
    """Author persona attributed to generated articles."""

    __tablename__ = "writers"

    handle_name: Mapped[str] = mapped_column(String(255), nullable=False)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    icon: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)


# 3. article_patterns (composition patterns)
class ArticlePattern(Base, TenantOwnedMixin, TimestampMixin):
    """Reusable prompt describing an article's structural shape."""

    __tablename__ = "article_patterns"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    prompt: Mapped[str] = mapped_column(Text, nullable=False)


# 4. image_prompt_patterns
class ImagePromptPattern(Base, TenantOwnedMixin, TimestampMixin):
    """Base prompt and size for generated article images."""

    __tablename__ = "image_prompt_patterns"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    prompt: Mapped[str] = mapped_column(Text, nullable=False)
    size: Mapped[str] = mapped_column(String(20), nullable=False, default="1792x1024")


# 5. writing_styles
class WritingStyle(Base, TenantOwnedMixin, TimestampMixin):
    """Per-writer tone instructions applied while drafting sections."""

    __tablename__ = "writing_styles"

    writer_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    prompt: Mapped[str] = mapped_column(Text, nullable=False)


# 6. articles
class Article(Base, TenantOwnedMixin, TimestampMixin):
    """Article record; generated rows are created only by the pipeline commit."""

    __tablename__ = "articles"
    __table_args__ = (
        Index("ix_articles_media_published", "media_id", "is_published"),
    )

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    sections: Mapped[Optional[list]] = mapped_column(JSONType, nullable=True)
    excerpt: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    meta_title: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    meta_description: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    featured_image: Mapped[Optional[str]] = mapped_column(String(2000), nullable=True)
    featured_image_alt: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    images: Mapped[Optional[list]] = mapped_column(JSONType, nullable=True)
    table_of_contents: Mapped[Optional[list]] = mapped_column(JSONType, nullable=True)
    reading_time: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    target_audience: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    category_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    writer_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    pattern_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    writing_style_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    image_prompt_pattern_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    is_published: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_scheduled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_ai_generated: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    view_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


# 7. scheduled_generations
class ScheduledGeneration(Base, TenantOwnedMixin, TimestampMixin):
    """Recurring time-of-week trigger replaying a generation request."""

    __tablename__ = "scheduled_generations"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    days_of_week: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    time_of_day: Mapped[str] = mapped_column(String(5), nullable=False)
    timezone: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)
    category_id: Mapped[str] = mapped_column(String(64), nullable=False)
    writer_id: Mapped[str] = mapped_column(String(64), nullable=False)
    image_prompt_pattern_id: Mapped[str] = mapped_column(String(64), nullable=False)
    pattern_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    writing_style_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    target_audience: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    publish_status: Mapped[str] = mapped_column(String(20), nullable=False, default="published")
    last_executed_at: Mapped[Optional[datetime]] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=True,
    )
