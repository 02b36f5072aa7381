"""Shared fixtures: in-memory repository, scripted gateway and a SQLite session."""

import os

# Must be set before media_autowriter.config.settings is imported
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import datetime
from typing import Any, Dict, List, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from media_autowriter.agents.article_generation.models import (
    ArticleRecord,
    CategoryInfo,
    ExistingTitle,
    GenerationRequest,
    ImagePatternInfo,
    PromptTemplate,
    ScheduleConfig,
    WriterInfo,
)
from media_autowriter.config.settings import Settings
from media_autowriter.database import models  # noqa: F401
from media_autowriter.database.db_session import Base
from media_autowriter.database.repository import ContentRepository
from media_autowriter.llm_gateway.base import GenerationParams, ImageResult
from media_autowriter.llm_gateway.gateway import LLMGateway

TENANT_ID = "media-1"

OUTLINE_JSON = (
    '{"sections": ['
    '{"heading": "リモートワークの現状", "summary": "最新の導入状況"},'
    '{"heading": "導入のメリット", "summary": "生産性と採用への効果"},'
    '{"heading": "まとめ", "summary": "要点の整理"}'
    "]}"
)

DEFAULT_RESPONSES: Dict[str, Any] = {
    "themes": "テーマ1: 2025年版リモートワーク導入ガイド\nテーマ2: 中小企業のためのクラウド会計入門",
    "audience": "中小企業の総務担当者",
    "outline": OUTLINE_JSON,
    "sections": "<p>具体的な手順と事例を紹介します。</p>",
    "alt_text": "ノートパソコンで在宅勤務をする会社員",
    "metadata": "2025年版リモートワーク導入ガイド",
    "slug": "remote-work-guide-2025",
}


class ScriptedGateway(LLMGateway):
    """
    Gateway double answering each step from a script.

    A script entry is a string, a list consumed one item per call (the last
    item repeats), an exception instance to raise, or a callable taking the
    user prompt.
    """

    def __init__(self, responses: Optional[Dict[str, Any]] = None) -> None:
        self.responses: Dict[str, Any] = {**DEFAULT_RESPONSES, **(responses or {})}
        self.calls: List[Dict[str, Any]] = []
        self.image_calls: List[Dict[str, str]] = []
        self.closed = False

    async def generate_text(
        self,
        step: str,
        system_prompt: str,
        user_prompt: str,
        params: Optional[GenerationParams] = None,
    ) -> str:
        self.calls.append({"step": step, "system": system_prompt, "user": user_prompt, "params": params})
        response = self.responses[step]
        if isinstance(response, list):
            response = response.pop(0) if len(response) > 1 else response[0]
        if isinstance(response, BaseException):
            raise response
        if callable(response):
            return response(user_prompt)
        return response

    async def generate_image(self, prompt: str, size: str) -> ImageResult:
        self.image_calls.append({"prompt": prompt, "size": size})
        return ImageResult(url=f"https://images.example.com/{len(self.image_calls)}.png")

    async def aclose(self) -> None:
        self.closed = True

    def steps(self) -> List[str]:
        return [call["step"] for call in self.calls]

    def calls_for(self, step: str) -> List[Dict[str, Any]]:
        return [call for call in self.calls if call["step"] == step]


class InMemoryRepository(ContentRepository):
    """ContentRepository keeping one tenant's entities in dicts."""

    def __init__(self) -> None:
        self.categories: Dict[tuple, CategoryInfo] = {}
        self.writers: Dict[tuple, WriterInfo] = {}
        self.patterns: Dict[tuple, PromptTemplate] = {}
        self.image_patterns: Dict[tuple, ImagePatternInfo] = {}
        self.styles: Dict[tuple, PromptTemplate] = {}
        self.published: Dict[str, List[ExistingTitle]] = {}
        self.articles: List[ArticleRecord] = []
        self.schedules: List[ScheduleConfig] = []
        self.executed: Dict[str, datetime] = {}
        self.fail_mark_executed = False

    async def get_tenant_category(self, tenant_id, category_id):
        return self.categories.get((tenant_id, category_id))

    async def get_writer(self, tenant_id, writer_id):
        return self.writers.get((tenant_id, writer_id))

    async def get_composition_pattern(self, tenant_id, pattern_id):
        return self.patterns.get((tenant_id, pattern_id))

    async def get_image_prompt_pattern(self, tenant_id, pattern_id):
        return self.image_patterns.get((tenant_id, pattern_id))

    async def get_writing_style(self, tenant_id, style_id):
        return self.styles.get((tenant_id, style_id))

    async def list_published_titles(self, tenant_id):
        return list(self.published.get(tenant_id, []))

    async def create_article(self, record):
        self.articles.append(record)
        return f"article-{len(self.articles)}"

    async def list_active_schedules(self):
        return [s for s in self.schedules if s.is_active]

    async def mark_schedule_executed(self, schedule_id, executed_at):
        if self.fail_mark_executed:
            raise RuntimeError("stamp failed")
        self.executed[schedule_id] = executed_at


@pytest.fixture
def repository() -> InMemoryRepository:
    repo = InMemoryRepository()
    repo.categories[(TENANT_ID, "cat-1")] = CategoryInfo(
        id="cat-1", name="働き方", description="働き方改革とDX"
    )
    repo.writers[(TENANT_ID, "writer-1")] = WriterInfo(
        id="writer-1", handle_name="山田花子", bio="元人事担当のライター"
    )
    repo.patterns[(TENANT_ID, "pat-1")] = PromptTemplate(
        id="pat-1", name="ハウツー", prompt="導入・手順・まとめの3部構成で書く"
    )
    repo.styles[(TENANT_ID, "style-1")] = PromptTemplate(
        id="style-1", name="やさしい", prompt="専門用語を避け、です・ます調で書く"
    )
    repo.image_patterns[(TENANT_ID, "img-1")] = ImagePatternInfo(
        id="img-1", name="フラット", prompt="Flat illustration, soft colors", size="1792x1024"
    )
    return repo


@pytest.fixture
def gateway() -> ScriptedGateway:
    return ScriptedGateway()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        theme_retry_attempts=1,
        theme_candidate_count=5,
        section_image_count=1,
        pipeline_timeout_seconds=5,
        scheduler_max_concurrency=2,
        schedule_timezone="Asia/Tokyo",
    )


@pytest.fixture
def generation_request() -> GenerationRequest:
    return GenerationRequest(
        tenant_id=TENANT_ID,
        category_id="cat-1",
        writer_id="writer-1",
        image_prompt_pattern_id="img-1",
        pattern_id="pat-1",
        writing_style_id="style-1",
    )


@pytest_asyncio.fixture
async def session_factory():
    """Fresh in-memory SQLite schema per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_gateway():
    """Factory for gateways with per-test scripted answers."""
    return ScriptedGateway
