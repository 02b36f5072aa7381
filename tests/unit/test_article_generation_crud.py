"""Tests for the CRUD modules and the SQL content repository (SQLite in memory)."""

from datetime import datetime, timezone

import pytest

from media_autowriter.agents.article_generation.models import (
    ArticleRecord,
    ArticleSection,
    GeneratedImage,
)
from media_autowriter.database import crud_articles, crud_patterns, crud_schedules, crud_taxonomy
from media_autowriter.database.repository import SQLContentRepository
from media_autowriter.utils.exceptions import ValidationError


def make_record(tenant_id="media-1", title="2025年版リモートワーク導入ガイド", **overrides) -> ArticleRecord:
    fields = dict(
        tenant_id=tenant_id,
        title=title,
        slug="remote-work-guide-2025",
        content="<h2>導入</h2>\n<p>本文</p>",
        sections=[ArticleSection(heading="導入", body="<p>本文</p>")],
        excerpt="本文",
        meta_title=title,
        meta_description="リモートワーク導入の手順を解説します。",
        images=[
            GeneratedImage(url="https://images.example.com/1.png", alt="在宅勤務", prompt="p1"),
            GeneratedImage(url="https://images.example.com/2.png", alt="導入", prompt="p2", section_index=0),
        ],
        table_of_contents=[{"id": "section-1", "title": "導入", "level": 2}],
        reading_time=1,
        target_audience="総務担当者",
        category_id="cat-1",
        writer_id="writer-1",
        image_prompt_pattern_id="img-1",
    )
    fields.update(overrides)
    return ArticleRecord(**fields)


@pytest.mark.integration
class TestTaxonomyAndPatternCrud:
    """Tenant scoping of the lookup tables."""

    @pytest.mark.asyncio
    async def test_category_is_tenant_scoped(self, db_session):
        category = await crud_taxonomy.create_category(db_session, media_id="media-1", name="働き方")

        found = await crud_taxonomy.get_category(db_session, media_id="media-1", category_id=category.id)
        other = await crud_taxonomy.get_category(db_session, media_id="media-2", category_id=category.id)

        assert found.name == "働き方"
        assert other is None

    @pytest.mark.asyncio
    async def test_writer_lookup(self, db_session):
        writer = await crud_taxonomy.create_writer(db_session, media_id="media-1", handle_name="山田花子")
        found = await crud_taxonomy.get_writer(db_session, media_id="media-1", writer_id=writer.id)
        assert found.handle_name == "山田花子"
        assert await crud_taxonomy.get_writer(db_session, media_id="media-1", writer_id="missing") is None

    @pytest.mark.asyncio
    async def test_image_pattern_default_size(self, db_session):
        pattern = await crud_patterns.create_image_prompt_pattern(
            db_session, media_id="media-1", name="フラット", prompt="Flat illustration"
        )
        found = await crud_patterns.get_image_prompt_pattern(
            db_session, media_id="media-1", pattern_id=pattern.id
        )
        assert found.size == "1792x1024"

    @pytest.mark.asyncio
    async def test_image_pattern_rejects_unsupported_size(self, db_session):
        with pytest.raises(ValidationError) as exc_info:
            await crud_patterns.create_image_prompt_pattern(
                db_session, media_id="media-1", name="小さめ", prompt="Flat", size="512x512"
            )
        assert exc_info.value.fields == ["size"]

    @pytest.mark.asyncio
    async def test_writing_style_is_tenant_scoped(self, db_session):
        style = await crud_patterns.create_writing_style(
            db_session, media_id="media-1", name="やさしい", prompt="です・ます調"
        )
        assert await crud_patterns.get_writing_style(db_session, media_id="media-2", style_id=style.id) is None


@pytest.mark.integration
class TestArticleCrud:
    """Article writes and published-title reads."""

    @pytest.mark.asyncio
    async def test_published_titles_exclude_drafts_and_other_tenants(self, db_session):
        common = dict(content="<p>x</p>", category_id="cat-1", writer_id="writer-1")
        await crud_articles.create_article(
            db_session, media_id="media-1", title="公開記事", slug="a", is_published=True, **common
        )
        await crud_articles.create_article(
            db_session, media_id="media-1", title="下書き", slug="b", is_published=False, **common
        )
        await crud_articles.create_article(
            db_session, media_id="media-2", title="他メディア", slug="c", is_published=True, **common
        )

        titles = await crud_articles.list_published_titles(db_session, media_id="media-1")

        assert [t["title"] for t in titles] == ["公開記事"]

    @pytest.mark.asyncio
    async def test_get_article_is_tenant_scoped(self, db_session):
        article = await crud_articles.create_article(
            db_session,
            media_id="media-1",
            title="記事",
            slug="kiji",
            content="<p>x</p>",
            category_id="cat-1",
            writer_id="writer-1",
        )
        assert (await crud_articles.get_article(db_session, media_id="media-1", article_id=article.id)).slug == "kiji"
        assert await crud_articles.get_article(db_session, media_id="media-2", article_id=article.id) is None


@pytest.mark.integration
class TestSQLContentRepository:
    """Domain mapping of the SQL repository."""

    @pytest.mark.asyncio
    async def test_lookups_map_to_domain_types(self, session_factory):
        async with session_factory() as session:
            category = await crud_taxonomy.create_category(
                session, media_id="media-1", name="働き方", description=None
            )
            writer = await crud_taxonomy.create_writer(session, media_id="media-1", handle_name="山田花子")
            await session.commit()

        repo = SQLContentRepository(session_factory)

        info = await repo.get_tenant_category("media-1", category.id)
        assert info.name == "働き方"
        assert info.description == ""
        assert (await repo.get_writer("media-1", writer.id)).handle_name == "山田花子"
        assert await repo.get_tenant_category("media-2", category.id) is None

    @pytest.mark.asyncio
    async def test_pattern_lookups(self, session_factory):
        async with session_factory() as session:
            pattern = await crud_patterns.create_article_pattern(
                session, media_id="media-1", name="ハウツー", prompt="導入・手順・まとめ"
            )
            image_pattern = await crud_patterns.create_image_prompt_pattern(
                session, media_id="media-1", name="写真風", prompt="Photo", size="1024x1024"
            )
            style = await crud_patterns.create_writing_style(
                session, media_id="media-1", name="やさしい", prompt="です・ます調", writer_id="writer-1"
            )
            await session.commit()

        repo = SQLContentRepository(session_factory)

        composition = await repo.get_composition_pattern("media-1", pattern.id)
        assert composition.prompt == "導入・手順・まとめ"
        assert composition.description == ""
        assert (await repo.get_image_prompt_pattern("media-1", image_pattern.id)).size == "1024x1024"
        assert (await repo.get_writing_style("media-1", style.id)).name == "やさしい"
        assert await repo.get_composition_pattern("media-2", pattern.id) is None

    @pytest.mark.asyncio
    async def test_create_article_round_trip(self, session_factory):
        repo = SQLContentRepository(session_factory)

        article_id = await repo.create_article(make_record())

        async with session_factory() as session:
            row = await crud_articles.get_article(session, media_id="media-1", article_id=article_id)
        assert row.is_ai_generated is True
        assert row.is_published is True
        assert row.view_count == 0
        assert row.featured_image == "https://images.example.com/1.png"
        assert row.featured_image_alt == "在宅勤務"
        assert row.images[1]["section_index"] == 0
        assert row.sections == [{"heading": "導入", "body": "<p>本文</p>"}]

        titles = await repo.list_published_titles("media-1")
        assert [t.title for t in titles] == ["2025年版リモートワーク導入ガイド"]

    @pytest.mark.asyncio
    async def test_draft_is_not_listed_as_published(self, session_factory):
        repo = SQLContentRepository(session_factory)
        await repo.create_article(make_record(is_published=False))
        assert await repo.list_published_titles("media-1") == []

    @pytest.mark.asyncio
    async def test_schedules_and_stamp(self, session_factory):
        async with session_factory() as session:
            active = await crud_schedules.create_schedule(
                session,
                media_id="media-1",
                name="月水金",
                days_of_week=["1", "3", "5"],
                time_of_day="09:00",
                category_id="cat-1",
                writer_id="writer-1",
                image_prompt_pattern_id="img-1",
            )
            await crud_schedules.create_schedule(
                session,
                media_id="media-1",
                name="停止中",
                days_of_week=[0],
                time_of_day="10:00",
                category_id="cat-1",
                writer_id="writer-1",
                image_prompt_pattern_id="img-1",
                is_active=False,
            )
            await session.commit()

        repo = SQLContentRepository(session_factory)
        schedules = await repo.list_active_schedules()

        assert [s.name for s in schedules] == ["月水金"]
        assert schedules[0].days_of_week == [1, 3, 5]
        assert schedules[0].tenant_id == "media-1"
        assert schedules[0].publish_status == "published"

        executed_at = datetime(2025, 1, 6, 0, 0, tzinfo=timezone.utc)
        await repo.mark_schedule_executed(active.id, executed_at)

        async with session_factory() as session:
            row = await crud_schedules.get_schedule(session, schedule_id=active.id)
        assert row.last_executed_at.replace(tzinfo=None) == executed_at.replace(tzinfo=None)

    @pytest.mark.asyncio
    async def test_stamping_missing_schedule_is_a_no_op(self, session_factory):
        repo = SQLContentRepository(session_factory)
        await repo.mark_schedule_executed("missing", datetime.now(timezone.utc))
