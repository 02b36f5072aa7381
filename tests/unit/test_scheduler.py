"""Unit tests for the scheduled generation trigger."""

import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from zoneinfo import ZoneInfo

import pytest

from media_autowriter.agents.article_generation.models import (
    GenerationResult,
    ScheduleConfig,
    normalize_days_of_week,
)
from media_autowriter.agents.article_generation.scheduler import (
    ScheduleTrigger,
    current_slot,
    is_schedule_due,
    resolve_timezone,
)
from media_autowriter.utils.exceptions import ConfigurationError, ProviderError

# Monday 2025-01-06 09:00 in Asia/Tokyo
MONDAY_9AM_JST = datetime(2025, 1, 6, 0, 0, tzinfo=timezone.utc)


def make_schedule(schedule_id="sched-1", **overrides) -> ScheduleConfig:
    fields = dict(
        id=schedule_id,
        tenant_id="media-1",
        name=f"Schedule {schedule_id}",
        days_of_week=[1, 3, 5],
        time_of_day="09:00",
        is_active=True,
        category_id="cat-1",
        writer_id="writer-1",
        image_prompt_pattern_id="img-1",
    )
    fields.update(overrides)
    return ScheduleConfig(**fields)


def make_result(article_id="article-1") -> GenerationResult:
    return GenerationResult(
        article_id=article_id,
        title="タイトル",
        slug="slug",
        meta_title="タイトル",
        meta_description="説明",
        target_audience="読者",
        section_count=3,
        image_count=2,
        is_published=True,
        duration_seconds=1.0,
    )


@pytest.mark.unit
class TestCurrentSlot:
    def test_tokyo_monday_morning(self):
        assert current_slot(MONDAY_9AM_JST, ZoneInfo("Asia/Tokyo")) == (1, "09:00")

    def test_sunday_is_zero(self):
        sunday_noon_jst = datetime(2025, 1, 5, 3, 30, tzinfo=timezone.utc)
        assert current_slot(sunday_noon_jst, ZoneInfo("Asia/Tokyo")) == (0, "12:00")

    def test_day_boundary_uses_local_date(self):
        # Sunday 20:00 UTC is already Monday 05:00 in Tokyo
        assert current_slot(datetime(2025, 1, 5, 20, 0, tzinfo=timezone.utc), ZoneInfo("Asia/Tokyo")) == (
            1,
            "05:00",
        )

    def test_naive_datetime_is_utc(self):
        assert current_slot(datetime(2025, 1, 6, 0, 0), ZoneInfo("Asia/Tokyo")) == (1, "09:00")

    def test_unknown_schedule_timezone_falls_back(self):
        assert resolve_timezone("Mars/Olympus", "Asia/Tokyo") == ZoneInfo("Asia/Tokyo")

    def test_unknown_default_timezone_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            resolve_timezone(None, "Mars/Olympus")


@pytest.mark.unit
class TestIsScheduleDue:
    def test_matching_day_and_hour(self):
        assert is_schedule_due(make_schedule(), MONDAY_9AM_JST, "Asia/Tokyo") is True

    def test_other_hour(self):
        assert is_schedule_due(make_schedule(time_of_day="10:00"), MONDAY_9AM_JST, "Asia/Tokyo") is False

    def test_other_day(self):
        assert is_schedule_due(make_schedule(days_of_week=[2]), MONDAY_9AM_JST, "Asia/Tokyo") is False

    def test_inactive(self):
        assert is_schedule_due(make_schedule(is_active=False), MONDAY_9AM_JST, "Asia/Tokyo") is False

    def test_schedule_timezone_overrides_default(self):
        schedule = make_schedule(time_of_day="00:00", timezone="UTC")
        assert is_schedule_due(schedule, MONDAY_9AM_JST, "Asia/Tokyo") is True

    def test_string_day_indices_are_normalized(self):
        assert normalize_days_of_week(["1", "3", 5, "x", 9, " 0 "]) == [0, 1, 3, 5]


@pytest.mark.unit
class TestScheduleTrigger:
    @pytest.mark.asyncio
    async def test_nothing_due(self, repository, test_settings):
        repository.schedules = [make_schedule(time_of_day="10:00")]
        pipeline = MagicMock()
        pipeline.generate = AsyncMock()

        summary = await ScheduleTrigger(pipeline, repository, test_settings).run(MONDAY_9AM_JST)

        pipeline.generate.assert_not_called()
        assert summary.executed_count == 0
        assert summary.current_day_of_week == 1
        assert summary.current_time == "09:00"

    @pytest.mark.asyncio
    async def test_success_stamps_schedule(self, repository, test_settings):
        repository.schedules = [make_schedule("sched-1", writing_style_id="style-1")]
        pipeline = MagicMock()
        pipeline.generate = AsyncMock(return_value=make_result("article-9"))

        summary = await ScheduleTrigger(pipeline, repository, test_settings).run(MONDAY_9AM_JST)

        assert (summary.executed_count, summary.succeeded, summary.failed) == (1, 1, 0)
        assert summary.results[0].article_id == "article-9"
        assert repository.executed == {"sched-1": MONDAY_9AM_JST}
        request = pipeline.generate.call_args.args[0]
        assert request.tenant_id == "media-1"
        assert request.writing_style_id == "style-1"

    @pytest.mark.asyncio
    async def test_only_matching_schedule_runs(self, repository, test_settings):
        repository.schedules = [
            make_schedule("due", category_id="cat-due"),
            make_schedule("later", category_id="cat-later", time_of_day="15:00"),
        ]
        pipeline = MagicMock()
        pipeline.generate = AsyncMock(return_value=make_result())

        summary = await ScheduleTrigger(pipeline, repository, test_settings).run(MONDAY_9AM_JST)

        assert pipeline.generate.await_count == 1
        assert pipeline.generate.call_args.args[0].category_id == "cat-due"
        assert [r.schedule_id for r in summary.results] == ["due"]
        assert "later" not in repository.executed

    @pytest.mark.asyncio
    async def test_single_failure_is_reported_not_raised(self, repository, test_settings):
        repository.schedules = [make_schedule("sched-1")]
        pipeline = MagicMock()
        pipeline.generate = AsyncMock(side_effect=ProviderError("grok", "HTTP 503", status_code=503))

        summary = await ScheduleTrigger(pipeline, repository, test_settings).run(MONDAY_9AM_JST)

        assert (summary.executed_count, summary.succeeded, summary.failed) == (1, 0, 1)
        assert "HTTP 503" in summary.results[0].error
        assert repository.executed == {}

    @pytest.mark.asyncio
    async def test_failures_are_isolated(self, repository, test_settings):
        repository.schedules = [
            make_schedule("good", category_id="cat-good"),
            make_schedule("bad", category_id="cat-bad"),
        ]

        async def generate(request):
            if request.category_id == "cat-bad":
                raise ProviderError("openai", "HTTP 500", status_code=500)
            return make_result("article-good")

        pipeline = MagicMock()
        pipeline.generate = AsyncMock(side_effect=generate)

        summary = await ScheduleTrigger(pipeline, repository, test_settings).run(MONDAY_9AM_JST)

        assert (summary.executed_count, summary.succeeded, summary.failed) == (2, 1, 1)
        by_id = {r.schedule_id: r for r in summary.results}
        assert by_id["good"].success is True
        assert by_id["bad"].success is False
        assert list(repository.executed) == ["good"]

    @pytest.mark.asyncio
    async def test_failed_stamp_keeps_success(self, repository, test_settings):
        repository.schedules = [make_schedule("sched-1")]
        repository.fail_mark_executed = True
        pipeline = MagicMock()
        pipeline.generate = AsyncMock(return_value=make_result())

        summary = await ScheduleTrigger(pipeline, repository, test_settings).run(MONDAY_9AM_JST)

        assert summary.succeeded == 1
        assert "last_executed_at" in summary.results[0].error

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self, repository, test_settings):
        repository.schedules = [make_schedule(f"sched-{i}") for i in range(4)]
        state = {"active": 0, "peak": 0}

        async def generate(request):
            state["active"] += 1
            state["peak"] = max(state["peak"], state["active"])
            await asyncio.sleep(0.01)
            state["active"] -= 1
            return make_result()

        pipeline = MagicMock()
        pipeline.generate = AsyncMock(side_effect=generate)

        summary = await ScheduleTrigger(pipeline, repository, test_settings).run(MONDAY_9AM_JST)

        assert summary.succeeded == 4
        assert state["peak"] == test_settings.scheduler_max_concurrency
