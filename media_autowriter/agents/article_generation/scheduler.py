"""Hourly trigger that replays due ScheduledGeneration entries."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from media_autowriter.agents.article_generation.models import (
    ScheduleConfig,
    ScheduleRunResult,
    TriggerSummary,
)
from media_autowriter.agents.article_generation.orchestrator import ArticleGenerationPipeline
from media_autowriter.config.settings import Settings, settings as default_settings
from media_autowriter.database.repository import ContentRepository
from media_autowriter.utils.exceptions import ConfigurationError
from media_autowriter.utils.logging import get_logger

logger = get_logger(__name__)


def resolve_timezone(name: Optional[str], default: str) -> ZoneInfo:
    """IANA zone for a schedule, falling back to ``default`` for blank or unknown names."""
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("schedule_timezone_unknown", timezone=name, fallback=default)
    try:
        return ZoneInfo(default)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(f"Unknown schedule timezone: {default}") from exc


def current_slot(now: datetime, tz: ZoneInfo) -> Tuple[int, str]:
    """
    Weekday (0 = Sunday) and ``"HH:00"`` hour string of ``now`` in ``tz``.

    Naive datetimes are taken as UTC.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local = now.astimezone(tz)
    return local.isoweekday() % 7, f"{local.hour:02d}:00"


def is_schedule_due(schedule: ScheduleConfig, now: datetime, default_tz: str) -> bool:
    """Active, scheduled for today's weekday, and exactly this hour."""
    if not schedule.is_active:
        return False
    weekday, hour = current_slot(now, resolve_timezone(schedule.timezone, default_tz))
    return weekday in schedule.days_of_week and schedule.time_of_day == hour


class ScheduleTrigger:
    """Selects due schedules and runs one pipeline per schedule, concurrently."""

    def __init__(
        self,
        pipeline: ArticleGenerationPipeline,
        repository: ContentRepository,
        config: Optional[Settings] = None,
    ) -> None:
        self.pipeline = pipeline
        self.repository = repository
        self.config = config or default_settings

    async def run(self, now: Optional[datetime] = None) -> TriggerSummary:
        now = now or datetime.now(timezone.utc)
        weekday, hour = current_slot(now, resolve_timezone(None, self.config.schedule_timezone))
        summary = TriggerSummary(current_day_of_week=weekday, current_time=hour)

        schedules = await self.repository.list_active_schedules()
        due = [s for s in schedules if is_schedule_due(s, now, self.config.schedule_timezone)]
        logger.info(
            "scheduled_generation_tick",
            day_of_week=weekday,
            time=hour,
            active=len(schedules),
            due=len(due),
        )
        if not due:
            return summary

        semaphore = asyncio.Semaphore(max(1, self.config.scheduler_max_concurrency))

        async def bounded(schedule: ScheduleConfig) -> ScheduleRunResult:
            async with semaphore:
                return await self._run_schedule(schedule, now)

        summary.results = list(await asyncio.gather(*(bounded(s) for s in due)))
        logger.info(
            "scheduled_generation_completed",
            executed=summary.executed_count,
            succeeded=summary.succeeded,
            failed=summary.failed,
        )
        return summary

    async def _run_schedule(self, schedule: ScheduleConfig, now: datetime) -> ScheduleRunResult:
        """Run one schedule; failures become a failed result instead of raising."""
        try:
            result = await self.pipeline.generate(schedule.to_request())
        except Exception as exc:
            logger.error(
                "scheduled_generation_failed",
                schedule_id=schedule.id,
                schedule_name=schedule.name,
                tenant_id=schedule.tenant_id,
                error_type=type(exc).__name__,
                error=str(exc),
                exc_info=True,
            )
            return ScheduleRunResult(
                schedule_id=schedule.id,
                schedule_name=schedule.name,
                success=False,
                error=str(exc),
            )

        error: Optional[str] = None
        try:
            await self.repository.mark_schedule_executed(schedule.id, now)
        except Exception as exc:
            # The article exists; only the stamp is missing
            logger.error(
                "schedule_stamp_failed",
                schedule_id=schedule.id,
                article_id=result.article_id,
                error=str(exc),
                exc_info=True,
            )
            error = f"Article created but last_executed_at was not updated: {exc}"

        logger.info(
            "scheduled_generation_succeeded",
            schedule_id=schedule.id,
            article_id=result.article_id,
        )
        return ScheduleRunResult(
            schedule_id=schedule.id,
            schedule_name=schedule.name,
            success=True,
            article_id=result.article_id,
            error=error,
        )
