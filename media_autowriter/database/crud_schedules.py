"""CRUD operations for scheduled generations."""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from media_autowriter.database.models import ScheduledGeneration
from media_autowriter.utils.logging import get_logger


logger = get_logger(__name__)


async def create_schedule(
    db_session: AsyncSession,
    *,
    media_id: str,
    name: str,
    days_of_week: Sequence[int],
    time_of_day: str,
    category_id: str,
    writer_id: str,
    image_prompt_pattern_id: str,
    **fields: Any,
) -> ScheduledGeneration:
    schedule = ScheduledGeneration(
        media_id=media_id,
        name=name,
        days_of_week=list(days_of_week),
        time_of_day=time_of_day,
        category_id=category_id,
        writer_id=writer_id,
        image_prompt_pattern_id=image_prompt_pattern_id,
        **fields,
    )
    db_session.add(schedule)
    await db_session.flush()
    logger.info("schedule_created", schedule_id=schedule.id, media_id=media_id)
    return schedule


async def list_active_schedules(db_session: AsyncSession) -> List[ScheduledGeneration]:
    """All active schedules across tenants."""
    stmt = select(ScheduledGeneration).where(ScheduledGeneration.is_active.is_(True))
    result = await db_session.execute(stmt)
    return list(result.scalars().all())


async def get_schedule(
    db_session: AsyncSession,
    *,
    schedule_id: str,
) -> Optional[ScheduledGeneration]:
    stmt = select(ScheduledGeneration).where(ScheduledGeneration.id == schedule_id)
    result = await db_session.execute(stmt)
    return result.scalar_one_or_none()


async def mark_schedule_executed(
    db_session: AsyncSession,
    *,
    schedule_id: str,
    executed_at: datetime,
) -> Optional[ScheduledGeneration]:
    """Stamp ``last_executed_at``; returns None when the schedule no longer exists."""
    schedule = await get_schedule(db_session, schedule_id=schedule_id)
    if schedule is None:
        logger.warning("schedule_not_found", schedule_id=schedule_id)
        return None
    schedule.last_executed_at = executed_at
    logger.info(
        "schedule_marked_executed",
        schedule_id=schedule_id,
        executed_at=executed_at.isoformat(),
    )
    return schedule
