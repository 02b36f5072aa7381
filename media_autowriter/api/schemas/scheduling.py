"""Pydantic schemas for the scheduled generation trigger."""

from __future__ import annotations

from typing import List, Optional

from media_autowriter.agents.article_generation.models import TriggerSummary
from media_autowriter.api.schemas.article_generation import CamelModel


class ScheduleRunResponse(CamelModel):
    schedule_id: str
    schedule_name: str
    success: bool
    article_id: Optional[str] = None
    error: Optional[str] = None


class ScheduledTriggerResponse(CamelModel):
    success: bool = True
    message: str
    executed_count: int
    succeeded: int
    failed: int
    current_day_of_week: int
    current_time: str
    results: List[ScheduleRunResponse]

    @classmethod
    def from_summary(cls, summary: TriggerSummary) -> "ScheduledTriggerResponse":
        if summary.executed_count:
            message = f"Executed {summary.executed_count} scheduled generation(s)"
        else:
            message = "No schedules due"
        return cls(
            message=message,
            executed_count=summary.executed_count,
            succeeded=summary.succeeded,
            failed=summary.failed,
            current_day_of_week=summary.current_day_of_week,
            current_time=summary.current_time,
            results=[
                ScheduleRunResponse(
                    schedule_id=r.schedule_id,
                    schedule_name=r.schedule_name,
                    success=r.success,
                    article_id=r.article_id,
                    error=r.error,
                )
                for r in summary.results
            ],
        )
